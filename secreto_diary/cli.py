"""
Command-line interface for the Secreto Diary service.
"""

import asyncio
import json
from collections.abc import Coroutine
from pathlib import Path
from typing import Any

import httpx
import typer

from .client import DEFAULT_BASE_URL, DiaryClient
from .dashboard import DashboardController, DashboardState
from .errors import DiaryError
from .models import DiaryEntry, FilterSpec, Mood, parse_day

app = typer.Typer(help="Secreto Diary CLI tools")

URL_OPTION = typer.Option(
    DEFAULT_BASE_URL, "--url", "-u", help="Base URL of the Secreto Diary service"
)
TOKEN_OPTION = typer.Option(
    None, "--token", "-t", envvar="SECRETO_TOKEN", help="Bearer token from `login`"
)


# MARK: - Commands


@app.command()
def register(
    email: str = typer.Argument(..., help="Account email"),
    username: str = typer.Argument(..., help="Public username"),
    password: str = typer.Option(..., prompt=True, hide_input=True),
    base_url: str = URL_OPTION,
) -> None:
    """Create an account and print its token."""

    async def _register() -> None:
        result = await DiaryClient(base_url).register(email, password, username)
        print(result["token"])

    _run_with_error_handling(_register(), base_url)


@app.command()
def login(
    email: str = typer.Argument(..., help="Account email"),
    password: str = typer.Option(..., prompt=True, hide_input=True),
    base_url: str = URL_OPTION,
) -> None:
    """Log in and print a token (export it as SECRETO_TOKEN)."""

    async def _login() -> None:
        result = await DiaryClient(base_url).login(email, password)
        print(result["token"])

    _run_with_error_handling(_login(), base_url)


@app.command()
def entries(
    search: str | None = typer.Option(None, "--search", "-s", help="Text in title or content"),
    mood: str | None = typer.Option(None, "--mood", "-m", help="Mood emoji or label"),
    day: str | None = typer.Option(None, "--day", help="YYYY-MM-DD"),
    month: str | None = typer.Option(None, "--month", help="YYYY-MM"),
    start: str | None = typer.Option(None, "--start", help="Range start, YYYY-MM-DD"),
    end: str | None = typer.Option(None, "--end", help="Range end, YYYY-MM-DD"),
    base_url: str = URL_OPTION,
    token: str | None = TOKEN_OPTION,
) -> None:
    """List entries, optionally filtered."""
    spec = _parse_or_exit(
        lambda: FilterSpec.parse(
            term=search, mood=mood, day=day, month=month, start=start, end=end
        )
    )

    async def _entries() -> None:
        client = DiaryClient(base_url, token)
        dashboard = DashboardController(client.list_entries)
        if await dashboard.load() == DashboardState.ERROR:
            raise dashboard.error

        dashboard.set_filter(spec)
        if spec.is_active:
            print(f"Filters: {_describe_filters(spec)}")
        if dashboard.empty_reason == "no_entries":
            print("No secrets yet")
        elif dashboard.empty_reason == "no_matches":
            print("No entries match your search")

        for entry in dashboard.visible:
            print(_format_entry_line(entry))

    _run_with_error_handling(_entries(), base_url)


@app.command()
def show(
    entry_id: str = typer.Argument(..., help="Entry id"),
    json_output: bool = typer.Option(False, "--json", "-j", help="Output raw JSON"),
    base_url: str = URL_OPTION,
    token: str | None = TOKEN_OPTION,
) -> None:
    """Show one entry."""

    async def _show() -> None:
        data = await DiaryClient(base_url, token).get_entry(entry_id)
        if json_output:
            print(json.dumps(data, indent=2, ensure_ascii=False))
            return

        mood = f" {data['mood_emoji']}" if data.get("mood_emoji") else ""
        print(f"{data['title']}{mood}  ({data['entry_date']})")
        print()
        print(data["content"])
        for url in data["photos"]:
            print(f"  photo: {url}")
        if not data["editable"]:
            print("\n(read-only: the edit window has passed)")

    _run_with_error_handling(_show(), base_url)


@app.command()
def write(
    title: str = typer.Argument(..., help="Entry title"),
    content: str = typer.Argument(..., help="Entry text"),
    entry_date: str | None = typer.Option(None, "--date", "-d", help="YYYY-MM-DD, defaults to today"),
    mood: str | None = typer.Option(None, "--mood", "-m", help="Mood emoji or label"),
    photos: list[Path] | None = typer.Option(None, "--photo", "-p", help="Image file to attach"),
    base_url: str = URL_OPTION,
    token: str | None = TOKEN_OPTION,
) -> None:
    """Write a new entry."""
    when = _parse_or_exit(lambda: parse_day(entry_date, "date")) if entry_date else None
    tag = _parse_or_exit(lambda: Mood.parse(mood)) if mood else None

    async def _write() -> None:
        client = DiaryClient(base_url, token)
        urls = []
        for path in photos or []:
            content_type = f"image/{path.suffix.lstrip('.').lower() or 'jpeg'}"
            urls.append(await client.upload_photo(path.name, path.read_bytes(), content_type))

        entry_id = await client.create_entry(title, content, when, urls, tag)
        print(f"Created entry {entry_id}")

    _run_with_error_handling(_write(), base_url)


@app.command()
def edit(
    entry_id: str = typer.Argument(..., help="Entry id"),
    title: str = typer.Argument(..., help="New title"),
    content: str = typer.Argument(..., help="New text"),
    base_url: str = URL_OPTION,
    token: str | None = TOKEN_OPTION,
) -> None:
    """Replace an entry's title and content while it is still editable."""

    async def _edit() -> None:
        await DiaryClient(base_url, token).update_entry(entry_id, title, content)
        print("Entry updated")

    _run_with_error_handling(_edit(), base_url)


@app.command()
def delete(
    entry_id: str = typer.Argument(..., help="Entry id"),
    base_url: str = URL_OPTION,
    token: str | None = TOKEN_OPTION,
) -> None:
    """Delete an entry and its photos."""

    async def _delete() -> None:
        await DiaryClient(base_url, token).delete_entry(entry_id)
        print("Entry deleted")

    _run_with_error_handling(_delete(), base_url)


@app.command()
def translate(
    entry_id: str = typer.Argument(..., help="Entry id"),
    target: str | None = typer.Option(None, "--to", help="Target language code"),
    base_url: str = URL_OPTION,
    token: str | None = TOKEN_OPTION,
) -> None:
    """Translate an entry."""

    async def _translate() -> None:
        result = await DiaryClient(base_url, token).translate_entry(entry_id, target)
        print(result["title"])
        print()
        print(result["content"])

    _run_with_error_handling(_translate(), base_url)


# MARK: - Private Helpers


def _format_entry_line(entry: DiaryEntry) -> str:
    mood = f" {entry.mood.value}" if entry.mood else ""
    return f"{entry.entry_date:%Y-%m-%d}  {entry.id}  {entry.title}{mood}"


def _describe_filters(spec: FilterSpec) -> str:
    parts = []
    if spec.term:
        parts.append(f'"{spec.term}"')
    if spec.mood:
        parts.append(spec.mood.value)
    if described := spec.describe():
        parts.append(described)
    return ", ".join(parts)


def _parse_or_exit(parse):
    try:
        return parse()
    except DiaryError as e:
        print(f"Error: {e.message}")
        raise typer.Exit(2)


def _error_detail(response: httpx.Response) -> str:
    try:
        return response.json().get("error", "")
    except ValueError:
        return ""


def _run_with_error_handling(coro: Coroutine[Any, Any, Any], base_url: str) -> None:
    """Run an async coroutine with standardized error handling."""
    try:
        asyncio.run(coro)
    except KeyboardInterrupt:
        print("\nStopped")
        raise typer.Exit(0)
    except httpx.ConnectError:
        print(f"Error: Could not connect to {base_url}")
        raise typer.Exit(1)
    except httpx.HTTPStatusError as e:
        detail = _error_detail(e.response)
        print(f"Error: HTTP {e.response.status_code}" + (f" - {detail}" if detail else ""))
        raise typer.Exit(1)
    except Exception as e:
        error_msg = str(e) if str(e) else f"Unknown error of type {type(e).__name__}"
        print(f"Error: {error_msg}")
        raise typer.Exit(1)


def main() -> None:
    app()


if __name__ == "__main__":
    main()
