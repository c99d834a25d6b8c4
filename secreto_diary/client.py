"""
Async HTTP client for the Secreto Diary API.

The bearer token lives on the client instance that was given it; there is
no process-wide token state. Use `with_token` to derive an authenticated
client after logging in.
"""

from datetime import date
from typing import Any

import httpx

from .models import DiaryEntry, Mood

DEFAULT_BASE_URL = "http://localhost:3001"


def entry_from_wire(data: dict[str, Any]) -> DiaryEntry:
    """Convert the API's entry JSON into a DiaryEntry."""
    mood = data.get("mood_emoji")
    return DiaryEntry(
        id=data["id"],
        owner_id=data.get("user_id", ""),
        title=data["title"],
        content=data["content"],
        entry_date=date.fromisoformat(data["entry_date"]),
        photos=tuple(data.get("photos") or ()),
        mood=Mood(mood) if mood else None,
        created_at=data["created_at"],
        updated_at=data.get("updated_at"),
    )


class DiaryClient:
    """
    Thin wrapper over the REST API.

    Args:
        base_url: Server root, without the /api prefix
        token: Bearer token for authenticated calls
        transport: Optional httpx transport (used by tests)
    """

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        token: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        timeout: float = 10.0,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.token = token
        self._transport = transport
        self._timeout = timeout

    def with_token(self, token: str) -> "DiaryClient":
        return DiaryClient(self.base_url, token, self._transport, self._timeout)

    async def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        headers = kwargs.pop("headers", {})
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"

        async with httpx.AsyncClient(
            base_url=f"{self.base_url}/api",
            transport=self._transport,
            timeout=self._timeout,
        ) as client:
            response = await client.request(method, path, headers=headers, **kwargs)
            response.raise_for_status()
            return response.json()

    # MARK: - Accounts

    async def register(self, email: str, password: str, username: str) -> dict:
        return await self._request(
            "POST",
            "/auth/register",
            json={"email": email, "password": password, "username": username},
        )

    async def login(self, email: str, password: str) -> dict:
        return await self._request(
            "POST", "/auth/login", json={"email": email, "password": password}
        )

    async def profile(self) -> dict:
        return await self._request("GET", "/profile")

    # MARK: - Entries

    async def list_entries(self, **filters: str) -> list[DiaryEntry]:
        params = {k: v for k, v in filters.items() if v}
        data = await self._request("GET", "/entries", params=params)
        return [entry_from_wire(item) for item in data]

    async def get_entry(self, entry_id: str) -> dict:
        return await self._request("GET", f"/entries/{entry_id}")

    async def create_entry(
        self,
        title: str,
        content: str,
        entry_date: date | None = None,
        photos: list[str] | None = None,
        mood: Mood | None = None,
    ) -> str:
        payload: dict[str, Any] = {"title": title, "content": content}
        if entry_date:
            payload["entry_date"] = entry_date.isoformat()
        if photos:
            payload["photos"] = photos
        if mood:
            payload["mood_emoji"] = mood.value
        result = await self._request("POST", "/entries", json=payload)
        return result["id"]

    async def update_entry(self, entry_id: str, title: str, content: str) -> dict:
        return await self._request(
            "PUT", f"/entries/{entry_id}", json={"title": title, "content": content}
        )

    async def delete_entry(self, entry_id: str) -> dict:
        return await self._request("DELETE", f"/entries/{entry_id}")

    async def translate_entry(self, entry_id: str, target: str | None = None) -> dict:
        params = {"target": target} if target else {}
        return await self._request(
            "POST", f"/entries/{entry_id}/translate", params=params
        )

    async def upload_photo(self, filename: str, data: bytes, content_type: str) -> str:
        result = await self._request(
            "POST", "/upload", files={"photo": (filename, data, content_type)}
        )
        return result["url"]

    async def keep_alive(self) -> dict:
        return await self._request("GET", "/keep-alive")
