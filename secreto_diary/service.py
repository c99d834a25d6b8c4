"""
Business logic for diary entries and user accounts.

The services sit between the HTTP layer and the stores. They own every rule
that is not pure filtering: ownership scoping, required fields, the edit
window, and best-effort photo cleanup on deletion.
"""

import asyncio
import logging
from collections.abc import Callable, Sequence
from datetime import date, datetime, timezone

from .capabilities import ImageStore, Translator
from .errors import (
    AuthError,
    DependencyError,
    EditWindowClosedError,
    NotFoundError,
    ValidationError,
)
from .filtering import filter_entries, sort_entries
from .models import DiaryEntry, FilterSpec, Mood, User
from .policy import edit_deadline, is_editable
from .security import TokenIssuer, hash_password, verify_password
from .store import EntryStore, UserStore

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 6

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _required_text(title: str | None, content: str | None) -> tuple[str, str]:
    title = (title or "").strip()
    content = (content or "").strip()
    if not title or not content:
        raise ValidationError("Title and content are required")
    return title, content


class DiaryService:
    """Owner-scoped operations on diary entries."""

    def __init__(
        self, entries: EntryStore, images: ImageStore, clock: Clock = utc_now
    ) -> None:
        self.entries = entries
        self.images = images
        self.clock = clock

    async def list_entries(
        self, owner_id: str, spec: FilterSpec | None = None
    ) -> list[DiaryEntry]:
        """
        List the owner's entries, newest entry date first.

        Args:
            owner_id: The authenticated user
            spec: Optional filter applied after sorting

        Returns:
            The owner's (matching) entries
        """
        entries = sort_entries(await self.entries.for_owner(owner_id))
        if spec is not None:
            entries = filter_entries(entries, spec)
        return entries

    async def get_entry(self, owner_id: str, entry_id: str) -> DiaryEntry:
        entry = await self.entries.get(owner_id, entry_id)
        if entry is None:
            raise NotFoundError("Entry not found")
        return entry

    async def create_entry(
        self,
        owner_id: str,
        title: str | None,
        content: str | None,
        entry_date: date | None = None,
        photos: Sequence[str] = (),
        mood: Mood | None = None,
    ) -> DiaryEntry:
        title, content = _required_text(title, content)
        now = self.clock()
        entry = DiaryEntry(
            owner_id=owner_id,
            title=title,
            content=content,
            entry_date=entry_date or now.date(),
            photos=tuple(photos),
            mood=mood,
            created_at=now,
            updated_at=now,
        )
        await self.entries.add(entry)
        logger.info("Created entry %s for %s", entry.id, owner_id)
        return entry

    def is_editable(self, entry: DiaryEntry) -> bool:
        return is_editable(entry.created_at, self.clock())

    async def update_entry(
        self, owner_id: str, entry_id: str, title: str | None, content: str | None
    ) -> DiaryEntry:
        """
        Replace an entry's title and content while it is still editable.

        Raises:
            NotFoundError: If the entry is absent or not owned by the caller
            EditWindowClosedError: If the edit window has passed
            ValidationError: If title or content is empty
        """
        entry = await self.get_entry(owner_id, entry_id)
        if not self.is_editable(entry):
            deadline = edit_deadline(entry.created_at)
            raise EditWindowClosedError(
                f"Entry can no longer be edited (editable until {deadline:%Y-%m-%d})"
            )

        title, content = _required_text(title, content)
        updated = entry.model_copy(
            update={"title": title, "content": content, "updated_at": self.clock()}
        )
        if not await self.entries.replace(updated):
            raise NotFoundError("Entry not found")
        return updated

    async def delete_entry(self, owner_id: str, entry_id: str) -> None:
        """
        Delete an entry and release its hosted photos.

        Photo cleanup is best-effort: failures are logged and the entry
        record is removed regardless.
        """
        entry = await self.get_entry(owner_id, entry_id)

        for url in entry.photos:
            try:
                await self.images.delete(url)
            except Exception:
                logger.exception("Failed to delete photo %s of entry %s", url, entry.id)

        await self.entries.delete(owner_id, entry_id)
        logger.info("Deleted entry %s for %s", entry_id, owner_id)

    async def translate_entry(
        self, owner_id: str, entry_id: str, translator: Translator, target: str
    ) -> tuple[str, str]:
        """Translate an entry's title and content into the target language."""
        entry = await self.get_entry(owner_id, entry_id)
        try:
            title = await translator.translate(entry.title, target)
            content = await translator.translate(entry.content, target)
        except DependencyError:
            logger.exception("Translation of entry %s failed", entry_id)
            raise
        return title, content


class AccountService:
    """Registration, login and profile lookup."""

    def __init__(
        self, users: UserStore, tokens: TokenIssuer, clock: Clock = utc_now
    ) -> None:
        self.users = users
        self.tokens = tokens
        self.clock = clock

    async def register(
        self, email: str | None, password: str | None, username: str | None
    ) -> tuple[str, User]:
        if not email or not password or not username:
            raise ValidationError("All fields are required")
        if len(password) < MIN_PASSWORD_LENGTH:
            raise ValidationError(
                f"Password must be at least {MIN_PASSWORD_LENGTH} characters long"
            )

        email = email.strip().lower()
        password_hash = await asyncio.to_thread(hash_password, password)
        if await self.users.find_by_email(email):
            raise ValidationError("Email already registered")
        if await self.users.find_by_username(username):
            raise ValidationError("Username already taken")

        user = await self.users.add(
            User(
                email=email,
                username=username,
                password_hash=password_hash,
                created_at=self.clock(),
            )
        )
        logger.info("Registered user %s", user.id)
        return self.tokens.issue(user), user

    async def login(self, email: str | None, password: str | None) -> tuple[str, User]:
        if not email or not password:
            raise ValidationError("Email and password are required")

        user = await self.users.find_by_email(email.strip().lower())
        if user is None or not await asyncio.to_thread(
            verify_password, password, user.password_hash
        ):
            raise AuthError("Invalid email or password")

        user = await self.users.save(user.model_copy(update={"last_login": self.clock()}))
        return self.tokens.issue(user), user

    async def authenticate(self, token: str) -> User:
        """Resolve a bearer token to its user."""
        claims = self.tokens.verify(token)
        user = await self.users.get(claims["sub"])
        if user is None:
            raise AuthError("Invalid or expired token")
        return user

    async def profile(self, user_id: str) -> User:
        user = await self.users.get(user_id)
        if user is None:
            raise NotFoundError("User not found")
        return user
