"""
Entry and user storage for the Secreto Diary service.

This module provides in-memory stores keyed by owner. All methods are
coroutines guarded by an asyncio lock so they can be swapped for a document
database backend without changing their callers.
"""

import asyncio

from .models import DiaryEntry, User


class EntryStore:
    """
    In-memory diary entry storage, scoped by owner.

    Entries are immutable models, so reads hand out the stored objects
    directly and updates replace them wholesale.
    """

    def __init__(self) -> None:
        self._entries: dict[str, dict[str, DiaryEntry]] = {}
        self._lock = asyncio.Lock()

    async def add(self, entry: DiaryEntry) -> DiaryEntry:
        async with self._lock:
            self._entries.setdefault(entry.owner_id, {})[entry.id] = entry
            return entry

    async def get(self, owner_id: str, entry_id: str) -> DiaryEntry | None:
        async with self._lock:
            return self._entries.get(owner_id, {}).get(entry_id)

    async def for_owner(self, owner_id: str) -> list[DiaryEntry]:
        async with self._lock:
            return list(self._entries.get(owner_id, {}).values())

    async def replace(self, entry: DiaryEntry) -> bool:
        """Overwrite an existing entry; returns False when it is gone."""
        async with self._lock:
            owned = self._entries.get(entry.owner_id, {})
            if entry.id not in owned:
                return False
            owned[entry.id] = entry
            return True

    async def delete(self, owner_id: str, entry_id: str) -> bool:
        async with self._lock:
            return self._entries.get(owner_id, {}).pop(entry_id, None) is not None


class UserStore:
    """In-memory user storage with lookups by id, email and username."""

    def __init__(self) -> None:
        self._users: dict[str, User] = {}
        self._lock = asyncio.Lock()

    async def add(self, user: User) -> User:
        async with self._lock:
            self._users[user.id] = user
            return user

    async def save(self, user: User) -> User:
        return await self.add(user)

    async def get(self, user_id: str) -> User | None:
        async with self._lock:
            return self._users.get(user_id)

    async def find_by_email(self, email: str) -> User | None:
        async with self._lock:
            return next((u for u in self._users.values() if u.email == email), None)

    async def find_by_username(self, username: str) -> User | None:
        async with self._lock:
            return next(
                (u for u in self._users.values() if u.username == username), None
            )

    async def count(self) -> int:
        async with self._lock:
            return len(self._users)
