"""
Headless dashboard controller.

Drives the fetch -> filter -> render cycle: once the initial fetch succeeds,
every change to the entry list or to the filter recomputes the visible
entries synchronously.
"""

import logging
from collections.abc import Awaitable, Callable, Sequence
from enum import Enum

from .filtering import filter_entries
from .models import DiaryEntry, FilterSpec

logger = logging.getLogger(__name__)

Fetcher = Callable[[], Awaitable[Sequence[DiaryEntry]]]


class DashboardState(str, Enum):
    LOADING = "loading"
    READY = "ready"
    ERROR = "error"


class DashboardController:
    """
    Holds the entry list, the active filter and the filtered view.

    Args:
        fetch: Coroutine function returning the user's entries
    """

    def __init__(self, fetch: Fetcher) -> None:
        self._fetch = fetch
        self.state = DashboardState.LOADING
        self.error: Exception | None = None
        self.entries: list[DiaryEntry] = []
        self.spec = FilterSpec()
        self.visible: list[DiaryEntry] = []

    async def load(self) -> DashboardState:
        """Run the initial fetch, ending in READY or ERROR."""
        self.state = DashboardState.LOADING
        try:
            entries = await self._fetch()
        except Exception as e:
            logger.error("Error fetching entries: %s", e)
            self.error = e
            self.state = DashboardState.ERROR
            return self.state

        self.error = None
        self.state = DashboardState.READY
        self.set_entries(entries)
        return self.state

    async def refresh(self) -> DashboardState:
        return await self.load()

    def _require_ready(self) -> None:
        if self.state != DashboardState.READY:
            raise RuntimeError(f"Dashboard is {self.state.value}, not ready")

    def _recompute(self) -> None:
        self.visible = filter_entries(self.entries, self.spec)

    def set_entries(self, entries: Sequence[DiaryEntry]) -> None:
        self._require_ready()
        self.entries = list(entries)
        self._recompute()

    def remove_entry(self, entry_id: str) -> None:
        self._require_ready()
        self.entries = [e for e in self.entries if e.id != entry_id]
        self._recompute()

    def set_filter(self, spec: FilterSpec) -> None:
        self._require_ready()
        self.spec = spec
        self._recompute()

    def clear_filter(self) -> None:
        self.set_filter(self.spec.cleared())

    @property
    def empty_reason(self) -> str | None:
        if self.state != DashboardState.READY or self.visible:
            return None
        return "no_entries" if not self.entries else "no_matches"
