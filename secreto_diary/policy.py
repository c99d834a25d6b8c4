"""
Edit-window policy: entries become read-only a few days after creation.

The creation timestamp gates editing, never the (possibly backdated) entry
date, so an entry about last month written today is still editable.
"""

from datetime import datetime, time, timedelta, timezone

EDIT_WINDOW_DAYS = 3


def _as_utc(moment: datetime) -> datetime:
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc)


def days_between(now: datetime, created_at: datetime) -> int:
    """Whole calendar days from the creation date to the current date (UTC)."""
    return (_as_utc(now).date() - _as_utc(created_at).date()).days


def is_editable(created_at: datetime, now: datetime) -> bool:
    """Return whether an entry created at `created_at` may still be edited."""
    return days_between(now, created_at) <= EDIT_WINDOW_DAYS


def edit_deadline(created_at: datetime) -> datetime:
    """The last instant (UTC) at which the entry is still editable."""
    last_day = _as_utc(created_at).date() + timedelta(days=EDIT_WINDOW_DAYS)
    return datetime.combine(last_day, time.max, tzinfo=timezone.utc)
