"""
Shared data models for the Secreto Diary service.

This module defines the core domain models used across multiple layers
of the application (business logic, CLI, API).
"""

import re
from datetime import date, datetime
from enum import Enum
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .errors import ValidationError


class Mood(str, Enum):
    """The fixed set of mood tags an entry can carry."""

    HAPPY = "😊"
    IN_LOVE = "🥰"
    SAD = "😔"
    PEACEFUL = "😌"
    FRUSTRATED = "😤"
    EMOTIONAL = "🥺"
    INSPIRED = "✨"
    THOUGHTFUL = "💭"
    GRATEFUL = "💝"
    FREE = "🦋"

    @property
    def label(self) -> str:
        return self.name.replace("_", " ").title()

    @classmethod
    def parse(cls, raw: str) -> "Mood":
        """Accept either the emoji itself or its label ("happy", "In Love")."""
        value = raw.strip()
        for mood in cls:
            if value == mood.value or value.lower() == mood.label.lower():
                return mood
        raise ValidationError(f"Unknown mood: {raw!r}")


class DateMode(str, Enum):
    NONE = "none"
    DAY = "day"
    MONTH = "month"
    RANGE = "range"


class DiaryEntry(BaseModel):
    """A single diary record authored by one user for one calendar date."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=lambda: uuid4().hex)
    owner_id: str
    title: str = Field(..., min_length=1)
    content: str = Field(..., min_length=1)
    entry_date: date = Field(..., description="Calendar date the entry is about")
    photos: tuple[str, ...] = ()
    mood: Mood | None = None
    created_at: datetime
    updated_at: datetime | None = None


class User(BaseModel):
    """A registered diary owner."""

    id: str = Field(default_factory=lambda: uuid4().hex)
    email: str
    username: str
    password_hash: str
    avatar_url: str | None = None
    created_at: datetime
    last_login: datetime | None = None


# MARK: - Filtering


DAY_PATTERN = re.compile(r"\d{4}-\d{2}-\d{2}")
MONTH_PATTERN = re.compile(r"\d{4}-\d{2}")


def parse_day(raw: str, field: str = "day") -> date:
    """Parse a "YYYY-MM-DD" string, failing with ValidationError."""
    value = raw.strip()
    try:
        if not DAY_PATTERN.fullmatch(value):
            raise ValueError(value)
        return date.fromisoformat(value)
    except ValueError:
        raise ValidationError(f"{field} must be YYYY-MM-DD, got {raw!r}")


def parse_month(raw: str) -> tuple[int, int]:
    """Parse a "YYYY-MM" string into a (year, month) pair, month 1-indexed."""
    value = raw.strip()
    if not MONTH_PATTERN.fullmatch(value):
        raise ValidationError(f"month must be YYYY-MM, got {raw!r}")
    return check_month(int(value[:4]), int(value[5:]))


def check_month(year: int, month: int) -> tuple[int, int]:
    if not 1 <= month <= 12 or year < 1:
        raise ValidationError(f"month must be YYYY-MM, got {year:04d}-{month:02d}")
    return year, month


class FilterSpec(BaseModel):
    """The combined search and filter criteria applied to a list of entries."""

    model_config = ConfigDict(frozen=True)

    term: str = ""
    mood: Mood | None = None
    date_mode: DateMode = DateMode.NONE
    day: date | None = None
    month: tuple[int, int] | None = None
    start: date | None = None
    end: date | None = None

    # Raw strings are parsed the same way as query parameters.
    @field_validator("day", "start", "end", mode="before")
    @classmethod
    def _parse_day_field(cls, value, info):
        if isinstance(value, str):
            return parse_day(value, info.field_name)
        return value

    @field_validator("month", mode="before")
    @classmethod
    def _parse_month_field(cls, value):
        if isinstance(value, str):
            return parse_month(value)
        if (
            isinstance(value, (tuple, list))
            and len(value) == 2
            and all(isinstance(v, int) for v in value)
        ):
            return check_month(*value)
        return value

    @field_validator("mood", mode="before")
    @classmethod
    def _parse_mood_field(cls, value):
        if isinstance(value, str) and not isinstance(value, Mood):
            return Mood.parse(value)
        return value

    @classmethod
    def parse(
        cls,
        term: str | None = None,
        mood: str | None = None,
        day: str | None = None,
        month: str | None = None,
        start: str | None = None,
        end: str | None = None,
    ) -> "FilterSpec":
        """
        Build a FilterSpec from raw string inputs (query parameters, CLI options).

        The date mode is inferred from which date inputs are present; asking
        for more than one mode at once is rejected.

        Raises:
            ValidationError: On malformed dates, unknown moods or conflicting modes
        """
        modes = []
        if day:
            modes.append(DateMode.DAY)
        if month:
            modes.append(DateMode.MONTH)
        if start or end:
            modes.append(DateMode.RANGE)
        if len(modes) > 1:
            raise ValidationError("Only one of day, month or start/end may be given")

        return cls(
            term=term or "",
            mood=Mood.parse(mood) if mood else None,
            date_mode=modes[0] if modes else DateMode.NONE,
            day=parse_day(day) if day else None,
            month=parse_month(month) if month else None,
            start=parse_day(start, "start") if start else None,
            end=parse_day(end, "end") if end else None,
        )

    @property
    def is_active(self) -> bool:
        return bool(self.term) or self.mood is not None or self.date_mode != DateMode.NONE

    def cleared(self) -> "FilterSpec":
        return FilterSpec()

    def describe(self) -> str | None:
        """Human-readable summary of the active date filter, if any."""
        if self.date_mode == DateMode.DAY and self.day:
            return _format_day(self.day)
        if self.date_mode == DateMode.MONTH and self.month:
            year, month = self.month
            return date(year, month, 1).strftime("%B %Y")
        if self.date_mode == DateMode.RANGE and self.start and self.end:
            return f"{_format_day(self.start)} - {_format_day(self.end)}"
        return None


def _format_day(value: date) -> str:
    return f"{value:%b} {value.day}, {value.year}"
