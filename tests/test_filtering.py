"""
Tests for entry filtering.

These tests cover each filter dimension on its own, their combination, and
the algebraic properties the dashboard relies on (identity, idempotence, no
mutation).
"""

from datetime import date, datetime, timezone

import pytest

from secreto_diary.errors import ValidationError
from secreto_diary.filtering import filter_entries, sort_entries
from secreto_diary.models import DateMode, DiaryEntry, FilterSpec, Mood

CREATED = datetime(2024, 3, 1, 12, 0, tzinfo=timezone.utc)


def _entry(entry_date: str, title: str = "A day", content: str = "Nothing much", mood=None):
    return DiaryEntry(
        owner_id="alice",
        title=title,
        content=content,
        entry_date=date.fromisoformat(entry_date),
        mood=mood,
        created_at=CREATED,
    )


class TestFilterEntries:
    """Test suite for filter_entries."""

    def setup_method(self):
        self.entries = [
            _entry("2024-01-05", "Snow day", "Built a snowman", Mood.HAPPY),
            _entry("2024-01-20", "Rainy", "Stayed in and read", Mood.PEACEFUL),
            _entry("2024-02-10", "Work", "Deadline stress", Mood.FRUSTRATED),
            _entry("2024-02-11", "Dinner", "Cooked pasta with SNOW peas", Mood.HAPPY),
        ]

    def test_empty_filter_is_identity(self):
        assert filter_entries(self.entries, FilterSpec()) == self.entries

    def test_empty_entries(self):
        spec = FilterSpec.parse(term="snow", month="2024-01")
        assert filter_entries([], spec) == []

    def test_non_matching_term(self):
        assert filter_entries(self.entries, FilterSpec(term="volcano")) == []

    def test_term_is_case_insensitive_over_title_and_content(self):
        result = filter_entries(self.entries, FilterSpec(term="sNoW"))
        assert [e.title for e in result] == ["Snow day", "Dinner"]

    def test_mood(self):
        result = filter_entries(self.entries, FilterSpec(mood=Mood.HAPPY))
        assert [e.title for e in result] == ["Snow day", "Dinner"]

    def test_day(self):
        result = filter_entries(self.entries, FilterSpec.parse(day="2024-02-10"))
        assert [e.title for e in result] == ["Work"]

    def test_month(self):
        entries = [_entry("2024-01-05"), _entry("2024-02-10")]
        result = filter_entries(entries, FilterSpec.parse(month="2024-01"))
        assert result == [entries[0]]

    def test_month_does_not_match_same_month_of_other_year(self):
        entries = [_entry("2023-01-05"), _entry("2024-01-05")]
        result = filter_entries(entries, FilterSpec.parse(month="2024-01"))
        assert result == [entries[1]]

    def test_range_is_inclusive(self):
        spec = FilterSpec.parse(start="2024-01-20", end="2024-02-10")
        result = filter_entries(self.entries, spec)
        assert [e.title for e in result] == ["Rainy", "Work"]

    def test_range_single_day(self):
        spec = FilterSpec.parse(start="2024-02-11", end="2024-02-11")
        result = filter_entries(self.entries, spec)
        assert [e.title for e in result] == ["Dinner"]

    def test_range_start_after_end_matches_nothing(self):
        spec = FilterSpec.parse(start="2024-02-11", end="2024-01-01")
        assert filter_entries(self.entries, spec) == []

    def test_mode_without_parameter_does_not_filter(self):
        spec = FilterSpec(date_mode=DateMode.RANGE, start=date(2024, 1, 1))
        assert filter_entries(self.entries, spec) == self.entries

    def test_dimensions_combine_with_and(self):
        spec = FilterSpec.parse(term="snow", mood="happy", month="2024-02")
        result = filter_entries(self.entries, spec)
        assert [e.title for e in result] == ["Dinner"]

    def test_idempotent(self):
        spec = FilterSpec.parse(term="a", start="2024-01-01", end="2024-02-10")
        once = filter_entries(self.entries, spec)
        assert filter_entries(once, spec) == once

    def test_does_not_mutate_input(self):
        before = list(self.entries)
        snapshot = [e.model_dump() for e in self.entries]

        result = filter_entries(self.entries, FilterSpec(term="snow"))

        assert result is not self.entries
        assert self.entries == before
        assert [e.model_dump() for e in self.entries] == snapshot

    def test_sort_entries_newest_first(self):
        result = sort_entries(self.entries)
        assert [e.entry_date.isoformat() for e in result] == [
            "2024-02-11",
            "2024-02-10",
            "2024-01-20",
            "2024-01-05",
        ]


class TestFilterSpec:
    """Test suite for building FilterSpec from raw inputs."""

    def test_parse_infers_date_mode(self):
        assert FilterSpec.parse().date_mode == DateMode.NONE
        assert FilterSpec.parse(day="2024-01-05").date_mode == DateMode.DAY
        assert FilterSpec.parse(month="2024-01").month == (2024, 1)
        assert FilterSpec.parse(start="2024-01-01", end="2024-01-31").date_mode == DateMode.RANGE

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"day": "2024-02-30"},
            {"day": "yesterday"},
            {"month": "2024-13"},
            {"month": "January"},
            {"start": "2024-01-01", "end": "soon"},
            {"day": "2024W011"},
            {"day": "20240105"},
            {"day": "2024-1-5"},
            {"month": "2024-1"},
            {"month": "202401"},
        ],
    )
    def test_malformed_dates_fail_fast(self, kwargs):
        with pytest.raises(ValidationError):
            FilterSpec.parse(**kwargs)

    def test_conflicting_date_modes(self):
        with pytest.raises(ValidationError):
            FilterSpec.parse(day="2024-01-05", month="2024-01")

    def test_unknown_mood(self):
        with pytest.raises(ValidationError):
            FilterSpec.parse(mood="sleepy")

    def test_mood_by_emoji_or_label(self):
        assert FilterSpec.parse(mood="🥰").mood == Mood.IN_LOVE
        assert FilterSpec.parse(mood="in love").mood == Mood.IN_LOVE

    def test_is_active_and_cleared(self):
        spec = FilterSpec.parse(term="x")
        assert spec.is_active
        assert not spec.cleared().is_active

    def test_describe(self):
        assert FilterSpec.parse(day="2024-01-05").describe() == "Jan 5, 2024"
        assert FilterSpec.parse(month="2024-01").describe() == "January 2024"
        assert (
            FilterSpec.parse(start="2024-01-01", end="2024-01-31").describe()
            == "Jan 1, 2024 - Jan 31, 2024"
        )
        assert FilterSpec(term="x").describe() is None

    def test_direct_construction_parses_strings(self):
        spec = FilterSpec(date_mode="month", month="2024-01", mood="happy")
        assert spec.month == (2024, 1)
        assert spec.mood == Mood.HAPPY
        assert spec.describe() == "January 2024"

        spec = FilterSpec(date_mode=DateMode.RANGE, start="2024-01-20", end="2024-02-10")
        assert spec.start == date(2024, 1, 20)
        assert spec.end == date(2024, 2, 10)

    def test_direct_month_scenario(self):
        entries = [_entry("2024-01-05"), _entry("2024-02-10"), _entry("2024-01-31")]
        spec = FilterSpec(date_mode=DateMode.MONTH, month="2024-01")

        result = filter_entries(entries, spec)

        assert [e.entry_date.day for e in result] == [5, 31]

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"day": "2024-02-30"},
            {"start": "2024W011"},
            {"month": "2024-13"},
            {"month": (2024, 13)},
            {"month": (2024, 0)},
            {"mood": "sleepy"},
        ],
    )
    def test_malformed_direct_construction(self, kwargs):
        with pytest.raises(ValidationError):
            FilterSpec(**kwargs)
