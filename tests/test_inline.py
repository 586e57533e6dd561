"""Unit tests for the inline task language."""

import pytest
from datetime import date

from treedo.inline import (
    ParsedTask, describe, next_weekday, parse_due_date, parse_priority, parse_task_input,
)
from treedo.models import Priority

TODAY = date(2026, 10, 19)  # Monday


class TestParseTaskInput:
    """Test splitting free text into task fields."""

    def test_full_example(self):
        """Tags, due date and priority are pulled out of the title."""
        parsed = parse_task_input("Buy milk #grocery #urgent @tomorrow !high", TODAY)
        assert parsed.title == "Buy milk"
        assert parsed.tags == ["grocery", "urgent"]
        assert parsed.due_date == "2026-10-20"
        assert parsed.priority == Priority.HIGH

    def test_only_sigils_gives_empty_title(self):
        """Unknown priority is dropped; an empty title means nothing to save."""
        parsed = parse_task_input("   #a !bogus", TODAY)
        assert parsed.title == ""
        assert parsed.tags == ["a"]
        assert parsed.priority == Priority.NORMAL
        assert parsed.due_date == ""

    def test_sigils_anywhere(self):
        """Tokens are classified wherever they appear; title order is kept."""
        parsed = parse_task_input("!low call #work the   bank", TODAY)
        assert parsed.title == "call the bank"
        assert parsed.tags == ["work"]
        assert parsed.priority == Priority.LOW

    def test_empty_tag_ignored(self):
        parsed = parse_task_input("water plants # #home", TODAY)
        assert parsed.tags == ["home"]

    def test_last_date_and_priority_win(self):
        """Later tokens override earlier ones; unrecognized priorities do not."""
        parsed = parse_task_input("report @today @fri !high !whenever", TODAY)
        assert parsed.due_date == "2026-10-23"
        assert parsed.priority == Priority.HIGH

    def test_blocked_shorthand(self):
        assert parse_task_input("deploy !b", TODAY).priority == Priority.BLOCKED


class TestParseDueDate:
    """Test due-date token resolution."""

    @pytest.mark.parametrize("token,expected", [
        ("today", "2026-10-19"),
        ("TOMORROW", "2026-10-20"),
        ("tmr", "2026-10-20"),
        ("week", "2026-10-26"),
        ("nextweek", "2026-10-26"),
        ("2026-12-01", "2026-12-01"),
        ("12-25", "2026-12-25"),
    ])
    def test_keywords_and_formats(self, token, expected):
        assert parse_due_date(token, TODAY) == expected

    def test_weekday_is_strictly_after_today(self):
        """Naming today's weekday means next week."""
        assert parse_due_date("monday", TODAY) == "2026-10-26"
        assert parse_due_date("tue", TODAY) == "2026-10-20"
        assert parse_due_date("sun", TODAY) == "2026-10-25"

    def test_unrecognized_passes_through_lowercased(self):
        assert parse_due_date("Someday", TODAY) == "someday"
        assert parse_due_date("13-45", TODAY) == "13-45"

    def test_dates_must_be_zero_padded(self):
        assert parse_due_date("2026-1-5", TODAY) == "2026-1-5"
        assert parse_due_date("1-5", TODAY) == "1-5"
        assert parse_due_date("2026-02-30", TODAY) == "2026-02-30"

    def test_leap_day_rolls_over_in_common_year(self):
        assert parse_due_date("02-29", TODAY) == "2026-03-01"
        assert parse_due_date("02-29", date(2028, 1, 1)) == "2028-02-29"
        assert parse_due_date("02-30", TODAY) == "02-30"

    def test_next_weekday(self):
        assert next_weekday(TODAY, 4) == date(2026, 10, 23)
        assert next_weekday(TODAY, 0) == date(2026, 10, 26)


class TestParsePriority:
    """Test priority keyword mapping."""

    def test_keywords(self):
        assert parse_priority("HIGH") == Priority.HIGH
        assert parse_priority("l") == Priority.LOW
        assert parse_priority("normal") == Priority.NORMAL
        assert parse_priority("nope") is None

    def test_numeric_only_when_allowed(self):
        assert parse_priority("2") is None
        assert parse_priority("2", numeric=True) == Priority.HIGH
        assert parse_priority("-1", numeric=True) == Priority.BLOCKED
        assert parse_priority("7", numeric=True) is None


class TestDescribe:
    """Test the command-line summary line."""

    def test_plain(self):
        assert describe(ParsedTask(title="Buy milk")) == "Added: Buy milk"

    def test_with_fields(self):
        parsed = ParsedTask(title="Buy milk", tags=["a", "b"], due_date="2026-10-20", priority=Priority.LOW)
        assert describe(parsed) == "Added: Buy milk [tags: a b] [due: 2026-10-20] [priority: low]"
