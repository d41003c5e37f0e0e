"""Unit tests for relative time expressions and flexible durations."""

from datetime import UTC, datetime, timedelta

import pytest

from rulesengine.domain.engine.timeparse import (
    TimeParseError,
    is_relative_time,
    parse_flexible_duration,
    parse_relative_time,
    relative_base,
)

NOW = datetime(2024, 5, 17, 14, 30, 45, 123456, tzinfo=UTC)


class TestRelativeBase:
    """Test period truncation."""

    @pytest.mark.parametrize(
        "base, expected",
        [
            ("now", NOW),
            ("today", datetime(2024, 5, 17, tzinfo=UTC)),
            ("thisDay", datetime(2024, 5, 17, tzinfo=UTC)),
            ("thisMonth", datetime(2024, 5, 1, tzinfo=UTC)),
            ("THISYEAR", datetime(2024, 1, 1, tzinfo=UTC)),
        ],
    )
    def test_relative_base(self, base, expected):
        assert relative_base(base, NOW) == expected

    def test_relative_base__unknown__raises(self):
        with pytest.raises(TimeParseError):
            relative_base("tomorrow", NOW)


class TestParseRelativeTime:
    """Test relative expressions."""

    def test_this_year_plus_one_year__is_next_january_first(self):
        now = datetime.now(UTC)

        resolved = parse_relative_time("thisYear+1y", now)

        assert resolved == datetime(now.year + 1, 1, 1, tzinfo=UTC)

    @pytest.mark.parametrize(
        "expression, expected",
        [
            ("thisYear-1", datetime(2023, 1, 1, tzinfo=UTC)),
            ("thisMonth+2", datetime(2024, 7, 1, tzinfo=UTC)),
            ("today-3", datetime(2024, 5, 14, tzinfo=UTC)),
            ("today - 3d", datetime(2024, 5, 14, tzinfo=UTC)),
            ("now+1h", NOW + timedelta(hours=1)),
            ("now-90m", NOW - timedelta(minutes=90)),
            ("now+2w", NOW + timedelta(weeks=2)),
            ("now+1mo", datetime(2024, 6, 17, 14, 30, 45, 123456, tzinfo=UTC)),
            ("now+500ms", NOW + timedelta(milliseconds=500)),
            ("thisYear+6months", datetime(2024, 7, 1, tzinfo=UTC)),
        ],
    )
    def test_parse_relative_time(self, expression, expected):
        assert parse_relative_time(expression, NOW) == expected

    def test_parse_relative_time__keeps_naive_reference(self):
        naive = datetime(2024, 5, 17, 8, 0)

        assert parse_relative_time("today", naive) == datetime(2024, 5, 17)

    @pytest.mark.parametrize("expression", ["yesterday", "now+", "now+5", "now+5 parsecs", "thisYear*2"])
    def test_parse_relative_time__malformed__raises(self, expression):
        with pytest.raises(TimeParseError):
            parse_relative_time(expression, NOW)

    @pytest.mark.parametrize(
        "expression",
        ["thisYear+9000y", "now-99999999999d", "thisMonth+999999999999", "now+99999999999999999999999ns"],
    )
    def test_parse_relative_time__out_of_range__raises(self, expression):
        with pytest.raises(TimeParseError, match="out of range"):
            parse_relative_time(expression, NOW)

    @pytest.mark.parametrize(
        "value, expected",
        [("now", True), ("thisMonth-1", True), (" today ", True), ("2024-01-01", False), (5, False)],
    )
    def test_is_relative_time(self, value, expected):
        assert is_relative_time(value) is expected


class TestParseFlexibleDuration:
    """Test duration parsing."""

    @pytest.mark.parametrize(
        "expression, expected",
        [
            ("10s", timedelta(seconds=10)),
            ("1h30m", timedelta(hours=1, minutes=30)),
            ("2w", timedelta(weeks=2)),
            ("1mo", timedelta(days=30)),
            ("1y", timedelta(days=365)),
            ("1.5d", timedelta(hours=36)),
            ("250ms", timedelta(milliseconds=250)),
            ("1d 12h", timedelta(hours=36)),
            ("1Y2MO", timedelta(days=425)),
        ],
    )
    def test_parse_flexible_duration(self, expression, expected):
        assert parse_flexible_duration(expression) == expected

    @pytest.mark.parametrize("expression", ["", "   ", "10", "ten seconds", "5x", "1h-30m", None])
    def test_parse_flexible_duration__malformed__raises(self, expression):
        with pytest.raises(TimeParseError):
            parse_flexible_duration(expression)

    @pytest.mark.parametrize("expression", ["99999999999999d", "1" + "0" * 400 + "s"])
    def test_parse_flexible_duration__out_of_range__raises(self, expression):
        with pytest.raises(TimeParseError, match="out of range"):
            parse_flexible_duration(expression)
