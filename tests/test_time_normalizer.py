"""Tests for vote timestamp normalization."""

from datetime import datetime, timedelta

import pytest

from votebot.constants import TimeConstants
from votebot.utils.time_normalizer import (
    format_display,
    normalize_timestamp,
    parse_display,
    parse_source_timestamp,
)


VALID_SOURCES = [
    "June 23rd, 2024 08:15 PM EST",
    "January 1st, 2025 12:00 AM EST",
    "December 31st, 2024 11:45 PM EST",
    "March 2nd, 2024 07:05:09 AM EST",
    "2024-02-29 13:30:00 EST",
]


class TestNormalizeTimestamp:
    def test_evening_vote_rolls_into_next_day(self):
        assert normalize_timestamp("June 23rd, 2024 08:15 PM EST") == "24/06/2024, 6:45:00 AM IST"

    def test_midnight_source(self):
        assert normalize_timestamp("January 1st, 2025 12:00 AM EST") == "01/01/2025, 10:30:00 AM IST"

    def test_year_boundary(self):
        assert normalize_timestamp("December 31st, 2024 11:45 PM EST") == "01/01/2025, 10:15:00 AM IST"

    def test_noon_renders_as_pm(self):
        # 01:30 EST is 12:00 IST
        assert normalize_timestamp("May 5th, 2024 01:30 AM EST") == "05/05/2024, 12:00:00 PM IST"

    def test_without_timezone_label(self):
        assert normalize_timestamp("June 23rd, 2024 08:15 PM") == "24/06/2024, 6:45:00 AM IST"

    @pytest.mark.parametrize("value", ["Unknown", "", "   ", None])
    def test_unknown_and_empty_pass_through(self, value):
        assert normalize_timestamp(value) == TimeConstants.UNKNOWN

    @pytest.mark.parametrize("value", ["garbled timestamp", "EST", "13/45/99999 99:99"])
    def test_garbled_input_returns_invalid_sentinel(self, value):
        assert normalize_timestamp(value) == TimeConstants.INVALID

    def test_is_stable_across_calls(self):
        first = normalize_timestamp("June 23rd, 2024 08:15 PM EST")
        assert all(normalize_timestamp("June 23rd, 2024 08:15 PM EST") == first for _ in range(5))


class TestRoundTrip:
    @pytest.mark.parametrize("source", VALID_SOURCES)
    def test_display_recovers_source_instant(self, source):
        instant = parse_source_timestamp(source)
        display = normalize_timestamp(source)

        assert instant is not None
        assert parse_display(display) == instant

    @pytest.mark.parametrize("source", VALID_SOURCES)
    def test_fixed_offset_delta(self, source):
        instant = parse_source_timestamp(source)
        shown = parse_display(normalize_timestamp(source))

        assert shown.replace(tzinfo=None) - instant.replace(tzinfo=None) == timedelta(hours=10, minutes=30)

    def test_parse_display_rejects_other_layouts(self):
        assert parse_display("2024-06-24 06:45") is None
        assert parse_display(TimeConstants.INVALID) is None


def test_format_display_uses_twelve_hour_clock():
    moment = datetime(2024, 6, 24, 0, 5, 7, tzinfo=TimeConstants.TARGET_TIMEZONE)
    assert format_display(moment) == "24/06/2024, 12:05:07 AM IST"
