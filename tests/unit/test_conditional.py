"""
Unit tests for If-Modified-Since evaluation.
"""

from datetime import datetime, timedelta, timezone

import pytest

from staticserver.files.conditional import is_not_modified, parse_http_date


NOON = datetime(2026, 1, 1, 12, 0, 0, tzinfo=timezone.utc)
NOON_HTTP = "Thu, 01 Jan 2026 12:00:00 GMT"


class TestParseHttpDate:
    """Tests for parse_http_date()."""

    @pytest.mark.parametrize("value", [
        "Thu, 01 Jan 2026 12:00:00 GMT",
        "Thursday, 01-Jan-26 12:00:00 GMT",
        "Thu Jan  1 12:00:00 2026",
    ])
    def test_accepted_formats(self, value):
        assert parse_http_date(value) == NOON

    def test_offset_converted_to_utc(self):
        parsed = parse_http_date("Thu, 01 Jan 2026 14:00:00 +0200")

        assert parsed == NOON
        assert parsed.tzinfo == timezone.utc

    @pytest.mark.parametrize("value", ["", "yesterday", "Thu, 99 Foo 2026"])
    def test_invalid(self, value):
        assert parse_http_date(value) is None


class TestIsNotModified:
    """Tests for the 304 decision."""

    def test_unchanged_file(self):
        assert is_not_modified(None, NOON_HTTP, NOON) is True

    def test_older_file(self):
        assert is_not_modified(None, NOON_HTTP, NOON - timedelta(days=1)) is True

    def test_subsecond_modification_within_tolerance(self):
        assert is_not_modified(None, NOON_HTTP, NOON + timedelta(milliseconds=400)) is True

    def test_modified_one_second_later(self):
        assert is_not_modified(None, NOON_HTTP, NOON + timedelta(seconds=1)) is False

    def test_newer_file(self):
        assert is_not_modified(None, NOON_HTTP, NOON + timedelta(hours=1)) is False

    def test_if_none_match_disables_shortcut(self):
        assert is_not_modified('"abc"', NOON_HTTP, NOON) is False

    def test_empty_if_none_match_still_counts(self):
        assert is_not_modified("", NOON_HTTP, NOON) is False

    def test_missing_if_modified_since(self):
        assert is_not_modified(None, None, NOON) is False

    def test_invalid_if_modified_since(self):
        assert is_not_modified(None, "not a date", NOON) is False

    def test_unknown_modification_time(self):
        assert is_not_modified(None, NOON_HTTP, None) is False
