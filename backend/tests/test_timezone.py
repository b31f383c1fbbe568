from datetime import datetime, timezone

from utils.timezone import (
    format_display_datetime,
    format_game_date,
    format_game_time,
    format_relative_time,
    get_today_et,
    get_yesterday_et,
    ET_TZ,
    hours_since,
    is_today_et,
    iso_utc,
    now_et,
    parse_iso,
)

NOW = datetime(2025, 1, 24, 3, 0, tzinfo=timezone.utc)  # Jan 23, 10 PM ET


class TestParsing:
    def test_parse_z_suffix(self):
        assert parse_iso("2025-01-24T00:30:00Z") == datetime(2025, 1, 24, 0, 30, tzinfo=timezone.utc)

    def test_naive_datetime_is_utc(self):
        assert parse_iso(datetime(2025, 1, 1)) == datetime(2025, 1, 1, tzinfo=timezone.utc)

    def test_naive_string_in_given_zone(self):
        # SportsDataIO DateTime values are Eastern wall clock
        assert parse_iso("2025-01-26T15:00:00", ET_TZ) == datetime(2025, 1, 26, 20, 0, tzinfo=timezone.utc)
        assert parse_iso("2025-07-04T19:05:00", ET_TZ) == datetime(2025, 7, 4, 23, 5, tzinfo=timezone.utc)

    def test_offset_ignores_naive_zone(self):
        assert parse_iso("2025-01-26T15:00:00Z", ET_TZ) == datetime(2025, 1, 26, 15, 0, tzinfo=timezone.utc)

    def test_garbage_is_none(self):
        assert parse_iso("next tuesday") is None
        assert parse_iso(None) is None
        assert parse_iso(12345) is None

    def test_iso_utc(self):
        assert iso_utc(datetime(2025, 1, 1, 12, 0, tzinfo=timezone.utc)) == "2025-01-01T12:00:00Z"


class TestEasternFormatting:
    def test_today_is_eastern_date(self):
        # 03:00 UTC is still the previous day in Philadelphia
        assert get_today_et(NOW) == "2025-01-23"
        assert get_yesterday_et(NOW) == "2025-01-22"

    def test_game_time(self):
        assert format_game_time("2025-01-24T00:30:00Z") == "7:30 PM ET"
        assert format_game_time("bad") == ""

    def test_game_date(self):
        assert format_game_date("2025-01-24T00:30:00Z") == "Jan 23"

    def test_display_datetime(self):
        assert format_display_datetime("2025-01-24T00:30:00Z") == "Thu, Jan 23, 7:30 PM"
        assert format_display_datetime(None) == "TBD"

    def test_display_eastern_wall_clock_unchanged(self):
        assert format_display_datetime("2025-01-26T15:00:00", ET_TZ) == "Sun, Jan 26, 3:00 PM"

    def test_now_et(self):
        assert now_et().tzinfo == ET_TZ

    def test_is_today_et(self):
        assert is_today_et("2025-01-23T05:00:00Z", NOW)
        assert is_today_et("2025-01-24T02:00:00Z", NOW)
        assert not is_today_et("2025-01-24T05:00:00Z", NOW)
        assert not is_today_et(None, NOW)


class TestRelativeTime:
    def test_buckets(self):
        assert format_relative_time("2025-01-24T02:59:30Z", NOW) == "Just now"
        assert format_relative_time("2025-01-24T02:55:00Z", NOW) == "5m ago"
        assert format_relative_time("2025-01-24T00:00:00Z", NOW) == "3h ago"
        assert format_relative_time("2025-01-22T03:00:00Z", NOW) == "2d ago"
        assert format_relative_time("2025-01-01T17:00:00Z", NOW) == "Jan 1"

    def test_hours_since_missing_date(self):
        assert hours_since(None, NOW) == float("inf")
        assert hours_since("2025-01-23T03:00:00Z", NOW) == 24
