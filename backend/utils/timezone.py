"""
Timezone Utility Module
All game times are displayed in Eastern Time (America/New_York)
"""
import math
from datetime import datetime, timedelta
from typing import Optional, Union
from zoneinfo import ZoneInfo

# Product timezone: ET (America/New_York)
ET_TZ = ZoneInfo("America/New_York")
UTC_TZ = ZoneInfo("UTC")

DateLike = Union[datetime, str, None]


def now_et() -> datetime:
    """Get current datetime in ET."""
    return datetime.now(ET_TZ)


def now_utc() -> datetime:
    """Get current datetime in UTC."""
    return datetime.now(UTC_TZ)


def to_et(dt: datetime) -> datetime:
    """Convert any datetime to ET."""
    if dt.tzinfo is None:
        # Assume UTC if naive (pymongo returns naive UTC)
        dt = dt.replace(tzinfo=UTC_TZ)
    return dt.astimezone(ET_TZ)


def to_utc(dt: datetime) -> datetime:
    """Convert any datetime to UTC."""
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=UTC_TZ)
    return dt.astimezone(UTC_TZ)


def parse_iso(value: DateLike, naive_tz: ZoneInfo = UTC_TZ) -> Optional[datetime]:
    """Parse an ISO string or datetime into a UTC datetime.

    Args:
        value: ISO string (e.g. '2025-11-29T18:00Z'), datetime or None
        naive_tz: zone of values without an offset. pymongo hands back naive
            UTC; SportsDataIO DateTime fields are ET wall-clock times.

    Returns:
        tz-aware UTC datetime, or None if the value can't be parsed
    """
    if not value:
        return None
    if isinstance(value, datetime):
        dt = value
    elif isinstance(value, str):
        try:
            dt = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
        except ValueError:
            return None
    else:
        return None

    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=naive_tz)
    return dt.astimezone(UTC_TZ)


def get_today_et(now: Optional[datetime] = None) -> str:
    """Today's ET date as YYYY-MM-DD."""
    return to_et(now or now_utc()).strftime("%Y-%m-%d")


def get_yesterday_et(now: Optional[datetime] = None) -> str:
    """Yesterday's ET date as YYYY-MM-DD."""
    return (to_et(now or now_utc()) - timedelta(days=1)).strftime("%Y-%m-%d")


def format_game_time(value: DateLike) -> str:
    """Format as '7:30 PM ET'."""
    dt = parse_iso(value)
    if dt is None:
        return ""
    et = to_et(dt)
    hour = et.hour % 12 or 12
    meridiem = "AM" if et.hour < 12 else "PM"
    return f"{hour}:{et.minute:02d} {meridiem} ET"


def format_game_date(value: DateLike) -> str:
    """Format as 'Jan 23'."""
    dt = parse_iso(value)
    if dt is None:
        return ""
    et = to_et(dt)
    return f"{et.strftime('%b')} {et.day}"


def format_display_datetime(value: DateLike, naive_tz: ZoneInfo = UTC_TZ) -> str:
    """Format as 'Thu, Jan 23, 7:30 PM' for schedule listings."""
    dt = parse_iso(value, naive_tz)
    if dt is None:
        return "TBD"
    et = to_et(dt)
    hour = et.hour % 12 or 12
    meridiem = "AM" if et.hour < 12 else "PM"
    return f"{et.strftime('%a')}, {et.strftime('%b')} {et.day}, {hour}:{et.minute:02d} {meridiem}"


def is_today_et(value: DateLike, now: Optional[datetime] = None) -> bool:
    """True when value falls on the same ET calendar day as now."""
    dt = parse_iso(value)
    if dt is None:
        return False
    return to_et(dt).date() == to_et(now or now_utc()).date()


def hours_since(value: DateLike, now: Optional[datetime] = None) -> float:
    """Hours elapsed since value; infinity when there is no date."""
    dt = parse_iso(value)
    if dt is None:
        return math.inf
    return (to_utc(now or now_utc()) - dt).total_seconds() / 3600


def format_relative_time(value: DateLike, now: Optional[datetime] = None) -> str:
    """Relative label used by the news feed: 'Just now', '5m ago', '3h ago', '2d ago', else 'Jan 23'."""
    dt = parse_iso(value)
    if dt is None:
        return ""

    seconds = int((to_utc(now or now_utc()) - dt).total_seconds())
    if seconds < 60:
        return "Just now"
    if seconds < 3600:
        return f"{seconds // 60}m ago"
    if seconds < 86400:
        return f"{seconds // 3600}h ago"
    if seconds < 604800:
        return f"{seconds // 86400}d ago"
    return format_game_date(dt)


def get_request_time() -> datetime:
    """FastAPI dependency for the request clock (overridden in tests)."""
    return now_utc()


def iso_utc(dt: datetime) -> str:
    """ISO-8601 UTC string with a 'Z' suffix."""
    return to_utc(dt).isoformat().replace("+00:00", "Z")
