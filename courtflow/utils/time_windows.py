"""
Instant and interval helpers.

Intervals are half-open: [start, end). An instant equal to the start is
inside, an instant equal to the end is not. This matches the moment a
session flips into overtime (scheduled_end_at <= now).

Every helper is lenient: values that cannot be read as an instant are
treated as absent, never raised on.
"""
from datetime import datetime, timezone
from typing import Any, Optional


def parse_instant(value: Any) -> Optional[datetime]:
    """
    Coerce a timestamp to an aware UTC datetime.

    - datetime -> itself (naive values are taken as UTC)
    - ISO-8601 string, with "Z" or an offset -> parsed
    - int/float -> epoch milliseconds
    - None, "", garbage -> None
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, datetime):
        dt = value
    elif isinstance(value, (int, float)):
        try:
            dt = datetime.fromtimestamp(value / 1000.0, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            return None
    elif isinstance(value, str):
        s = value.strip()
        if not s:
            return None
        if s.endswith("Z") or s.endswith("z"):
            s = s[:-1] + "+00:00"
        try:
            dt = datetime.fromisoformat(s)
        except ValueError:
            return None
    else:
        return None

    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def is_active_interval(now: Any, starts_at: Any, ends_at: Any) -> bool:
    """True iff starts_at <= now < ends_at. Any unreadable bound -> False."""
    now_dt = parse_instant(now)
    start_dt = parse_instant(starts_at)
    end_dt = parse_instant(ends_at)
    if now_dt is None or start_dt is None or end_dt is None:
        return False
    return start_dt <= now_dt < end_dt


def minutes_until(now: datetime, instant: datetime) -> int:
    """Whole minutes from now until instant, floored (negative when past)."""
    return int((instant - now).total_seconds() // 60)
