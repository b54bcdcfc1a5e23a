from datetime import datetime, timezone
from typing import Callable, Union

# Anything that returns "now" as an aware datetime. Services take one of these instead of calling datetime.now() directly,
# so windows, alert thresholds and processed_at stamps can be pinned to a fixed instant in tests.
Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


async def get_clock() -> Clock:
    """Dependency to get the clock used by ledger services"""
    return utc_now


def parse_timestamp(value: Union[str, datetime]) -> datetime:
    """Parse a timestamptz value coming back from PostgREST into an aware datetime"""
    if isinstance(value, datetime):
        parsed = value
    else:
        # PostgREST may send a trailing "Z" instead of "+00:00"
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def to_iso(value: datetime) -> str:
    """Serialize an instant for a PostgREST filter or column value"""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).isoformat()


def format_time_ago(value: datetime, now: datetime) -> str:
    """Human readable age used by the admin activity feed"""
    diff_seconds = (now - value).total_seconds()
    diff_hours = int(diff_seconds // 3600)
    diff_days = int(diff_seconds // 86400)

    if diff_hours < 1:
        return "Just now"
    if diff_hours < 24:
        return f"{diff_hours} hour{'s' if diff_hours != 1 else ''} ago"
    return f"{diff_days} day{'s' if diff_days != 1 else ''} ago"
