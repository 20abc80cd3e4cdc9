"""Calendar helpers for the puzzle's fixed time zone.

Puzzles rotate at local midnight in one named zone (Eastern Time by default),
not at UTC midnight and not at the player's own midnight. Naive datetimes are
treated as UTC.
"""

from datetime import date, datetime, time, timedelta, timezone
from functools import lru_cache
from zoneinfo import ZoneInfo

from config import Config


@lru_cache(maxsize=8)
def get_zone(name: str | None = None) -> ZoneInfo:
    """Look up a zone by name, defaulting to the configured puzzle zone."""
    return ZoneInfo(name or Config.PUZZLE_TIME_ZONE)


def as_utc(moment: datetime) -> datetime:
    """Attach UTC to naive datetimes, convert aware ones."""
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def local_date(moment: datetime, time_zone: str | None = None) -> date:
    """The calendar date `moment` falls on in the puzzle zone."""
    return as_utc(moment).astimezone(get_zone(time_zone)).date()


def next_local_midnight(moment: datetime, time_zone: str | None = None) -> datetime:
    """The next midnight in the puzzle zone after `moment`, as an aware UTC datetime."""
    zone = get_zone(time_zone)
    tomorrow = local_date(moment, time_zone) + timedelta(days=1)
    return datetime.combine(tomorrow, time(0), tzinfo=zone).astimezone(timezone.utc)


def time_until_reset(moment: datetime, time_zone: str | None = None) -> tuple[int, int, int]:
    """Hours, minutes and seconds until the next puzzle unlocks."""
    remaining = next_local_midnight(moment, time_zone) - as_utc(moment)
    total_seconds = max(0, int(remaining.total_seconds()))
    hours, rest = divmod(total_seconds, 3600)
    minutes, seconds = divmod(rest, 60)
    return (hours, minutes, seconds)


def formatted_date(moment: datetime, time_zone: str | None = None) -> str:
    """Format the puzzle-zone date for display (e.g., 'March 12, 2024')."""
    day = local_date(moment, time_zone)
    return f"{day:%B} {day.day}, {day.year}"
