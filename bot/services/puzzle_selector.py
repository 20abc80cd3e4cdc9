"""Deterministic daily puzzle selection.

Every player sees the same resort on the same day. Everything here is derived
from the day-bucket: the number of calendar days, in the fixed puzzle zone,
between the game start date and "now".

The catalog is consumed in cycles of `len(catalog)` days counted from the
start date. Each cycle gets its own shuffle, seeded by the cycle number, and
day `n` of a cycle picks position `n` of that shuffle, so every resort comes
up exactly once per cycle. The last resort of one cycle and the first of the
next can coincide, so a run of `len(catalog)` days that straddles two cycles
may repeat a resort.
"""

import hashlib
import random
from collections.abc import Sequence
from datetime import date, datetime
from typing import TypeVar

from bot.services.errors import CatalogEmptyError
from config import Config
from models import FocalPoint
from utils.daytime import local_date

T = TypeVar("T")

FOCAL_MIN = 30
FOCAL_MAX = 70


def day_bucket(
    now_utc: datetime,
    time_zone: str | None = None,
    start_date: date | None = None,
) -> int:
    """Whole calendar days between the start date and `now_utc`'s date in the puzzle zone."""
    start = start_date or Config.GAME_START_DATE
    return (local_date(now_utc, time_zone) - start).days


def puzzle_number(
    now_utc: datetime,
    time_zone: str | None = None,
    start_date: date | None = None,
) -> int:
    """Display number for the day's puzzle, starting at 1 on the start date."""
    return day_bucket(now_utc, time_zone, start_date) + 1


def seeded_random(namespace: str, seed: int) -> random.Random:
    """A Random instance whose sequence depends only on (namespace, seed).

    The seed goes through sha256 so neighbouring integers don't produce
    correlated sequences.
    """
    digest = hashlib.sha256(f"{namespace}|{seed}".encode("utf-8")).digest()
    return random.Random(int.from_bytes(digest[:8], byteorder="big"))


def deterministic_shuffle(catalog: Sequence[T], seed: int) -> list[T]:
    """Permute the catalog; same (catalog, seed) always gives the same order."""
    items = list(catalog)
    rng = seeded_random("shuffle", seed)
    # Fisher-Yates
    for i in range(len(items) - 1, 0, -1):
        j = rng.randint(0, i)
        items[i], items[j] = items[j], items[i]
    return items


def target_for_bucket(catalog: Sequence[T], bucket: int) -> T:
    """The catalog entry assigned to a day-bucket."""
    if not catalog:
        raise CatalogEmptyError("Cannot choose a daily puzzle from an empty catalog")

    cycle, position = divmod(bucket, len(catalog))
    return deterministic_shuffle(catalog, cycle)[position]


def daily_target(
    catalog: Sequence[T],
    now_utc: datetime,
    time_zone: str | None = None,
    start_date: date | None = None,
) -> T:
    """Today's resort. Raises CatalogEmptyError for an empty catalog."""
    return target_for_bucket(catalog, day_bucket(now_utc, time_zone, start_date))


def focal_point_for_bucket(bucket: int) -> FocalPoint:
    rng = seeded_random("focal", bucket)
    return FocalPoint(x=rng.randint(FOCAL_MIN, FOCAL_MAX), y=rng.randint(FOCAL_MIN, FOCAL_MAX))


def daily_focal_point(
    now_utc: datetime,
    time_zone: str | None = None,
    start_date: date | None = None,
) -> FocalPoint:
    """Today's reveal center, with x and y each in [30, 70]."""
    return focal_point_for_bucket(day_bucket(now_utc, time_zone, start_date))
