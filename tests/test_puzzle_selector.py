"""Tests for daily puzzle selection."""

from datetime import date, datetime, timedelta, timezone

import pytest

from bot.services.errors import CatalogEmptyError
from bot.services.puzzle_selector import (
    FOCAL_MAX,
    FOCAL_MIN,
    daily_focal_point,
    daily_target,
    day_bucket,
    deterministic_shuffle,
    focal_point_for_bucket,
    puzzle_number,
    target_for_bucket,
)
from tests.conftest import START_DATE, TIME_ZONE, utc

CATALOG = [f"resort-{i}" for i in range(7)]


def bucket(moment: datetime) -> int:
    return day_bucket(moment, TIME_ZONE, START_DATE)


def moment_for_bucket(n: int) -> datetime:
    # Noon Eastern on day n
    return utc(2024, 3, 1, 17) + timedelta(days=n)


class TestDayBucket:
    def test_start_date_is_day_zero(self):
        # Midnight Eastern on March 1, 2024 is 05:00 UTC
        assert bucket(utc(2024, 3, 1, 5)) == 0

    def test_before_local_midnight_is_previous_day(self):
        # 04:59 UTC on March 1 is still Feb 29 in New York
        assert bucket(utc(2024, 3, 1, 4, 59)) == -1

    def test_changes_at_local_midnight_not_utc(self):
        # UTC midnight passes but it's still evening of day 5 in New York
        assert bucket(utc(2024, 3, 6, 23, 59)) == bucket(utc(2024, 3, 7, 0, 1))
        # Eastern midnight (EST, UTC-5) moves to day 6
        before = utc(2024, 3, 7, 4, 59, 59)
        after = utc(2024, 3, 7, 5, 0, 0)
        assert bucket(before) == 5
        assert bucket(after) == 6

    def test_same_local_day_same_bucket(self):
        assert bucket(utc(2024, 7, 4, 4, 0)) == bucket(utc(2024, 7, 5, 3, 59))

    def test_daylight_saving_midnight(self):
        # In July New York is UTC-4, so midnight is 04:00 UTC
        assert bucket(utc(2024, 7, 5, 4, 0)) == bucket(utc(2024, 7, 5, 3, 59)) + 1

    def test_across_dst_change(self):
        # DST started March 10, 2024; March 11 midnight is 04:00 UTC
        assert bucket(utc(2024, 3, 11, 3, 59)) == 9
        assert bucket(utc(2024, 3, 11, 4, 0)) == 10

    def test_monotonic(self):
        moment = utc(2024, 3, 1)
        previous = bucket(moment)
        for _ in range(24 * 40):
            moment += timedelta(hours=1)
            current = bucket(moment)
            assert current in (previous, previous + 1)
            previous = current

    def test_naive_datetime_treated_as_utc(self):
        assert bucket(datetime(2024, 3, 7, 5, 0)) == bucket(utc(2024, 3, 7, 5, 0))

    def test_other_offset_input(self):
        tokyo = timezone(timedelta(hours=9))
        # 14:00 in Tokyo on March 7 is 05:00 UTC, just past midnight in New York
        assert bucket(datetime(2024, 3, 7, 14, 0, tzinfo=tokyo)) == 6

    def test_other_zone(self):
        moment = utc(2024, 3, 7, 2, 0)
        assert day_bucket(moment, "UTC", START_DATE) == 6
        assert day_bucket(moment, TIME_ZONE, START_DATE) == 5

    def test_puzzle_number(self):
        assert puzzle_number(utc(2024, 3, 1, 12), TIME_ZONE, START_DATE) == 1
        assert puzzle_number(utc(2024, 3, 11, 12), TIME_ZONE, START_DATE) == 11


class TestDeterministicShuffle:
    def test_same_seed_same_order(self):
        assert deterministic_shuffle(CATALOG, 42) == deterministic_shuffle(CATALOG, 42)

    def test_is_permutation(self):
        shuffled = deterministic_shuffle(CATALOG, 7)
        assert len(shuffled) == len(CATALOG)
        assert sorted(shuffled) == sorted(CATALOG)

    def test_permutation_with_duplicates(self):
        items = ["a", "a", "b", "c"]
        assert sorted(deterministic_shuffle(items, 3)) == sorted(items)

    def test_does_not_mutate_input(self):
        catalog = list(CATALOG)
        deterministic_shuffle(catalog, 5)
        assert catalog == CATALOG

    def test_seeds_give_different_orders(self):
        orders = {tuple(deterministic_shuffle(CATALOG, seed)) for seed in range(20)}
        assert len(orders) > 1

    def test_fixed_output(self):
        # Must not change between runs or interpreter restarts
        assert deterministic_shuffle(CATALOG, 0) == deterministic_shuffle(tuple(CATALOG), 0)

    def test_empty_and_single(self):
        assert deterministic_shuffle([], 1) == []
        assert deterministic_shuffle(["only"], 1) == ["only"]


class TestDailyTarget:
    def test_same_target_all_day(self):
        morning = utc(2024, 4, 2, 5, 0)  # 01:00 Eastern
        night = utc(2024, 4, 3, 3, 59)  # 23:59 Eastern
        assert daily_target(CATALOG, morning, TIME_ZONE, START_DATE) == daily_target(
            CATALOG, night, TIME_ZONE, START_DATE
        )

    def test_idempotent(self):
        moment = utc(2025, 1, 15, 12)
        results = {daily_target(CATALOG, moment, TIME_ZONE, START_DATE) for _ in range(5)}
        assert len(results) == 1

    def test_visits_every_resort_once_per_cycle(self):
        n = len(CATALOG)
        for cycle in range(3):
            targets = [target_for_bucket(CATALOG, cycle * n + day) for day in range(n)]
            assert sorted(targets) == sorted(CATALOG)

    def test_unaligned_window_repeats_only_across_cycles(self):
        n = len(CATALOG)
        for offset in range(1, n):
            window = [target_for_bucket(CATALOG, day) for day in range(offset, offset + n)]
            head, tail = window[: n - offset], window[n - offset :]
            assert len(set(head)) == len(head)
            assert len(set(tail)) == len(tail)
            assert len(set(window)) >= n - min(len(head), len(tail))

    def test_cycle_from_start_date(self):
        targets = [daily_target(CATALOG, moment_for_bucket(day), TIME_ZONE, START_DATE) for day in range(len(CATALOG))]
        assert sorted(targets) == sorted(CATALOG)

    def test_cycles_use_different_orders(self):
        n = len(CATALOG)
        cycles = {tuple(target_for_bucket(CATALOG, c * n + d) for d in range(n)) for c in range(10)}
        assert len(cycles) > 1

    def test_matches_shuffle_position(self):
        n = len(CATALOG)
        day = 3 * n + 4
        assert target_for_bucket(CATALOG, day) == deterministic_shuffle(CATALOG, 3)[4]

    def test_empty_catalog(self):
        with pytest.raises(CatalogEmptyError):
            daily_target([], utc(2024, 5, 1), TIME_ZONE, START_DATE)

    def test_single_resort(self):
        assert daily_target(["solo"], utc(2030, 1, 1), TIME_ZONE, START_DATE) == "solo"


class TestFocalPoint:
    def test_within_bounds_for_1000_days(self):
        for day in range(1000):
            point = focal_point_for_bucket(day)
            assert FOCAL_MIN <= point.x <= FOCAL_MAX
            assert FOCAL_MIN <= point.y <= FOCAL_MAX

    def test_bounds_are_30_and_70(self):
        assert (FOCAL_MIN, FOCAL_MAX) == (30, 70)

    def test_reproducible_within_day(self):
        first = daily_focal_point(utc(2024, 6, 1, 5), TIME_ZONE, START_DATE)
        second = daily_focal_point(utc(2024, 6, 2, 3), TIME_ZONE, START_DATE)
        assert first == second

    def test_varies_across_days(self):
        points = {focal_point_for_bucket(day) for day in range(50)}
        assert len(points) > 1

    def test_uses_day_bucket(self):
        moment = utc(2024, 6, 1, 12)
        assert daily_focal_point(moment, TIME_ZONE, START_DATE) == focal_point_for_bucket(bucket(moment))

    def test_default_start_date(self):
        assert day_bucket(utc(2024, 3, 1, 12), TIME_ZONE) == (date(2024, 3, 1) - START_DATE).days
