"""Tests for the map reveal state machine."""

import pytest

from bot.services.reveal_service import (
    FULL_REVEAL,
    INITIAL_REVEAL,
    RevealStateMachine,
    next_reveal_percentage,
    visible_region,
)
from models import FocalPoint


@pytest.fixture
def machine():
    return RevealStateMachine(FocalPoint(x=40, y=60))


class TestNextRevealPercentage:
    def test_first_wrong_guess(self):
        assert next_reveal_percentage(INITIAL_REVEAL, 1, False) == 66

    def test_second_wrong_guess(self):
        assert next_reveal_percentage(66, 2, False) == FULL_REVEAL

    def test_correct_first_guess(self):
        assert next_reveal_percentage(INITIAL_REVEAL, 1, True) == FULL_REVEAL

    def test_correct_later_guess(self):
        assert next_reveal_percentage(66, 2, True) == FULL_REVEAL

    def test_full_is_terminal(self):
        assert next_reveal_percentage(FULL_REVEAL, 5, False) == FULL_REVEAL

    def test_never_decreases(self):
        for current in (0, 33, 50, 66, 80, 100):
            for count in range(1, 6):
                for correct in (True, False):
                    assert next_reveal_percentage(current, count, correct) >= current


class TestRevealStateMachine:
    def test_starts_at_33(self, machine):
        assert machine.percentage == 33
        assert not machine.fully_revealed

    def test_wrong_then_wrong(self, machine):
        assert machine.advance(1, False) == 66
        assert machine.advance(2, False) == 100
        assert machine.fully_revealed

    def test_wrong_then_right(self, machine):
        machine.advance(1, False)
        assert machine.advance(2, True) == 100

    def test_right_immediately(self, machine):
        assert machine.advance(1, True) == 100

    def test_no_change_after_full(self, machine):
        machine.advance(1, True)
        machine.advance(2, False)
        machine.advance(3, False)
        assert machine.percentage == 100

    def test_focal_point_fixed(self, machine):
        point = machine.focal_point
        machine.advance(1, False)
        machine.advance(2, False)
        assert machine.focal_point == point

    def test_restored_percentage_clamped(self):
        assert RevealStateMachine(FocalPoint(x=50, y=50), 150).percentage == 100


class TestVisibleRegion:
    def test_centered(self):
        region = visible_region(40, FocalPoint(x=50, y=50))
        assert (region.left, region.top, region.right, region.bottom) == (30, 30, 70, 70)

    def test_shifted_inside_image(self):
        region = visible_region(66, FocalPoint(x=30, y=70))
        assert region.left == 0
        assert region.right == 66
        assert region.bottom == 100
        assert region.top == 34

    def test_full_reveal_covers_image(self):
        region = visible_region(100, FocalPoint(x=35, y=65))
        assert (region.left, region.top, region.right, region.bottom) == (0, 0, 100, 100)

    def test_machine_region(self, machine):
        region = machine.region()
        assert region.right - region.left == pytest.approx(33)
