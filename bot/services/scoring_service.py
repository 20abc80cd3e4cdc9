"""Scoring service for comparing a guessed resort against the target."""

import logging
from typing import Optional

from bot.services.errors import InvalidCoordinateError
from bot.services.geo_metrics import distance_and_bearing
from models import DistanceAndBearing, GuessFeedback, ResortMetadata, ResortRecord, Verdict

logger = logging.getLogger(__name__)

TEXT_FIELDS = ("country", "region", "continent", "parent_company")
NUMERIC_FIELDS = ("skiable_acreage", "lifts")


def compare_field(guess_value: Optional[str], actual_value: Optional[str]) -> Verdict:
    """Case-insensitive comparison of a text field."""
    if not guess_value or not actual_value:
        return Verdict.UNKNOWN
    if guess_value.casefold() == actual_value.casefold():
        return Verdict.MATCH
    return Verdict.MISMATCH


def compare_numeric(guess_value: Optional[float], actual_value: Optional[float]) -> Verdict:
    """Compare a numeric field.

    TOO_HIGH means the guess is above the target, so the answer is lower.
    """
    if guess_value is None or actual_value is None:
        return Verdict.UNKNOWN
    if guess_value == actual_value:
        return Verdict.MATCH
    if guess_value > actual_value:
        return Verdict.TOO_HIGH
    return Verdict.TOO_LOW


def compare_resort_identity(guess_id: str, target_id: str) -> bool:
    """Check whether the guess names the target resort."""
    return guess_id == target_id


def calculate_distance(
    guess: Optional[ResortMetadata], target: Optional[ResortMetadata]
) -> Optional[DistanceAndBearing]:
    """Distance and heading from the guessed resort toward the target.

    Returns None when either side lacks coordinates or they are invalid.
    """
    if guess is None or target is None:
        return None
    if None in (guess.latitude, guess.longitude, target.latitude, target.longitude):
        return None

    try:
        return distance_and_bearing(guess.latitude, guess.longitude, target.latitude, target.longitude)
    except InvalidCoordinateError as e:
        logger.warning(f"Skipping distance for {guess.name or 'guess'}: {e}")
        return None


def build_guess_feedback(guess: ResortRecord, target: ResortRecord) -> GuessFeedback:
    """Field-by-field verdict for a guess. Pure: same input, same output."""
    guess_meta = guess.metadata
    target_meta = target.metadata
    resort_correct = compare_resort_identity(guess.resort_id, target.resort_id)

    verdicts = {}
    for field in TEXT_FIELDS:
        verdicts[field] = compare_field(
            getattr(guess_meta, field, None),
            getattr(target_meta, field, None),
        )
    for field in NUMERIC_FIELDS:
        verdicts[field] = compare_numeric(
            getattr(guess_meta, field, None),
            getattr(target_meta, field, None),
        )

    return GuessFeedback(
        resort_id=guess.resort_id,
        resort_correct=resort_correct,
        distance=None if resort_correct else calculate_distance(guess_meta, target_meta),
        **verdicts,
    )
