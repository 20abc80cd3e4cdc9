"""Game service for managing a player's daily puzzle session."""

import asyncio
import logging
from datetime import datetime

from bot.services.catalog import ResortCatalog, format_resort_name
from bot.services.puzzle_selector import day_bucket, focal_point_for_bucket, target_for_bucket
from bot.services.reveal_service import INITIAL_REVEAL, RevealStateMachine
from bot.services.scoring_service import build_guess_feedback, compare_resort_identity
from bot.services.state_store import GameStateStore
from config import Config
from models import (
    FocalPoint,
    GuessFeedback,
    GuessRecord,
    PersistedGameState,
    PlayerSettings,
    ResortMetadata,
    ResortRecord,
    RevealRegion,
)
from utils.daytime import formatted_date, time_until_reset, utc_now
from utils.formatting import render_share_text

logger = logging.getLogger(__name__)


class GameSession:
    """One player's game: today's target, their guesses and the map reveal.

    Call `load()` before anything else. Every change is persisted through the
    GameStateStore as a whole snapshot.
    """

    def __init__(self, catalog: ResortCatalog, store: GameStateStore):
        self.catalog = catalog
        self.store = store
        self.target: ResortRecord | None = None
        self.bucket: int | None = None
        self.guessed_correctly = False
        self.guess_results: list[GuessRecord] = []
        self.reveal: RevealStateMachine | None = None
        self._rollover_task: asyncio.Task | None = None

    # Lifecycle

    async def load(self, now: datetime | None = None) -> bool:
        """Resume today's saved game or start a fresh one.

        Returns True if a saved game was resumed. A saved game is discarded when
        a local midnight has passed since it was written, or when it is for a
        different resort than today's.
        """
        now = now or utc_now()
        bucket = day_bucket(now)
        todays_target = target_for_bucket(self.catalog.resorts, bucket)

        snapshot = await self.store.load()
        last_played = await self.store.last_played()

        if snapshot is None or last_played is None:
            logger.info(f"No saved game, starting puzzle for day {bucket}")
        elif bucket > day_bucket(last_played):
            logger.info(f"Saved game is from day {day_bucket(last_played)}, starting puzzle for day {bucket}")
        elif snapshot.current_resort_id != todays_target.folder_name:
            logger.warning(
                f"Saved game targets {snapshot.current_resort_id} but today's resort is "
                f"{todays_target.folder_name}, starting over"
            )
        else:
            await self._restore(snapshot, bucket)
            return True

        await self.store.clear()
        await self._start_puzzle(bucket)
        return False

    async def _start_puzzle(self, bucket: int) -> None:
        resort = target_for_bucket(self.catalog.resorts, bucket)
        metadata = await self.catalog.get_metadata_or_none(resort.folder_name)

        self.bucket = bucket
        self.target = ResortRecord(resort_id=resort.folder_name, metadata=metadata)
        self.guessed_correctly = False
        self.guess_results = []
        self.reveal = RevealStateMachine(focal_point_for_bucket(bucket), INITIAL_REVEAL)

    async def _restore(self, snapshot: PersistedGameState, bucket: int) -> None:
        metadata = await self.catalog.get_metadata_or_none(snapshot.current_resort_id)

        self.bucket = bucket
        self.target = ResortRecord(resort_id=snapshot.current_resort_id, metadata=metadata)
        self.guessed_correctly = snapshot.guessed_correctly
        self.guess_results = list(snapshot.guess_results)
        self.reveal = RevealStateMachine(snapshot.center_coordinates, snapshot.reveal_percentage)
        logger.info(
            f"Resumed day {bucket} with {len(self.guess_results)} guess(es), "
            f"{self.reveal.percentage}% revealed"
        )

    async def check_rollover(self, now: datetime | None = None) -> bool:
        """Start the next puzzle if the day has changed. Returns True if it did."""
        self._require_loaded()
        bucket = day_bucket(now or utc_now())
        if bucket <= self.bucket:
            return False

        logger.info(f"Day rolled over from {self.bucket} to {bucket}, starting new puzzle")
        await self.store.clear()
        await self._start_puzzle(bucket)
        return True

    # Rollover polling

    def start_rollover_watch(self, interval_seconds: float | None = None) -> asyncio.Task:
        """Poll for the day changing until `stop_rollover_watch` is called."""
        self.stop_rollover_watch()
        interval = interval_seconds if interval_seconds is not None else Config.ROLLOVER_CHECK_SECONDS
        self._rollover_task = asyncio.create_task(self._watch_rollover(interval))
        return self._rollover_task

    def stop_rollover_watch(self) -> None:
        if self._rollover_task is not None:
            if self._rollover_task is not asyncio.current_task():
                self._rollover_task.cancel()
            self._rollover_task = None

    async def _watch_rollover(self, interval: float) -> None:
        while True:
            await asyncio.sleep(interval)
            try:
                await self.check_rollover()
            except Exception:
                logger.exception("Error checking for day rollover")

    # Guessing

    async def submit_guess(self, resort_id: str, now: datetime | None = None) -> tuple[bool, str]:
        """Submit a guess for today's puzzle.

        Returns (success, message) tuple.
        """
        self._require_loaded()

        if self.guessed_correctly:
            return (False, "You've already solved today's puzzle! Come back tomorrow.")

        if resort_id not in self.catalog:
            return (False, f"Couldn't find a resort called '{resort_id}'.")

        if resort_id in self.previous_guesses:
            return (False, f"You've already guessed {format_resort_name(resort_id)}.")

        metadata = await self.catalog.get_metadata_or_none(resort_id)
        self.guess_results.append(GuessRecord(resort_id=resort_id, metadata=metadata))

        correct = compare_resort_identity(resort_id, self.target.resort_id)
        if correct:
            self.guessed_correctly = True
        self.reveal.advance(len(self.guess_results), correct)

        logger.info(
            f"Guess {len(self.guess_results)} for day {self.bucket}: {resort_id} "
            f"({'correct' if correct else 'incorrect'}, {self.reveal.percentage}% revealed)"
        )

        if not await self.store.save(self.snapshot(), now):
            logger.warning(f"Guess {resort_id} for day {self.bucket} is kept in memory only")

        if correct:
            return (True, f"Correct! It's **{self._target_name()}**.")
        return (True, f"Not quite. {self.reveal.percentage}% of the map is now visible.")

    # Views for the UI

    @property
    def previous_guesses(self) -> list[str]:
        return [guess.resort_id for guess in self.guess_results]

    @property
    def guess_history(self) -> list[GuessRecord]:
        return list(self.guess_results)

    @property
    def feedback(self) -> list[GuessFeedback]:
        self._require_loaded()
        return [build_guess_feedback(guess, self.target) for guess in self.guess_results]

    @property
    def reveal_percentage(self) -> int:
        self._require_loaded()
        return self.reveal.percentage

    @property
    def focal_point(self) -> FocalPoint:
        self._require_loaded()
        return self.reveal.focal_point

    @property
    def visible_region(self) -> RevealRegion:
        self._require_loaded()
        return self.reveal.region()

    @property
    def puzzle_number(self) -> int:
        self._require_loaded()
        return self.bucket + 1

    @property
    def image_url(self) -> str:
        """Full map once solved, redacted map until then."""
        self._require_loaded()
        if self.guessed_correctly:
            return self.catalog.image_url(self.target.resort_id)
        return self.catalog.redacted_image_url(self.target.resort_id)

    @property
    def revealed_metadata(self) -> ResortMetadata | None:
        """The target's metadata, only after it has been guessed."""
        if not self.guessed_correctly or self.target is None:
            return None
        return self.target.metadata

    def remaining_resorts(self) -> list[str]:
        """Resorts that haven't been guessed yet, in catalog order."""
        guessed = set(self.previous_guesses)
        return [resort_id for resort_id in self.catalog.resort_ids if resort_id not in guessed]

    def countdown(self, now: datetime | None = None) -> tuple[int, int, int]:
        return time_until_reset(now or utc_now())

    def share_text(self, settings: PlayerSettings | None = None, now: datetime | None = None) -> str:
        self._require_loaded()
        settings = settings or PlayerSettings()
        return render_share_text(
            guess_history=self.guess_results,
            target=self.target,
            puzzle_number=self.puzzle_number,
            date_label=formatted_date(now or utc_now()),
            show_country=settings.show_country_names,
            use_metric=settings.use_metric_units,
        )

    def snapshot(self) -> PersistedGameState:
        self._require_loaded()
        return PersistedGameState(
            current_resort_id=self.target.resort_id,
            guessed_correctly=self.guessed_correctly,
            previous_guesses=self.previous_guesses,
            guess_results=self.guess_results,
            reveal_percentage=self.reveal.percentage,
            center_coordinates=self.reveal.focal_point,
        )

    def _target_name(self) -> str:
        if self.target.metadata and self.target.metadata.name:
            return self.target.metadata.name
        return format_resort_name(self.target.resort_id)

    def _require_loaded(self) -> None:
        if self.target is None or self.reveal is None:
            raise RuntimeError("GameSession.load() must be called first")
