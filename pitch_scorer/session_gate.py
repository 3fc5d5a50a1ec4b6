"""Decides whether a finished run is offered for saving."""

import time
from typing import Callable, Optional

from .core.events import EventEmitter, ScorerEventType
from .core.interfaces import IScoreStore, ScoreStoreError
from .logging_config import get_logger
from .note_types import SaveOffer, SongSummary

logger = get_logger(__name__)

DEFAULT_DUPLICATE_WINDOW_S = 5.0


class SessionGate:
    """Reads a song summary and turns eligible runs into save offers.

    The gate only reads what the engine reports; saving failures are
    reported through the SAVE_ERROR event and never change the summary.
    """

    def __init__(
        self,
        events: Optional[EventEmitter] = None,
        duplicate_window_s: float = DEFAULT_DUPLICATE_WINDOW_S,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.events = events or EventEmitter()
        self.duplicate_window_s = duplicate_window_s
        self._clock = clock
        self._last_offer_at: Optional[float] = None

    def evaluate(self, summary: SongSummary) -> Optional[SaveOffer]:
        """Check a finished run and build a save offer if it qualifies.

        Returns:
            The SaveOffer, or None when the run must not be saved
        """
        validity = summary.validity
        if not validity.started or validity.is_invalidated:
            logger.info("Play session was invalid, not saving: %s", validity)
            return None

        score = summary.score
        if score.total <= 0:
            logger.info("No notes to score, not saving")
            return None

        if not summary.track_id:
            logger.error("Could not determine track id, not saving")
            return None

        now = self._clock()
        if (
            self._last_offer_at is not None
            and now - self._last_offer_at < self.duplicate_window_s
        ):
            logger.info("Duplicate save attempt, skipping")
            return None
        self._last_offer_at = now

        offer = SaveOffer(
            percentage=score.percentage,
            hits=score.hits,
            total=score.total,
            song_name=summary.song_name,
            instrument=summary.instrument_name,
            track_id=summary.track_id,
        )
        logger.info(
            "Score ready to save: %d%% (%s) for %s",
            offer.percentage,
            score,
            offer.song_name or "<unnamed>",
        )
        self.events.emit(ScorerEventType.SCORE_READY_TO_SAVE, offer)
        return offer

    def confirm_save(self, offer: SaveOffer, store: IScoreStore) -> bool:
        """Persist an accepted offer.

        Returns:
            True if the store accepted it, False otherwise (a SAVE_ERROR event
            with a user-facing message is emitted)
        """
        if offer.hits < 0 or offer.total < 0 or offer.hits > offer.total:
            return self._fail("Invalid hits/total values")
        if not 0 <= offer.percentage <= 100:
            return self._fail("Score must be a percentage between 0 and 100")

        try:
            store.save_score(offer)
        except ScoreStoreError as e:
            logger.error(f"Failed to save score: {e}")
            return self._fail(str(e) or "Failed to save score")

        logger.info("Score saved for track %d", offer.track_id)
        return True

    def _fail(self, message: str) -> bool:
        logger.warning("Save rejected: %s", message)
        self.events.emit(ScorerEventType.SAVE_ERROR, message)
        return False
