"""Beat-by-beat pitch scoring.

The engine owns all per-session state: the notes still pending for the
current beat, the stability window, the cumulative score, per-beat note
results and the validity record. Every public operation takes the engine
lock, so pitch samples, beat transitions and resets coming from different
producers are applied one at a time.
"""

import threading
import time
from dataclasses import replace
from typing import Callable, Dict, List, Optional

from .core.config import ScorerConfig
from .core.events import EventEmitter, ScorerEventType
from .detection.stability_analyzer import StabilityAnalyzer
from .logging_config import get_logger
from .note_matcher import NoteMatcher
from .note_types import (
    BeatResults,
    ExpectedBeat,
    LiveReadout,
    NoteResult,
    Score,
    SessionState,
    SongSummary,
    ValidityRecord,
)
from .note_utils import cents_error, is_valid_frequency, midi_to_note_name
from .pending import PendingEntry, PendingSet

logger = get_logger(__name__)


class ScoringEngine:
    """Judges detected pitches against the notes expected at each beat."""

    def __init__(
        self,
        config: Optional[ScorerConfig] = None,
        events: Optional[EventEmitter] = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """Initialize the engine.

        Args:
            config: Tuning constants, or None for the defaults
            events: Emitter for outward notifications, or None to create one
            clock: Time source in seconds, used when samples carry no timestamps
        """
        self.config = config or ScorerConfig()
        self.config.validate()
        self.events = events or EventEmitter()
        self._clock = clock
        self._lock = threading.RLock()

        self._stability = StabilityAnalyzer(
            tolerance_cents=self.config.tolerance_cents,
            window_size=self.config.window_size,
            required_ok=self.config.required_ok,
        )
        self._clear_state()

    def _clear_state(self) -> None:
        self._pending = PendingSet()
        self._stability.clear()
        self._cooldown_until = 0.0
        # None until the first sample decides between sample timestamps and the engine clock
        self._use_timestamps: Optional[bool] = None
        self._last_timestamp = 0.0
        self._last_target: Optional[int] = None
        self._current_beat: Optional[int] = None
        self._started_from_beginning = False
        self._start_decided = False
        self._finished = False
        self._score = Score()
        self._results: BeatResults = {}
        self._validity = ValidityRecord()
        self._live = LiveReadout.silence()

    # ------------------------------------------------------------------
    # Read access
    # ------------------------------------------------------------------

    @property
    def live(self) -> LiveReadout:
        return self._live

    @property
    def score(self) -> Score:
        return self._score

    @property
    def validity(self) -> ValidityRecord:
        return self._validity

    @property
    def current_beat(self) -> Optional[int]:
        return self._current_beat

    @property
    def last_target(self) -> Optional[int]:
        return self._last_target

    @property
    def pending(self) -> Dict[int, PendingEntry]:
        with self._lock:
            return self._pending.as_dict()

    @property
    def results(self) -> BeatResults:
        """Copy of the per-beat note results."""
        with self._lock:
            return {beat: dict(notes) for beat, notes in self._results.items()}

    @property
    def state(self) -> SessionState:
        if self._finished:
            if self._validity.is_eligible(self._score):
                return SessionState.VALID_COMPLETE
            return SessionState.INVALID_COMPLETE
        if self._start_decided:
            return SessionState.ACTIVE
        return SessionState.IDLE

    @property
    def is_eligible(self) -> bool:
        return self._validity.is_eligible(self._score)

    def beat_results(self, beat_id: int) -> Dict[int, NoteResult]:
        with self._lock:
            return dict(self._results.get(beat_id, {}))

    def beat_outcome(self, beat_id: int) -> Optional[NoteResult]:
        """Overall result of a beat for feedback colouring.

        A beat counts as correct if any of its notes was hit, otherwise as
        incorrect once it has any recorded result.
        """
        notes = self.beat_results(beat_id)
        if not notes:
            return None
        if any(r is NoteResult.CORRECT for r in notes.values()):
            return NoteResult.CORRECT
        return NoteResult.INCORRECT

    # ------------------------------------------------------------------
    # Expectation stream
    # ------------------------------------------------------------------

    def on_expected_beat(self, beat: ExpectedBeat) -> None:
        """Move to a new beat and set its notes as the pending targets."""
        with self._lock:
            self._backfill_missed()

            self._current_beat = beat.beat_id
            self._pending = PendingSet.from_chords(beat.chords)
            if self._pending:
                first_chord = next(c for c in beat.chords if len(c) > 0)
                self._last_target = int(first_chord[0])

            units = beat.chord_units
            if units > 0:
                self._set_score(replace(self._score, total=self._score.total + units))

            if not self._start_decided and beat.has_notes:
                self._decide_start(beat)

            # New beat, new targets: no carry-over of match progress
            self._stability.clear()
            self._cooldown_until = 0.0

            logger.debug(
                "Beat %d: pending=%s total=%d",
                beat.beat_id,
                [midi_to_note_name(p) for p in self._pending],
                self._score.total,
            )

    def _decide_start(self, beat: ExpectedBeat) -> None:
        self._start_decided = True
        if beat.is_first_beat or self._started_from_beginning:
            logger.info(
                "Session started at beat %d (first beat: %s, from beginning: %s)",
                beat.beat_id,
                beat.is_first_beat,
                self._started_from_beginning,
            )
            self._started_from_beginning = False
            self._set_validity(started=True)
        else:
            logger.info(
                "First scored beat %d is not the start of the song, marking as seeked",
                beat.beat_id,
            )
            self._set_validity(seeked=True)

    def _backfill_missed(self) -> None:
        """Record every still-pending note of the current beat as missed."""
        if not self._pending or self._current_beat is None:
            return
        beat_map = self._results.setdefault(self._current_beat, {})
        missed: List[int] = []
        for pitch in self._pending:
            if pitch not in beat_map:
                beat_map[pitch] = NoteResult.MISSED
                missed.append(pitch)
        if missed:
            logger.debug(
                "Beat %d missed: %s",
                self._current_beat,
                [midi_to_note_name(p) for p in missed],
            )
            self.events.emit(ScorerEventType.RESULTS_CHANGED, self._current_beat)

    # ------------------------------------------------------------------
    # Pitch stream
    # ------------------------------------------------------------------

    def on_pitch(self, hz: float, timestamp: Optional[float] = None) -> LiveReadout:
        """Judge one detected frequency against the pending targets.

        Args:
            hz: Detected fundamental in Hz; non-finite or low values are silence
            timestamp: Sample time in seconds, or None to use the engine clock

        Returns:
            The live readout after this sample
        """
        with self._lock:
            if not is_valid_frequency(hz, self.config.silence_hz):
                self._stability.clear()
                return self._set_live(LiveReadout.silence())

            if not self._pending:
                return self._follow_last_target(hz)

            match = NoteMatcher.nearest(hz, self._pending)
            self._stability.add_error(match.err_cents, match.target)
            stable = self._stability.is_stable()
            live = self._set_live(LiveReadout(match.err_cents, stable, match.target))

            now = self._sample_time(timestamp)
            if stable and now >= self._cooldown_until and match.target in self._pending:
                self._award(match.target, now)

            return live

    def _sample_time(self, timestamp: Optional[float]) -> float:
        """Current time for cooldowns, on one clock for the whole session.

        The first sample picks the clock: its own timestamps if it carries
        one, the engine clock otherwise. Later samples that do not fit are
        timed on the chosen clock anyway.
        """
        if self._use_timestamps is None:
            self._use_timestamps = timestamp is not None
            logger.debug(
                "Timing cooldowns with %s",
                "sample timestamps" if self._use_timestamps else "the engine clock",
            )

        if not self._use_timestamps:
            if timestamp is not None:
                logger.warning("Ignoring sample timestamp, session is timed by the engine clock")
            return self._clock()

        if timestamp is None:
            logger.warning("Sample without timestamp in a timestamped session, reusing the last one")
            return self._last_timestamp
        self._last_timestamp = timestamp
        return timestamp

    def _follow_last_target(self, hz: float) -> LiveReadout:
        """Keep showing intonation against the last target; never awards."""
        if self._last_target is None:
            self._stability.clear()
            return self._set_live(LiveReadout.silence())

        err = cents_error(hz, self._last_target)
        self._stability.add_error(err, self._last_target)
        return self._set_live(
            LiveReadout(err, self._stability.is_stable(), self._last_target)
        )

    def _award(self, target: int, now: float) -> None:
        satisfied = self._pending.consume(target)
        if not satisfied:
            return

        beat_map = self._results.setdefault(self._current_beat, {})
        for pitch in satisfied:
            beat_map[pitch] = NoteResult.CORRECT

        self._set_score(replace(self._score, hits=self._score.hits + 1))
        self._cooldown_until = now + self.config.cooldown_s
        self._stability.clear()

        logger.info(
            "Hit at beat %s: %s (score %s)",
            self._current_beat,
            ", ".join(midi_to_note_name(p) for p in satisfied),
            self._score,
        )
        self.events.emit(ScorerEventType.RESULTS_CHANGED, self._current_beat)

    # ------------------------------------------------------------------
    # Playback signals
    # ------------------------------------------------------------------

    def playback_started(self, from_beginning: bool) -> None:
        """Record whether playback was started from the top of the song.

        Starting from the top begins a fresh session, so a stopped or
        finished run does not carry over.
        """
        with self._lock:
            if from_beginning:
                self.reset()
            self._started_from_beginning = bool(from_beginning)
            logger.info("Playback started (from beginning: %s)", from_beginning)

    def pause(self) -> None:
        with self._lock:
            self._set_validity(paused=True)

    def seek(self) -> None:
        with self._lock:
            self._set_validity(seeked=True)

    def track_changed(self) -> None:
        with self._lock:
            self._set_validity(track_changed=True)

    def manual_stop(self) -> None:
        """Stop playback: the session is cleared and can no longer be saved."""
        with self._lock:
            self.reset()
            self._set_validity(manual_stop=True)

    def song_loaded(self) -> None:
        self.reset()

    def reset(self) -> None:
        """Discard all session state and return to idle."""
        with self._lock:
            logger.info("Resetting scorer (score was %s)", self._score)
            self._clear_state()
            self.events.emit(ScorerEventType.SESSION_RESET)
            self.events.emit(ScorerEventType.SCORE_CHANGED, self._score)
            self.events.emit(ScorerEventType.VALIDITY_CHANGED, self._validity)
            self.events.emit(ScorerEventType.LIVE_UPDATED, self._live)

    def finish_song(
        self,
        track_id: Optional[int] = None,
        song_name: str = "",
        instrument_name: str = "",
    ) -> SongSummary:
        """Close the session after playback finished naturally.

        Returns:
            Summary with the final score and validity for the session gate
        """
        with self._lock:
            self._backfill_missed()
            self._pending.clear()
            self._stability.clear()
            self._finished = True

            summary = SongSummary(
                score=self._score,
                validity=self._validity,
                track_id=track_id,
                song_name=song_name,
                instrument_name=instrument_name,
                results=self.results,
            )
            logger.info(
                "Song finished: %s on %s, score %s, %s",
                song_name or "<unnamed>",
                instrument_name or "<unknown>",
                self._score,
                self.state.value,
            )
            self.events.emit(ScorerEventType.SONG_FINISHED, summary)
            return summary

    # ------------------------------------------------------------------
    # Internal setters
    # ------------------------------------------------------------------

    def _set_live(self, live: LiveReadout) -> LiveReadout:
        self._live = live
        self.events.emit(ScorerEventType.LIVE_UPDATED, live)
        return live

    def _set_score(self, score: Score) -> None:
        self._score = score
        self.events.emit(ScorerEventType.SCORE_CHANGED, score)

    def _set_validity(self, **flags: bool) -> None:
        updated = replace(self._validity, **flags)
        if updated == self._validity:
            return
        self._validity = updated
        logger.info("Validity changed: %s", updated)
        self.events.emit(ScorerEventType.VALIDITY_CHANGED, updated)
