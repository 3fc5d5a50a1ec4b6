"""Serialises the pitch and expectation streams into one scoring engine."""

import queue
from enum import Enum
from typing import Any, List, Optional, Tuple

from .core.interfaces import IExpectationSource, IPitchSource
from .logging_config import get_logger
from .note_types import ExpectedBeat, PitchSample, SaveOffer, SongSummary
from .scoring_engine import ScoringEngine
from .session_gate import SessionGate

# Get logger for this module
logger = get_logger(__name__)


class PlaybackSignal(Enum):
    """Out-of-band signals from the playback controller."""

    STARTED = "playback-started"  # payload: from_beginning (bool)
    PAUSE = "pause"
    MANUAL_STOP = "manual-stop"
    TRACK_CHANGED = "track-changed"
    SEEK = "seek"
    SONG_LOADED = "song-loaded"
    RESET = "reset"
    FINISHED = "finished"  # payload: dict(track_id, song_name, instrument_name)


class ScoringSession:
    """One playback session fed by two independent producers.

    Producers may call the ``submit_*`` methods from any thread. Events are
    queued and applied to the engine in arrival order by
    :meth:`process_events`, which should be called from the owning loop.
    """

    def __init__(
        self,
        engine: Optional[ScoringEngine] = None,
        gate: Optional[SessionGate] = None,
    ) -> None:
        self.engine = engine or ScoringEngine()
        self.gate = gate or SessionGate(events=self.engine.events)
        self.event_queue: "queue.Queue[Tuple[str, Any, Any]]" = queue.Queue()
        self.running = False
        self.summaries: List[SongSummary] = []
        self.offers: List[SaveOffer] = []
        self._pitch_source: Optional[IPitchSource] = None
        self._expectation_source: Optional[IExpectationSource] = None

    def start(
        self,
        pitch_source: Optional[IPitchSource] = None,
        expectation_source: Optional[IExpectationSource] = None,
    ) -> None:
        """Start accepting events and wire up the given sources."""
        self.running = True
        if pitch_source is not None:
            if not pitch_source.start(callback=self.submit_pitch):
                self.running = False
                raise RuntimeError("Failed to start pitch source")
            self._pitch_source = pitch_source
        if expectation_source is not None:
            if not expectation_source.start(callback=self.submit_beat):
                self.stop()
                raise RuntimeError("Failed to start expectation source")
            self._expectation_source = expectation_source
        logger.info("Scoring session started")

    def stop(self) -> None:
        """Stop the sources; queued events are dropped."""
        self.running = False
        if self._pitch_source is not None:
            self._pitch_source.stop()
            self._pitch_source = None
        if self._expectation_source is not None:
            self._expectation_source.stop()
            self._expectation_source = None
        self._drain()
        logger.info("Scoring session stopped. Score: %s", self.engine.score)

    # ------------------------------------------------------------------
    # Producers
    # ------------------------------------------------------------------

    def submit_pitch(self, sample: PitchSample) -> None:
        if self.running:
            self.event_queue.put(("pitch", sample, None))

    def submit_beat(self, beat: ExpectedBeat) -> None:
        if self.running:
            self.event_queue.put(("beat", beat, None))

    def submit_signal(self, signal: PlaybackSignal, payload: Any = None) -> None:
        if self.running:
            self.event_queue.put(("signal", signal, payload))

    # ------------------------------------------------------------------
    # Consumer
    # ------------------------------------------------------------------

    def process_events(self) -> int:
        """Apply all queued events to the engine, in order.

        Returns:
            Number of events processed
        """
        processed = 0
        try:
            while True:
                kind, item, payload = self.event_queue.get_nowait()
                self._dispatch(kind, item, payload)
                processed += 1
        except queue.Empty:
            pass
        return processed

    def _drain(self) -> None:
        try:
            while True:
                self.event_queue.get_nowait()
        except queue.Empty:
            pass

    def _dispatch(self, kind: str, item: Any, payload: Any) -> None:
        if kind == "pitch":
            self.engine.on_pitch(item.hz, item.timestamp)
        elif kind == "beat":
            self.engine.on_expected_beat(item)
        elif kind == "signal":
            self._handle_signal(item, payload)
        else:
            logger.warning(f"Unknown event kind: {kind}")

    def _handle_signal(self, signal: PlaybackSignal, payload: Any) -> None:
        engine = self.engine
        if signal is PlaybackSignal.STARTED:
            engine.playback_started(bool(payload))
        elif signal is PlaybackSignal.PAUSE:
            engine.pause()
        elif signal is PlaybackSignal.MANUAL_STOP:
            engine.manual_stop()
        elif signal is PlaybackSignal.TRACK_CHANGED:
            engine.track_changed()
        elif signal is PlaybackSignal.SEEK:
            engine.seek()
        elif signal is PlaybackSignal.SONG_LOADED:
            engine.song_loaded()
        elif signal is PlaybackSignal.RESET:
            engine.reset()
        elif signal is PlaybackSignal.FINISHED:
            self._finish(payload or {})

    def _finish(self, info: dict) -> None:
        summary = self.engine.finish_song(
            track_id=info.get("track_id"),
            song_name=info.get("song_name", ""),
            instrument_name=info.get("instrument_name", ""),
        )
        self.summaries.append(summary)
        offer = self.gate.evaluate(summary)
        if offer is not None:
            self.offers.append(offer)
