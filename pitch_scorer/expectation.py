"""Turning score beats into expected-note events for the engine."""

import math
from dataclasses import dataclass
from typing import Iterable, Optional

from .logging_config import get_logger
from .note_types import ExpectedBeat

logger = get_logger(__name__)

# Playback within this many seconds of the top counts as "from the beginning"
START_POSITION_TOLERANCE_S = 1.0


@dataclass(frozen=True)
class ScoreNote:
    """A note as the score renderer reports it."""

    pitch: Optional[float]  # MIDI-like pitch, None if the renderer had none
    is_ghost: bool = False  # grace note shown in parentheses
    is_dead: bool = False  # muted/percussive note marked with 'X'

    @property
    def is_playable(self) -> bool:
        if self.is_ghost or self.is_dead or self.pitch is None:
            return False
        try:
            return math.isfinite(self.pitch)
        except TypeError:
            return False


def beat_identifier(bar_index: int, beat_index: int) -> int:
    """Unique id of a beat across the song, or -1 if either index is unknown."""
    if bar_index < 0 or beat_index < 0:
        return -1
    return bar_index * 1000 + beat_index


def build_expected_beat(
    bar_index: int,
    beat_index: int,
    notes: Iterable[ScoreNote],
    timestamp: Optional[float] = None,
) -> ExpectedBeat:
    """Build the ExpectedBeat for one score beat.

    Ghost and dead notes are not scored. The remaining notes sound together,
    so they form a single chord (a single note is a chord of one).
    """
    pitches = tuple(int(n.pitch) for n in notes if n.is_playable)
    chords = (pitches,) if pitches else ()
    beat = ExpectedBeat(
        beat_id=beat_identifier(bar_index, beat_index),
        chords=chords,
        is_first_beat=bar_index == 0 and beat_index == 0,
        timestamp=timestamp,
    )
    logger.debug("Built beat %d with chords %s", beat.beat_id, chords)
    return beat


def started_from_beginning(time_position: float) -> bool:
    """Whether a playback position (seconds) counts as the start of the song."""
    return time_position < START_POSITION_TOLERANCE_S
