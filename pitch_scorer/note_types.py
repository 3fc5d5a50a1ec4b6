"""Type definitions for the pitch-scorer project."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Optional, Tuple


@dataclass(frozen=True)
class PitchSample:
    """A single detection tick from the pitch source."""

    hz: float  # Detected fundamental in Hz, 0 or negative for no detection
    timestamp: Optional[float] = None  # Seconds, on the same clock as the engine


@dataclass(frozen=True)
class ExpectedBeat:
    """The notes the score expects at one playback beat."""

    beat_id: int  # bar * 1000 + beat, unique across the song
    chords: Tuple[Tuple[int, ...], ...] = ()
    is_first_beat: bool = False
    timestamp: Optional[float] = None

    @property
    def chord_units(self) -> int:
        """Number of non-empty chords; each counts once towards the total."""
        return sum(1 for chord in self.chords if len(chord) > 0)

    @property
    def has_notes(self) -> bool:
        return self.chord_units > 0


class NoteResult(str, Enum):
    """Feedback tag for one expected pitch within one beat."""

    CORRECT = "correct"
    INCORRECT = "incorrect"
    MISSED = "missed"


BeatResults = Dict[int, Dict[int, NoteResult]]


class SessionState(str, Enum):
    IDLE = "idle"
    ACTIVE = "active"
    VALID_COMPLETE = "valid-complete"
    INVALID_COMPLETE = "invalid-complete"


@dataclass(frozen=True)
class StabilityFrame:
    ok: bool
    err_cents: float
    target: int


@dataclass(frozen=True)
class LiveReadout:
    """Live intonation readout, updated on every pitch sample."""

    err_cents: float = 0.0
    in_tune_stable: bool = False
    target: Optional[int] = None

    @classmethod
    def silence(cls) -> "LiveReadout":
        return cls()


@dataclass(frozen=True)
class Score:
    hits: int = 0
    total: int = 0

    @property
    def percentage(self) -> int:
        """Rounded hit percentage, 0 when nothing was expected."""
        if self.total <= 0:
            return 0
        return int(round(self.hits / self.total * 100))

    def __str__(self):
        return f"{self.hits}/{self.total}"


@dataclass(frozen=True)
class ValidityRecord:
    """Flags deciding whether a finished run may be persisted.

    Everything except ``started`` is latched: once set it stays set until the
    session is reset.
    """

    started: bool = False
    paused: bool = False
    track_changed: bool = False
    manual_stop: bool = False
    seeked: bool = False

    @property
    def is_invalidated(self) -> bool:
        return self.paused or self.track_changed or self.manual_stop or self.seeked

    def is_eligible(self, score: Score) -> bool:
        """True when a run with this record and score may be offered for saving."""
        return self.started and not self.is_invalidated and score.total > 0


@dataclass(frozen=True)
class SongSummary:
    """Emitted once when playback finishes naturally."""

    score: Score
    validity: ValidityRecord
    track_id: Optional[int] = None
    song_name: str = ""
    instrument_name: str = ""
    results: BeatResults = field(default_factory=dict)

    @property
    def is_eligible(self) -> bool:
        return self.validity.is_eligible(self.score)


@dataclass(frozen=True)
class SaveOffer:
    """A finished run the session gate offers for saving."""

    percentage: int
    hits: int
    total: int
    song_name: str
    instrument: str
    track_id: int
