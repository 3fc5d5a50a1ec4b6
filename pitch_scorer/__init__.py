"""Real-time scoring of played pitches against a song's expected notes."""

from .core.config import ScorerConfig
from .core.events import EventEmitter, ScorerEventType
from .note_types import (
    ExpectedBeat,
    LiveReadout,
    NoteResult,
    PitchSample,
    SaveOffer,
    Score,
    SessionState,
    SongSummary,
    ValidityRecord,
)
from .scoring_engine import ScoringEngine
from .session import PlaybackSignal, ScoringSession
from .session_gate import SessionGate

__version__ = "0.1.0"

__all__ = [
    "EventEmitter",
    "ExpectedBeat",
    "LiveReadout",
    "NoteResult",
    "PitchSample",
    "PlaybackSignal",
    "SaveOffer",
    "Score",
    "ScorerConfig",
    "ScorerEventType",
    "ScoringEngine",
    "ScoringSession",
    "SessionGate",
    "SessionState",
    "SongSummary",
    "ValidityRecord",
]
