import pytest

from pitch_scorer.note_types import ExpectedBeat
from pitch_scorer.note_utils import midi_to_hz
from pitch_scorer.scoring_engine import ScoringEngine


class FakeClock:
    """Manually advanced clock in seconds."""

    def __init__(self, now: float = 0.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def beat(beat_id, *chords, first=False):
    return ExpectedBeat(
        beat_id=beat_id,
        chords=tuple(tuple(c) for c in chords),
        is_first_beat=first,
    )


def play(engine, pitch, start, count, step=0.01):
    """Feed ``count`` in-tune samples of ``pitch`` starting at ``start`` seconds.

    Returns the timestamp after the last sample.
    """
    hz = midi_to_hz(pitch)
    t = start
    for i in range(count):
        t = start + i * step
        engine.on_pitch(hz, t)
    return t + step


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def engine(clock):
    return ScoringEngine(clock=clock)
