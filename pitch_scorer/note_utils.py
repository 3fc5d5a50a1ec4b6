"""Utility functions for comparing detected frequencies with expected pitches."""

import math

import numpy as np

from .logging_config import get_logger

logger = get_logger(__name__)

# Reference pitch: A4 = 440 Hz = MIDI 69
A4_HZ = 440.0
A4_MIDI = 69

CENTS_PER_OCTAVE = 1200
HALF_OCTAVE_CENTS = 600

# Returned when no meaningful error can be computed (no signal)
NO_SIGNAL_CENTS = 1e9

NOTE_NAMES_SHARPS = ["C", "C#", "D", "D#", "E", "F", "F#", "G", "G#", "A", "A#", "B"]
NOTE_NAMES_FLATS = ["C", "Db", "D", "Eb", "E", "F", "Gb", "G", "Ab", "A", "Bb", "B"]


def is_valid_frequency(hz: float, min_hz: float = 0.0) -> bool:
    """Check that ``hz`` is a finite frequency strictly above ``min_hz``."""
    try:
        return math.isfinite(hz) and hz > min_hz
    except TypeError:
        return False


def hz_to_midi(hz: float) -> float:
    """Convert a frequency to a fractional MIDI note number.

    Undefined for ``hz <= 0``; callers must filter silence first.
    """
    return A4_MIDI + 12 * float(np.log2(hz / A4_HZ))


def raw_cents_error(hz: float, target: int) -> float:
    """Signed distance in cents from ``hz`` to ``target`` (can exceed an octave)."""
    if hz <= 0:
        return NO_SIGNAL_CENTS
    return 100 * (hz_to_midi(hz) - target)


def fold_to_octave_window(cents: float) -> float:
    """Fold any cents value into [-600, 600).

    +1200 -> 0, +700 -> -500, -1300 -> -100
    """
    if not math.isfinite(cents):
        return NO_SIGNAL_CENTS
    m = CENTS_PER_OCTAVE
    folded = ((cents + HALF_OCTAVE_CENTS) % m + m) % m - HALF_OCTAVE_CENTS
    # Float rounding can land exactly on the open upper bound
    if folded >= HALF_OCTAVE_CENTS:
        folded -= m
    return folded


def cents_error(hz: float, target: int) -> float:
    """Octave-agnostic signed cents error used for scoring."""
    return fold_to_octave_window(raw_cents_error(hz, target))


def midi_to_note_name(midi: int, use_flats: bool = False) -> str:
    """Convert a MIDI note number to Scientific Pitch Notation (e.g. 60 -> 'C4')."""
    midi = int(midi)
    octave = (midi // 12) - 1
    names = NOTE_NAMES_FLATS if use_flats else NOTE_NAMES_SHARPS
    return f"{names[midi % 12]}{octave}"


def get_note_name(freq: float, use_flats: bool = False) -> str:
    """Convert frequency to the nearest note name in SPN.

    Returns '---' for silence.
    """
    if not is_valid_frequency(freq):
        return "---"
    return midi_to_note_name(int(round(hz_to_midi(freq))), use_flats=use_flats)


def midi_to_hz(midi: float) -> float:
    """Inverse of :func:`hz_to_midi`."""
    return A4_HZ * float(np.power(2.0, (midi - A4_MIDI) / 12.0))
