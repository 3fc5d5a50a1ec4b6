from dataclasses import dataclass
from typing import Iterable, Optional

from .logging_config import get_logger
from .note_utils import cents_error, get_note_name, midi_to_note_name

# Get logger for this module
logger = get_logger(__name__)


@dataclass(frozen=True)
class TargetMatch:
    """Best pending target for a detected frequency."""

    target: int
    err_cents: float  # Signed, folded into [-600, 600)

    @property
    def abs_err(self) -> float:
        return abs(self.err_cents)


class NoteMatcher:
    """
    Encapsulates logic for comparing a detected frequency to expected
    pitches, ignoring octave.
    """

    @staticmethod
    def nearest(hz: float, targets: Iterable[int]) -> Optional[TargetMatch]:
        """
        Pick the target closest to ``hz`` in octave-folded cents.

        Args:
            hz: Detected frequency in Hz (must be a valid, positive frequency)
            targets: Candidate pitches; exact ties go to the lowest pitch
        Returns:
            TargetMatch, or None if there are no candidates
        """
        best: Optional[TargetMatch] = None
        for target in sorted(targets):
            err = cents_error(hz, target)
            if best is None or abs(err) < best.abs_err:
                best = TargetMatch(target=target, err_cents=err)

        if best is not None:
            logger.debug(
                "Matched %.1fHz (%s) -> %s, %+.1f cents",
                hz,
                get_note_name(hz),
                midi_to_note_name(best.target),
                best.err_cents,
            )
        return best

    @staticmethod
    def match(target: int, hz: float, tolerance_cents: float = 25.0) -> bool:
        """Check whether ``hz`` is within tolerance of ``target`` in any octave."""
        return abs(cents_error(hz, target)) <= tolerance_cents
