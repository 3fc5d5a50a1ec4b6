import logging
from collections import deque
from typing import Deque, Optional

from ..note_types import StabilityFrame

logger = logging.getLogger(__name__)


class StabilityAnalyzer:
    """
    Sliding window of recent in-tune/out-of-tune judgements against the
    currently best-matching target. A note counts as stable once enough of
    the recent frames are within tolerance.
    """

    def __init__(
        self,
        tolerance_cents: float = 25.0,
        window_size: int = 10,
        required_ok: int = 6,
    ):
        self._tolerance_cents = tolerance_cents
        self._required_ok = required_ok
        self._frames: Deque[StabilityFrame] = deque(maxlen=window_size)

    @property
    def window_size(self) -> int:
        return self._frames.maxlen

    def is_in_tune(self, err_cents: float) -> bool:
        return abs(err_cents) <= self._tolerance_cents

    def add_error(self, err_cents: float, target: int) -> StabilityFrame:
        """Judge one signed cents error and append it to the window."""
        frame = StabilityFrame(
            ok=self.is_in_tune(err_cents), err_cents=abs(err_cents), target=target
        )
        self._frames.append(frame)
        return frame

    def ok_count(self) -> int:
        return sum(1 for f in self._frames if f.ok)

    def is_stable(self) -> bool:
        return self.ok_count() >= self._required_ok

    def last_frame(self) -> Optional[StabilityFrame]:
        return self._frames[-1] if self._frames else None

    def clear(self) -> None:
        if self._frames:
            logger.debug("Clearing stability window (%d frames)", len(self._frames))
        self._frames.clear()

    def __len__(self) -> int:
        return len(self._frames)
