"""Defines the collaborator interfaces for pitch-scorer."""

from __future__ import annotations
from abc import ABC, abstractmethod
from typing import Callable

from ..note_types import ExpectedBeat, PitchSample, SaveOffer


class IPitchSource(ABC):
    """Interface for pitch detectors feeding the engine."""

    @abstractmethod
    def start(self, callback: Callable[[PitchSample], None]) -> bool:
        """Start emitting pitch samples."""
        pass

    @abstractmethod
    def stop(self) -> None:
        """Stop emitting pitch samples."""
        pass


class IExpectationSource(ABC):
    """Interface for the playback engine announcing expected beats."""

    @abstractmethod
    def start(self, callback: Callable[[ExpectedBeat], None]) -> bool:
        """Start playback and emit one ExpectedBeat per beat transition."""
        pass

    @abstractmethod
    def stop(self) -> None:
        """Stop playback."""
        pass


class ScoreStoreError(Exception):
    """Raised by a score store when a result could not be persisted."""


class IScoreStore(ABC):
    """Interface for wherever accepted results end up."""

    @abstractmethod
    def save_score(self, offer: SaveOffer) -> None:
        """Persist an accepted result.

        Raises:
            ScoreStoreError: If the result could not be saved
        """
        pass
