"""Core components for the pitch-scorer application."""

# Import interfaces for easier access
from .interfaces import (
    IPitchSource,
    IExpectationSource,
    IScoreStore,
    ScoreStoreError,
)

__all__ = ["IPitchSource", "IExpectationSource", "IScoreStore", "ScoreStoreError"]
