"""Debouncing of per-sample pitch judgements."""

from .stability_analyzer import StabilityAnalyzer

__all__ = ["StabilityAnalyzer"]
