import os
import json
from dataclasses import asdict
from typing import Any, Dict, Optional

from .core.interfaces import IScoreStore, ScoreStoreError
from .logging_config import get_logger
from .note_types import SaveOffer

# Get logger for this module
logger = get_logger(__name__)

DEFAULT_STATS_FILE = os.path.join(
    os.path.expanduser("~"), ".config", "pitch_scorer", "scores.json"
)


def load_stats(path: str) -> Dict[str, Any]:
    if not os.path.exists(path):
        return {"best": {}, "history": []}
    with open(path, "r") as f:
        return json.load(f)


def save_stats(path: str, stats: Dict[str, Any]) -> None:
    directory = os.path.dirname(path)
    if directory:
        os.makedirs(directory, exist_ok=True)
    with open(path, "w") as f:
        json.dump(stats, f, indent=2)


def update_stats(path: str, offer: SaveOffer):
    """Append a result to the history and track the best percentage per track.

    Returns:
        (stats, updated) where updated is True if this is a new best
    """
    stats = load_stats(path)
    best = stats.setdefault("best", {})
    key = str(offer.track_id)
    updated = False
    if offer.percentage > best.get(key, {}).get("percentage", -1):
        best[key] = {
            "percentage": offer.percentage,
            "song_name": offer.song_name,
            "instrument": offer.instrument,
        }
        updated = True
    stats.setdefault("history", []).append(asdict(offer))
    save_stats(path, stats)
    return stats, updated


class JsonScoreStore(IScoreStore):
    """Keeps accepted results in a local JSON file."""

    def __init__(self, path: Optional[str] = None):
        self.path = path or DEFAULT_STATS_FILE

    def save_score(self, offer: SaveOffer) -> None:
        try:
            _, updated = update_stats(self.path, offer)
        except (OSError, ValueError) as e:
            raise ScoreStoreError(f"Could not write {self.path}: {e}") from e
        if updated:
            logger.info(
                "New best for track %d: %d%%", offer.track_id, offer.percentage
            )

    def best(self, track_id: int) -> Optional[int]:
        """Best saved percentage for a track, or None."""
        entry = load_stats(self.path).get("best", {}).get(str(track_id))
        return entry["percentage"] if entry else None
