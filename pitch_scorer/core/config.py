"""Configuration management for pitch-scorer components."""

from dataclasses import asdict, dataclass
from typing import Dict, Any, Optional
import json
import os
from pathlib import Path

from ..logging_config import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class ScorerConfig:
    """Tuning constants for the scoring engine.

    The defaults are the reference behaviour; changing them changes scores.
    """

    tolerance_cents: float = 25.0  # cents window for "in tune"
    window_size: int = 10  # frames to consider
    required_ok: int = 6  # in-tune frames needed within the window
    cooldown_ms: float = 200.0  # minimal time between awards
    silence_hz: float = 30.0  # below the lowest bass string with margin

    @classmethod
    def from_dict(cls, values: Dict[str, Any]) -> "ScorerConfig":
        known = {k: v for k, v in values.items() if k in cls.__dataclass_fields__}
        config = cls(**known)
        config.validate()
        return config

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @property
    def cooldown_s(self) -> float:
        return self.cooldown_ms / 1000.0

    def validate(self) -> None:
        if self.tolerance_cents <= 0:
            raise ValueError(f"tolerance_cents must be positive, got {self.tolerance_cents}")
        if self.window_size < 1:
            raise ValueError(f"window_size must be at least 1, got {self.window_size}")
        if not 1 <= self.required_ok <= self.window_size:
            raise ValueError(
                f"required_ok must be between 1 and window_size ({self.window_size}), "
                f"got {self.required_ok}"
            )
        if self.cooldown_ms < 0:
            raise ValueError(f"cooldown_ms must not be negative, got {self.cooldown_ms}")
        if self.silence_hz < 0:
            raise ValueError(f"silence_hz must not be negative, got {self.silence_hz}")


class ConfigManager:
    """JSON config sections under one directory, one file per section.

    A missing section file is written with the defaults. Keys missing from
    an existing file fall back to their defaults; an unreadable file is
    ignored in favour of the defaults.
    """

    SECTIONS: Dict[str, Dict[str, Any]] = {
        "scorer": ScorerConfig().to_dict(),
        "session_gate": {"duplicate_window_s": 5.0},
    }

    def __init__(self, config_dir: Optional[str] = None):
        if config_dir is None:
            config_dir = os.path.join(os.path.expanduser("~"), ".config", "pitch_scorer")
        self.config_dir = Path(config_dir)
        self.config_dir.mkdir(parents=True, exist_ok=True)
        self.configs = {name: self.load_config(name) for name in self.SECTIONS}

    def load_config(self, name: str) -> Dict[str, Any]:
        path = self.config_dir / f"{name}.json"
        section = dict(self.SECTIONS[name])
        if not path.exists():
            self.save_config(name, section)
            return section
        try:
            stored = json.loads(path.read_text())
        except (OSError, ValueError) as e:
            logger.error(f"Error loading configuration from {path}: {e}")
            return section
        if not isinstance(stored, dict):
            logger.error(f"Ignoring {path}: expected a JSON object")
            return section
        logger.info(f"Loaded configuration from {path}")
        section.update(stored)
        return section

    def save_config(self, name: str, section: Dict[str, Any]) -> bool:
        path = self.config_dir / f"{name}.json"
        try:
            path.write_text(json.dumps(section, indent=2))
        except OSError as e:
            logger.error(f"Error saving configuration to {path}: {e}")
            return False
        logger.info(f"Saved configuration to {path}")
        return True

    def get_config(self, name: str) -> Dict[str, Any]:
        return dict(self.configs.get(name, {}))

    def get_scorer_config(self) -> ScorerConfig:
        """Typed engine configuration built from the 'scorer' section.

        Raises:
            ValueError: if the stored values are out of range
        """
        return ScorerConfig.from_dict(self.get_config("scorer"))

    def get_duplicate_window(self) -> float:
        return float(self.get_config("session_gate")["duplicate_window_s"])
