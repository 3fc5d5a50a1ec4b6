"""Logging setup for pitch-scorer.

Modules get their logger with ``get_logger(__name__)``. Only the
``pitch_scorer`` logger carries a handler; per-module loggers set their
own level and propagate to it.
"""

import logging
import sys
from typing import Optional

# Log levels for different modules
MODULE_LOG_LEVELS = {
    "pitch_scorer": logging.INFO,
    "pitch_scorer.scoring_engine": logging.INFO,  # DEBUG shows every beat and clock choice
    "pitch_scorer.session": logging.INFO,
    "pitch_scorer.session_gate": logging.INFO,
    "pitch_scorer.note_matcher": logging.INFO,
    "pitch_scorer.expectation": logging.INFO,
    "pitch_scorer.stats": logging.INFO,
    "pitch_scorer.core": logging.INFO,
    "pitch_scorer.cli": logging.INFO,
    # Root logger
    "": logging.ERROR,
}

_console_handler: Optional[logging.Handler] = None


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)


def setup_logging(level: Optional[str] = None) -> None:
    """Attach the console handler and apply the per-module levels.

    Args:
        level: If provided, override all 'pitch_scorer' log levels with this level (e.g., "DEBUG").
    """
    global _console_handler

    # New handler on every call so it writes to the current stdout
    _console_handler = logging.StreamHandler(sys.stdout)
    _console_handler.setFormatter(
        logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
    )

    log_levels = MODULE_LOG_LEVELS.copy()
    if level:
        numeric_level = logging.getLevelName(level.upper())
        if isinstance(numeric_level, int):
            for module_name in log_levels:
                if module_name.startswith("pitch_scorer"):
                    log_levels[module_name] = numeric_level
        else:
            logging.getLogger(__name__).error(f"Invalid log level: {level}")

    for module_name, module_level in log_levels.items():
        logger = logging.getLogger(module_name)
        logger.setLevel(module_level)
        if module_name and module_name != "pitch_scorer":
            logger.propagate = True
            continue

        for handler in logger.handlers[:]:
            logger.removeHandler(handler)
        logger.addHandler(_console_handler)
        logger.propagate = False

    logging.getLogger("pitch_scorer").debug("Logging configured")
