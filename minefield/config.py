"""Difficulty presets and logging setup."""

import logging
from typing import Dict, Tuple, Union

from .errors import ConfigurationError
from .types import GameParams

# Standard difficulty levels: name -> (rows, cols, mines)
DIFFICULTY_LEVELS: Dict[str, Tuple[int, int, int]] = {
    "beginner": (9, 9, 10),
    "intermediate": (16, 16, 40),
    "expert": (16, 30, 99),
}

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def params_for_level(level: str) -> GameParams:
    """
    Return the board parameters of a standard difficulty level.

    Raises:
        ConfigurationError: If the level is unknown.
    """
    try:
        rows, cols, mines = DIFFICULTY_LEVELS[level.lower()]
    except KeyError:
        raise ConfigurationError(
            f"Unknown level {level!r}; expected one of {sorted(DIFFICULTY_LEVELS)}."
        ) from None
    return GameParams(rows=rows, cols=cols, mines=mines)


def configure_logging(level: Union[int, str] = logging.INFO) -> None:
    """Route package log records to stderr; meant for scripts, not library code."""
    logging.basicConfig(level=level, format=LOG_FORMAT)
