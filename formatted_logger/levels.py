"""Log levels — ordered by verbosity, numbered by urgency."""

import logging
from enum import IntEnum

# Standard library logging has no TRACE; 5 sits below DEBUG (10).
LOGGING_TRACE = 5


class Level(IntEnum):
    """Severity of a log event.

    The value doubles as the urgency rank emitted as ``level_value``
    (ERROR=1 is most urgent) and as the verbosity order used for filtering
    (a larger value is more verbose).
    """

    ERROR = 1
    WARN = 2
    INFO = 3
    DEBUG = 4
    TRACE = 5

    def __str__(self) -> str:
        return self.name


_ALIASES = {
    "WARNING": Level.WARN,
    "CRITICAL": Level.ERROR,
    "FATAL": Level.ERROR,
}


def parse_level(text: str) -> Level:
    """Parse a level name (case-insensitive). Raises ValueError if unknown."""
    normalized = text.strip().upper()
    if normalized in Level.__members__:
        return Level[normalized]
    if normalized in _ALIASES:
        return _ALIASES[normalized]
    raise ValueError(f"Unknown log level: {text!r}")


def from_logging_level(levelno: int) -> Level:
    """Map a standard library logging level number onto a Level."""
    if levelno >= logging.ERROR:
        return Level.ERROR
    if levelno >= logging.WARNING:
        return Level.WARN
    if levelno >= logging.INFO:
        return Level.INFO
    if levelno >= logging.DEBUG:
        return Level.DEBUG
    return Level.TRACE


def to_logging_level(level: Level) -> int:
    return {
        Level.ERROR: logging.ERROR,
        Level.WARN: logging.WARNING,
        Level.INFO: logging.INFO,
        Level.DEBUG: logging.DEBUG,
        Level.TRACE: LOGGING_TRACE,
    }[level]
