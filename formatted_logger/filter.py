"""Target/level filtering — one predicate shared by every entry point."""

import logging
from dataclasses import dataclass, replace
from typing import Callable, FrozenSet, Iterable, Optional

from formatted_logger.levels import Level, from_logging_level

MaxLevel = Callable[[], Level]


@dataclass(frozen=True)
class FilterConfig:
    allow: Optional[FrozenSet[str]] = None
    skip: Optional[FrozenSet[str]] = None

    @classmethod
    def build(cls, allow: Iterable[str] | None = None,
              skip: Iterable[str] | None = None) -> "FilterConfig":
        return cls(allow=_freeze(allow), skip=_freeze(skip))

    def with_allowed(self, targets: Iterable[str] | None) -> "FilterConfig":
        """Return a copy whose allow set is replaced wholesale."""
        return replace(self, allow=_freeze(targets))

    def with_skipped(self, targets: Iterable[str] | None) -> "FilterConfig":
        """Return a copy whose skip set is replaced wholesale."""
        return replace(self, skip=_freeze(targets))


def _freeze(targets: Iterable[str] | None) -> Optional[FrozenSet[str]]:
    if targets is None:
        return None
    return frozenset(targets)


def is_allowed(config: FilterConfig, target: str, level: Level,
               max_level: MaxLevel) -> bool:
    """Return True if an event from *target* at *level* should be emitted.

    Rules, first decisive one wins: too verbose for the current threshold,
    not in the allow set, in the skip set. An empty allow set admits nothing.
    """
    if level > max_level():
        return False

    if config.allow is not None and target not in config.allow:
        return False

    if config.skip is not None and target in config.skip:
        return False

    return True


def static_max_level(level: Level = Level.TRACE) -> MaxLevel:
    """Threshold provider that always returns *level*."""
    return lambda: level


def logging_max_level(logger_name: str | None = None) -> MaxLevel:
    """Threshold provider backed by a standard library logger.

    The logger's effective level is read on every call, so later
    ``setLevel`` calls take effect immediately.
    """
    std_logger = logging.getLogger(logger_name)

    def _current() -> Level:
        return from_logging_level(std_logger.getEffectiveLevel())

    return _current
