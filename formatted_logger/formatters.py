"""Output formatters — structured (JSON) and human-readable line."""

import json
from datetime import datetime
from typing import Callable, Mapping, Protocol

from formatted_logger.levels import Level
from formatted_logger.models import LogEvent

TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"


def _dumps(data: Mapping) -> str:
    return json.dumps(dict(data), separators=(",", ":"), ensure_ascii=False)


def location_fields(event: LogEvent) -> dict[str, str]:
    """module_path/file/line of *event*, each only if present."""
    fields = {}
    if event.module_path is not None:
        fields["module_path"] = event.module_path
    if event.file is not None:
        fields["file"] = event.file
    if event.line is not None:
        fields["line"] = str(event.line)
    return fields


class Formatter(Protocol):
    name: str

    def render(self, event: LogEvent, fields: Mapping[str, str]) -> str:
        ...

    def render_error(self, error: Exception) -> str:
        ...


class StructuredFormatter:
    """One compact JSON object per event.

    Context fields go in first; the reserved fields are overlaid after, so a
    context key named ``message`` or ``level`` never replaces the real one.
    """

    name = "json"

    def reserved_fields(self, event: LogEvent) -> dict[str, str]:
        reserved = {
            "message": event.message,
            "level": str(event.level),
            "level_value": str(int(event.level)),
        }
        reserved.update(location_fields(event))
        reserved["target"] = event.target
        return reserved

    def render(self, event: LogEvent, fields: Mapping[str, str]) -> str:
        document = {**fields, **self.reserved_fields(event)}
        return _dumps(document)

    def render_error(self, error: Exception) -> str:
        return _dumps({"logger_error": str(error)})


class LineFormatter:
    """``<timestamp> <LEVEL> <message> <context json> <path info>``.

    Path info (module_path/file/line) is only shown for WARN and ERROR;
    for quieter levels the last segment is empty.
    """

    name = "line"

    def __init__(self, now: Callable[[], datetime] = datetime.now):
        self._now = now

    def timestamp(self) -> str:
        current = self._now()
        return f"{current.strftime(TIMESTAMP_FORMAT)}.{current.microsecond // 1000:03d}"

    def path_info(self, event: LogEvent) -> str:
        if event.level > Level.WARN:
            return ""
        return _dumps(location_fields(event))

    def render(self, event: LogEvent, fields: Mapping[str, str]) -> str:
        return " ".join([
            self.timestamp(),
            str(event.level),
            event.message,
            _dumps(fields),
            self.path_info(event),
        ])

    def render_error(self, error: Exception) -> str:
        return f"Unable to extract log context data: {error}"


FORMATTERS = {
    StructuredFormatter.name: StructuredFormatter,
    LineFormatter.name: LineFormatter,
}


def get_formatter(name: str) -> Formatter:
    """Return a new formatter for *name* ("json" or "line")."""
    key = name.strip().lower()
    if key not in FORMATTERS:
        raise ValueError(
            f"Unknown log format {name!r}, expected one of: {', '.join(FORMATTERS)}"
        )
    return FORMATTERS[key]()
