"""Log event model, value coercion and ctxt payload helpers."""

import json
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Iterable, Mapping, Optional

import jsonschema
from jsonschema.exceptions import best_match

from formatted_logger.levels import Level, parse_level

# Reserved key whose value is expanded into top-level fields.
CTXT_KEY = "ctxt"

EVENT_SCHEMA = {
    "type": "object",
    "required": ["level", "target", "message"],
    "properties": {
        "level": {"type": "string"},
        "target": {"type": "string"},
        "message": {"type": "string"},
        "module_path": {"type": ["string", "null"]},
        "file": {"type": ["string", "null"]},
        "line": {"type": ["integer", "null"], "minimum": 0},
        "key_values": {
            "oneOf": [
                {"type": "object"},
                {
                    "type": "array",
                    "items": {
                        "type": "array",
                        "minItems": 2,
                        "maxItems": 2,
                        "prefixItems": [{"type": "string"}, {}],
                    },
                },
            ]
        },
    },
}

_event_validator = jsonschema.Draft202012Validator(EVENT_SCHEMA)


@dataclass(frozen=True)
class LogEvent:
    level: Level
    target: str
    message: str
    module_path: Optional[str] = None
    file: Optional[str] = None
    line: Optional[int] = None
    key_values: Iterable = field(default_factory=tuple)


def to_field_string(value: Any) -> str:
    """Coerce a key-value payload to its canonical string form."""
    if isinstance(value, str):
        return value
    if isinstance(value, (bytes, bytearray)):
        return bytes(value).decode("utf-8", errors="replace")
    if isinstance(value, bool):
        return "true" if value else "false"
    if value is None:
        return "null"
    if isinstance(value, Enum):
        return value.name
    if isinstance(value, (dict, list, tuple)):
        return json.dumps(value, separators=(",", ":"), default=str)
    return str(value)


def context_from_mapping(fields: Mapping[str, Any]) -> str:
    """Serialize *fields* into the JSON string carried under ``ctxt``."""
    return json.dumps(
        {str(k): to_field_string(v) for k, v in fields.items()},
        separators=(",", ":"),
    )


def context(**fields) -> str:
    """Build a ``ctxt`` value from keyword arguments.

    >>> context(user="alice", req=42)
    '{"user":"alice","req":"42"}'
    """
    return context_from_mapping(fields)


def _pairs(raw: Any) -> tuple:
    if raw is None:
        return ()
    if isinstance(raw, dict):
        return tuple(raw.items())
    return tuple((k, v) for k, v in raw)


def event_from_dict(data: dict) -> LogEvent:
    """Build a LogEvent from a decoded JSON object.

    Raises ValueError if the object does not describe a valid event.
    """
    error = best_match(_event_validator.iter_errors(data))
    if error is not None:
        raise ValueError(f"Invalid event: {error.message}")

    return LogEvent(
        level=parse_level(data["level"]),
        target=data["target"],
        message=data["message"],
        module_path=data.get("module_path"),
        file=data.get("file"),
        line=data.get("line"),
        key_values=_pairs(data.get("key_values")),
    )
