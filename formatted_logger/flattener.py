"""Flatten an event's key-value payload into a string-to-string field map."""

import json
from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Iterable

import jsonschema
from jsonschema.exceptions import best_match

from formatted_logger.errors import (
    FormattedLoggerError,
    KeyValueTraversalError,
    MalformedContextError,
    ValueCoercionError,
)
from formatted_logger.models import CTXT_KEY, LogEvent, to_field_string

CTXT_SCHEMA = {
    "type": "object",
    "additionalProperties": {"type": "string"},
}

_ctxt_validator = jsonschema.Draft202012Validator(CTXT_SCHEMA)

EMPTY_FIELDS = MappingProxyType({})


class CtxtPolicy(str, Enum):
    """What to do with an event's context when a pair is malformed.

    Applies to unparseable ``ctxt`` values and to keys or values that cannot
    be converted to strings.
    """

    SKIP_PAIR = "skip"   # drop only the bad pair
    ABORT = "abort"      # drop all context for the event


@dataclass(frozen=True)
class FlattenResult:
    fields: Mapping
    errors: list[FormattedLoggerError] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors


def parse_ctxt(value: Any) -> dict[str, str]:
    """Decode a ``ctxt`` value into a flat dict of strings.

    Accepts a JSON string (or bytes) or an already-built mapping.
    Raises MalformedContextError otherwise.
    """
    if isinstance(value, bytes):
        value = value.decode("utf-8", errors="replace")

    if isinstance(value, str):
        try:
            decoded = json.loads(value)
        except json.JSONDecodeError as exc:
            raise MalformedContextError(f"invalid JSON ({exc.msg})") from exc
    elif isinstance(value, Mapping):
        decoded = dict(value)
    else:
        raise MalformedContextError(
            f"expected a JSON object string, got {type(value).__name__}"
        )

    error = best_match(_ctxt_validator.iter_errors(decoded))
    if error is not None:
        raise MalformedContextError(error.message)
    return decoded


def _walk(key_values: Iterable):
    # Any failure while pulling pairs out of the source is a traversal error.
    try:
        for key, value in key_values:
            yield key, value
    except Exception as exc:
        raise KeyValueTraversalError(exc) from exc


def flatten(event: LogEvent, policy: CtxtPolicy = CtxtPolicy.SKIP_PAIR) -> FlattenResult:
    """Collect every key-value pair of *event* as strings.

    A pair keyed ``ctxt`` is expanded: its inner fields are inserted at the
    top level in its place. Later keys overwrite earlier ones.
    """
    policy = CtxtPolicy(policy)
    fields: dict[str, str] = {}
    errors: list[FormattedLoggerError] = []

    try:
        for key, value in _walk(event.key_values):
            try:
                key = to_field_string(key)
                if key == CTXT_KEY:
                    fields.update(parse_ctxt(value))
                else:
                    fields[key] = to_field_string(value)
                continue
            except MalformedContextError as exc:
                error = exc
            except Exception as exc:
                error = ValueCoercionError(key if isinstance(key, str) else "<key>", exc)
            errors.append(error)
            if policy is CtxtPolicy.ABORT:
                return FlattenResult(EMPTY_FIELDS, errors)
    except KeyValueTraversalError as exc:
        errors.append(exc)
        return FlattenResult(EMPTY_FIELDS, errors)

    return FlattenResult(MappingProxyType(fields), errors)
