"""Exceptions raised while turning an event into output fields."""


class FormattedLoggerError(Exception):
    """Base class for errors local to the formatting pipeline."""


class MalformedContextError(FormattedLoggerError):
    """The reserved ``ctxt`` value is not a flat JSON object of strings."""

    def __init__(self, reason: str):
        super().__init__(f"malformed ctxt value: {reason}")
        self.reason = reason


class KeyValueTraversalError(FormattedLoggerError):
    """Walking an event's key-value source raised an error."""

    def __init__(self, cause: Exception):
        super().__init__(f"key-value traversal failed: {cause}")
        self.cause = cause


class ValueCoercionError(FormattedLoggerError):
    """A key or value could not be turned into a field string."""

    def __init__(self, key: str, cause: Exception):
        super().__init__(f"cannot convert value of {key!r}: {cause}")
        self.key = key
        self.cause = cause
