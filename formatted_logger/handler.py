"""Bridge from the standard library ``logging`` module to FormattedLogger."""

import logging

from formatted_logger.facade import FormattedLogger
from formatted_logger.levels import Level, from_logging_level, to_logging_level
from formatted_logger.models import LogEvent

# Attributes every LogRecord carries; anything else arrived via ``extra``.
_STANDARD_ATTRS = frozenset(
    logging.LogRecord("", logging.INFO, "", 0, "", (), None).__dict__
) | {"message", "asctime", "taskName"}

_exception_formatter = logging.Formatter()


def record_to_event(record: logging.LogRecord) -> LogEvent:
    key_values = [
        (key, value)
        for key, value in record.__dict__.items()
        if key not in _STANDARD_ATTRS
    ]
    if record.exc_info:
        key_values.append(
            ("exception", _exception_formatter.formatException(record.exc_info))
        )

    return LogEvent(
        level=from_logging_level(record.levelno),
        target=record.name,
        message=record.getMessage(),
        module_path=record.module,
        file=record.pathname,
        line=record.lineno,
        key_values=tuple(key_values),
    )


class FormattedLogHandler(logging.Handler):
    """logging.Handler that forwards each record to a FormattedLogger.

    Key-value pairs come from ``extra``::

        log.info("login", extra={"ctxt": context(user="alice"), "op": "login"})
    """

    def __init__(self, formatted_logger: FormattedLogger, level=logging.NOTSET):
        super().__init__(level)
        self.formatted_logger = formatted_logger

    def emit(self, record: logging.LogRecord) -> None:
        try:
            self.formatted_logger.handle(record_to_event(record))
        except Exception:
            self.handleError(record)


def install(std_logger: logging.Logger, formatted_logger: FormattedLogger,
            level: Level = Level.TRACE) -> FormattedLogHandler:
    """Attach a FormattedLogHandler to *std_logger* and set its level."""
    std_logger.setLevel(to_logging_level(level))
    handler = FormattedLogHandler(formatted_logger)
    std_logger.addHandler(handler)
    return handler
