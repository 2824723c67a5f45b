"""FormattedLogger — filter, flatten and render one event per call."""

import logging
from typing import Iterable

from formatted_logger.filter import FilterConfig, MaxLevel, is_allowed, static_max_level
from formatted_logger.flattener import CtxtPolicy, flatten
from formatted_logger.formatters import Formatter, LineFormatter, StructuredFormatter
from formatted_logger.levels import Level
from formatted_logger.models import LogEvent
from formatted_logger.sinks import Sink, StreamSink

logger = logging.getLogger(__name__)


class FormattedLogger:
    """Entry point the host application hands its log events to.

    Holds one immutable FilterConfig; reconfiguring swaps in a new one with
    a single assignment, so concurrent ``handle`` calls always see either the
    old or the new config, never a mix.
    """

    def __init__(
        self,
        formatter: Formatter,
        sink: Sink | None = None,
        max_level: MaxLevel | None = None,
        allow: Iterable[str] | None = None,
        skip: Iterable[str] | None = None,
        ctxt_policy: CtxtPolicy = CtxtPolicy.SKIP_PAIR,
    ):
        self._formatter = formatter
        self._sink = sink if sink is not None else StreamSink()
        self._max_level = max_level if max_level is not None else static_max_level()
        self._filter = FilterConfig.build(allow, skip)
        self._ctxt_policy = CtxtPolicy(ctxt_policy)

    @property
    def formatter(self) -> Formatter:
        return self._formatter

    @property
    def sink(self) -> Sink:
        return self._sink

    @property
    def filter_config(self) -> FilterConfig:
        return self._filter

    @property
    def targets_to_allow(self):
        return self._filter.allow

    @property
    def targets_to_skip(self):
        return self._filter.skip

    def configure(self, allow: Iterable[str] | None = None,
                  skip: Iterable[str] | None = None):
        """Replace both target sets at once."""
        self._filter = FilterConfig.build(allow, skip)
        logger.debug("Filter configured: allow=%s skip=%s", allow, skip)

    def set_allowed_targets(self, targets: Iterable[str]):
        self._filter = self._filter.with_allowed(targets)

    def set_skipped_targets(self, targets: Iterable[str]):
        self._filter = self._filter.with_skipped(targets)

    def enabled(self, target: str, level: Level) -> bool:
        return is_allowed(self._filter, target, level, self._max_level)

    def handle(self, event: LogEvent) -> None:
        """Gated entry point: drop the event unless it passes the filter."""
        if not self.enabled(event.target, event.level):
            return
        self.do_log(event)

    def do_log(self, event: LogEvent) -> None:
        """Render and write *event*.

        Callable directly, so it re-checks the same predicate as ``handle``.
        Context errors are written as diagnostic lines before the event.
        """
        if not self.enabled(event.target, event.level):
            return

        result = flatten(event, self._ctxt_policy)
        for error in result.errors:
            self._sink.write(self._formatter.render_error(error))
        self._sink.write(self._formatter.render(event, result.fields))


def json_logger(**kwargs) -> FormattedLogger:
    """FormattedLogger rendering one JSON object per event."""
    return FormattedLogger(StructuredFormatter(), **kwargs)


def line_logger(**kwargs) -> FormattedLogger:
    """FormattedLogger rendering one human-readable line per event."""
    return FormattedLogger(LineFormatter(), **kwargs)
