"""Configuration loading from defaults, optional YAML file and env vars."""

import os
import logging
from dataclasses import dataclass, replace
from typing import Optional

import yaml

from formatted_logger.facade import FormattedLogger
from formatted_logger.filter import static_max_level
from formatted_logger.flattener import CtxtPolicy
from formatted_logger.formatters import FORMATTERS, get_formatter
from formatted_logger.levels import parse_level
from formatted_logger.sinks import FileSink, StreamSink

logger = logging.getLogger(__name__)

VALID_FORMATS = tuple(FORMATTERS)
VALID_POLICIES = tuple(p.value for p in CtxtPolicy)
STDOUT = "stdout"


def _parse_targets(val) -> Optional[tuple[str, ...]]:
    """Comma-separated string or YAML list -> tuple of targets.

    None or a blank string means unset.
    """
    if val is None:
        return None
    if isinstance(val, str):
        if not val.strip():
            return None
        items = val.split(",")
    else:
        items = [str(v) for v in val]
    return tuple(t.strip() for t in items if t.strip())


@dataclass(frozen=True)
class Config:
    log_format: str = "json"
    allowed_targets: Optional[tuple[str, ...]] = None
    skipped_targets: Optional[tuple[str, ...]] = None
    max_level: str = "TRACE"
    ctxt_policy: str = "skip"
    output: str = STDOUT


def load_yaml_config(path: str | None) -> dict:
    """Load settings from a YAML file. Returns empty dict if no path."""
    if not path:
        return {}
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
        logger.info("Loaded YAML config from %s", path)
    except FileNotFoundError:
        logger.warning("Config file %s not found, using defaults", path)
        return {}
    if not isinstance(data, dict):
        logger.warning("Config file %s is not a mapping, using defaults", path)
        return {}
    return data


def _validated_format(val: str) -> str:
    log_format = str(val).strip().lower()
    if log_format not in VALID_FORMATS:
        logger.warning("Invalid log format '%s', falling back to 'json'", val)
        return Config.log_format
    return log_format


def _validated_level(val: str) -> str:
    try:
        return parse_level(str(val)).name
    except ValueError:
        logger.warning("Invalid max level '%s', falling back to TRACE", val)
        return Config.max_level


def _validated_policy(val: str) -> str:
    policy = str(val).strip().lower()
    if policy not in VALID_POLICIES:
        logger.warning("Invalid ctxt policy '%s', falling back to 'skip'", val)
        return Config.ctxt_policy
    return policy


def load_config(yaml_data: dict | None = None) -> Config:
    """Build Config from defaults <- YAML data <- env vars."""
    data = dict(yaml_data or {})

    allowed = os.environ.get("ALLOWED_TARGETS", data.get("allowed_targets"))
    skipped = os.environ.get("SKIPPED_TARGETS", data.get("skipped_targets"))

    return Config(
        log_format=_validated_format(
            os.environ.get("LOG_FORMAT", data.get("log_format", Config.log_format))
        ),
        allowed_targets=_parse_targets(allowed),
        skipped_targets=_parse_targets(skipped),
        max_level=_validated_level(
            os.environ.get("MAX_LOG_LEVEL", data.get("max_level", Config.max_level))
        ),
        ctxt_policy=_validated_policy(
            os.environ.get("CTXT_POLICY", data.get("ctxt_policy", Config.ctxt_policy))
        ),
        output=os.environ.get("LOG_OUTPUT", data.get("output", Config.output)),
    )


def build_logger(config: Config) -> FormattedLogger:
    """Construct the FormattedLogger described by *config*."""
    if config.allowed_targets == ():
        logger.warning("Allowed targets list is empty, every event will be dropped")
    if config.output == STDOUT:
        sink = StreamSink()
    else:
        sink = FileSink(config.output)

    return FormattedLogger(
        get_formatter(config.log_format),
        sink=sink,
        max_level=static_max_level(parse_level(config.max_level)),
        allow=config.allowed_targets,
        skip=config.skipped_targets,
        ctxt_policy=CtxtPolicy(config.ctxt_policy),
    )


def with_overrides(config: Config, **overrides) -> Config:
    """Return *config* with the non-None *overrides* validated and applied."""
    validators = {
        "log_format": _validated_format,
        "allowed_targets": _parse_targets,
        "skipped_targets": _parse_targets,
        "max_level": _validated_level,
        "ctxt_policy": _validated_policy,
        "output": str,
    }
    changes = {
        key: validators[key](value)
        for key, value in overrides.items()
        if value is not None
    }
    return replace(config, **changes)
