#!/usr/bin/env python3
"""formatted-logger — render newline-delimited JSON log events."""

import json
import logging
import sys
from argparse import ArgumentParser

from formatted_logger.config import (
    VALID_FORMATS,
    VALID_POLICIES,
    build_logger,
    load_config,
    load_yaml_config,
    with_overrides,
)
from formatted_logger.models import event_from_dict

logger = logging.getLogger(__name__)


def build_parser() -> ArgumentParser:
    """Build the CLI argument parser."""
    parser = ArgumentParser(
        prog="formatted-logger",
        description="Filter and render structured log events (one JSON object per line).",
    )
    parser.add_argument(
        "files",
        nargs="*",
        help="Event file(s) to read (default: stdin)",
    )
    parser.add_argument("--config", default=None, help="Path to YAML config file")
    parser.add_argument("--format", choices=VALID_FORMATS, help="Output format")
    parser.add_argument(
        "--allow", default=None,
        help="Comma-separated targets to allow (all others are dropped)",
    )
    parser.add_argument(
        "--skip", default=None,
        help="Comma-separated targets to drop",
    )
    parser.add_argument("--max-level", default=None, help="Most verbose level emitted")
    parser.add_argument("--ctxt-policy", choices=VALID_POLICIES, default=None,
                        help="Handling of malformed ctxt values")
    parser.add_argument("--output", default=None, help="'stdout' or a file path")
    return parser


def apply_cli_overrides(config, args):
    """CLI flags take priority over env vars and YAML."""
    return with_overrides(
        config,
        log_format=args.format,
        allowed_targets=args.allow,
        skipped_targets=args.skip,
        max_level=args.max_level,
        ctxt_policy=args.ctxt_policy,
        output=args.output,
    )


def iter_lines(paths: list[str]):
    # Undecodable bytes become U+FFFD so one bad byte cannot abort the run.
    if not paths:
        if hasattr(sys.stdin, "reconfigure"):
            sys.stdin.reconfigure(errors="replace")
        yield from sys.stdin
        return
    for path in paths:
        with open(path, "r", encoding="utf-8", errors="replace") as f:
            yield from f


def run(args) -> int:
    config = apply_cli_overrides(load_config(load_yaml_config(args.config)), args)
    logger.info("Rendering events as %s to %s", config.log_format, config.output)
    formatted_logger = build_logger(config)

    rendered = 0
    invalid = 0
    for line_no, line in enumerate(iter_lines(args.files), start=1):
        if not line.strip():
            continue
        try:
            event = event_from_dict(json.loads(line))
        except (json.JSONDecodeError, ValueError) as e:
            invalid += 1
            logger.warning("Skipping line %d: %s", line_no, e)
            continue
        formatted_logger.handle(event)
        rendered += 1

    close = getattr(formatted_logger.sink, "close", None)
    if close is not None:
        close()

    logger.info("Processed %d event(s), %d invalid line(s)", rendered, invalid)
    return 0


def main() -> int:
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [FORMATTED-LOGGER] %(levelname)s %(message)s",
        stream=sys.stderr,
    )
    return run(build_parser().parse_args())


if __name__ == "__main__":
    sys.exit(main())
