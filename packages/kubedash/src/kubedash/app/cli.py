"""Entry point for the kubedash CLI."""

from __future__ import annotations

import argparse
import logging
import sys
from dataclasses import replace
from pathlib import Path

from kubedash.app.config import SPLIT_DIRECTIONS, Config, ConfigError, load_config, validate_config

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="kubedash", description="kubedash: terminal dashboard for Kubernetes")
    parser.add_argument("-n", "--namespace", action="append", dest="namespaces", help="Namespace to watch (repeatable)")
    parser.add_argument("--context", help="kubectl context to use")
    parser.add_argument("--split", choices=SPLIT_DIRECTIONS, help="Initial split direction of list/detail tabs")
    parser.add_argument("--tick-rate", type=float, help="Seconds between redraw ticks")
    parser.add_argument("--poll-interval", type=float, help="Seconds between kubectl polls")
    parser.add_argument("--no-carry-style", action="store_true", help="Reset styling on every wrapped row")
    parser.add_argument("--kubectl", help="Path to the kubectl binary")
    parser.add_argument("--config", type=Path, default=None, help="Config file (default: ~/.kubedash/config.json)")
    parser.add_argument("--log-file", default=None, help="Write logs to this file")
    parser.add_argument("--log-level", default="info", choices=["debug", "info", "warning", "error"])
    return parser


def configure_logging(log_file: str | None, level: str) -> None:
    """Log to *log_file*; without one, logs are discarded so the screen stays clean."""
    if log_file:
        logging.basicConfig(filename=log_file, level=getattr(logging, level.upper()), format=LOG_FORMAT)
    else:
        logging.getLogger("kubedash").addHandler(logging.NullHandler())
        logging.getLogger("kubedash").propagate = False


def apply_args(config: Config, args: argparse.Namespace) -> Config:
    """Return *config* with every option given on the command line applied."""
    overrides: dict[str, object] = {}
    if args.namespaces:
        overrides["namespaces"] = list(args.namespaces)
    if args.context:
        overrides["context"] = args.context
    if args.split:
        overrides["split_direction"] = args.split
    if args.tick_rate is not None:
        overrides["tick_rate"] = args.tick_rate
    if args.poll_interval is not None:
        overrides["poll_interval"] = args.poll_interval
    if args.no_carry_style:
        overrides["carry_style"] = False
    if args.kubectl:
        overrides["kubectl"] = args.kubectl
    config = replace(config, **overrides)
    validate_config(config)
    return config


def main(argv: list[str] | None = None) -> None:
    args = build_parser().parse_args(argv)
    configure_logging(args.log_file, args.log_level)

    try:
        config = apply_args(load_config(args.config), args)
    except ConfigError as e:
        print(f"kubedash: {e}", file=sys.stderr)
        sys.exit(2)

    from kubedash.app.dashboard import Dashboard

    logging.getLogger(__name__).info("starting with namespaces=%s context=%s", config.namespaces, config.context)
    Dashboard(config).run()


if __name__ == "__main__":
    main()
