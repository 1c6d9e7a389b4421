#!/usr/bin/env python3

# ruff: noqa: T201

from __future__ import annotations

import argparse
import logging
import sys
from dataclasses import replace
from signal import SIGINT, signal
from typing import TYPE_CHECKING

from dotenv import load_dotenv

from configurer.app import run_agent_once
from configurer.common.logging import configure_logging
from configurer.config import ConfigurationError, get_agent_settings

if TYPE_CHECKING:
    from collections.abc import Sequence
    from types import FrameType

    from configurer.config import AgentSettings


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Retrieve and apply this node's catalog once")
    parser.add_argument(
        "--summarize",
        action="store_true",
        help="Print a summary of the run's metrics when it finishes",
    )
    parser.add_argument(
        "--use-cached-catalog",
        action="store_true",
        help="Apply the locally cached catalog, asking the server only if there is none",
    )
    parser.add_argument(
        "--no-report",
        action="store_true",
        help="Do not send the run report to the report terminus",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Log debug messages",
    )
    return parser.parse_args(list(argv))


def _apply_args(settings: AgentSettings, args: argparse.Namespace) -> AgentSettings:
    overrides: dict[str, bool] = {}
    if args.summarize:
        overrides["summarize"] = True
    if args.use_cached_catalog:
        overrides["use_cached_catalog"] = True
    if args.no_report:
        overrides["report"] = False
    return replace(settings, **overrides) if overrides else settings


def main(argv: Sequence[str] | None = None) -> None:
    """Main application entry point; exits with the run's detailed exit code."""
    parsed_args = _parse_args(sys.argv[1:] if argv is None else argv)
    configure_logging(level=logging.DEBUG if parsed_args.debug else logging.INFO)

    try:
        settings = _apply_args(get_agent_settings(), parsed_args)
    except ConfigurationError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        sys.exit(1)

    try:
        report = run_agent_once(settings)
    except Exception as e:  # noqa: BLE001
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    sys.exit(1 if report is None else report.exit_status)


def sigint_handler(_signal_received: int, _frame: FrameType | None) -> None:
    """Handle SIGINT (Ctrl+C) gracefully."""
    print("\nClosed by user (Ctrl+C)")
    sys.exit(0)


def cli() -> None:
    load_dotenv()
    signal(SIGINT, sigint_handler)
    main()


if __name__ == "__main__":
    cli()
