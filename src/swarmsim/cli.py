# Created by Matthew Valancy
# Copyright 2026 Valpatel Software LLC
# Licensed under AGPL-3.0 — see LICENSE for details.
"""swarmsim command line.

Usage:
    swarmsim resolve scenario.json              # one JSON object per variation
    swarmsim resolve scenario.json -r 3         # override repetitions
    swarmsim check scenario.json                # validate and summarize
"""

from __future__ import annotations

import argparse
import json
import sys

from loguru import logger
from pydantic import ValidationError

from swarmsim import __version__
from swarmsim.config import settings
from swarmsim.errors import ConfigurationError
from swarmsim.scenarios.schema import ScenarioSpec


def _configure_logging(level: str) -> None:
    logger.remove()
    logger.add(sys.stderr, level=level.upper())


def _load(path: str) -> ScenarioSpec:
    return ScenarioSpec.load(path)


def cmd_resolve(args: argparse.Namespace) -> int:
    spec = _load(args.scenario)
    sequence = spec.resolve(args.repetitions)
    for index, variation in enumerate(sequence):
        record = {"index": index, **variation.to_dict()}
        print(json.dumps(record))
    return 0


def cmd_check(args: argparse.Namespace) -> int:
    spec = _load(args.scenario)
    resolver = spec.resolver(args.repetitions)
    sequence = resolver.resolve()
    print(f"scenario:      {spec.name}")
    print(f"order:         {', '.join(resolver.ordered_names) or '(none)'}")
    print(f"master seeds:  {', '.join(str(s) for s in resolver.master_seeds())}")
    print(f"combinations:  {len(sequence.combinations)}")
    print(f"repetitions:   {sequence.repetitions}")
    print(f"variations:    {len(sequence)}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="swarmsim",
        description="Resolve and inspect swarm simulation scenarios",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument(
        "--log-level", default=settings.log_level,
        help="loguru level for stderr output (default: %(default)s)",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    for name, func, help_text in (
        ("resolve", cmd_resolve, "print every variation as a JSON line"),
        ("check", cmd_check, "validate a scenario and print a summary"),
    ):
        cmd = sub.add_parser(name, help=help_text)
        cmd.add_argument("scenario", help="scenario JSON file")
        cmd.add_argument(
            "-r", "--repetitions", type=int, default=None,
            help="override the scenario's repetition count",
        )
        cmd.set_defaults(func=func)
    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    _configure_logging(args.log_level)
    try:
        return args.func(args)
    except (ConfigurationError, ValidationError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2
    except OSError as exc:
        print(f"error: cannot read {args.scenario}: {exc}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    sys.exit(main())
