from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Optional, Sequence

from cts_harness.config.run_config import RunConfig, load_run_config
from cts_harness.errors import ConfigurationError
from cts_harness.plan.plan_parser import list_plans
from cts_harness.plan.run_request import RunRequest, resolve_run_request


def _config_from_args(args: argparse.Namespace) -> RunConfig:
    if args.config is not None:
        base = load_run_config(args.config)
    else:
        base = RunConfig()
    return RunConfig(
        test_cases_path=args.test_cases_path or base.test_cases_path,
        test_plans_path=args.test_plans_path or base.test_plans_path,
        plan=args.plan or base.plan,
        packages=tuple(args.package) or base.packages,
        exclude_packages=base.exclude_packages + tuple(args.exclude_package),
        collect_device_info=base.collect_device_info,
    )


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = argparse.ArgumentParser(
        description="Resolve a test plan or package list into the packages that would run."
    )
    parser.add_argument(
        "--config", type=Path, default=None, help="Run config file (YAML or JSON)."
    )
    parser.add_argument("--plan", type=str, default=None, help="the test plan to run")
    parser.add_argument(
        "--package",
        action="append",
        default=[],
        help="the test package(s) to run (repeatable)",
    )
    parser.add_argument(
        "--exclude-package",
        action="append",
        default=[],
        help="the test package(s) to exclude from the run (repeatable)",
    )
    parser.add_argument(
        "--test-cases-path",
        type=Path,
        default=None,
        help="file path to directory containing test cases",
    )
    parser.add_argument(
        "--test-plans-path",
        type=Path,
        default=None,
        help="file path to directory containing test plans",
    )
    parser.add_argument(
        "--list-plans",
        action="store_true",
        help="List the plans available under --test-plans-path and exit.",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging.")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="[%(levelname)s] %(name)s: %(message)s",
    )

    try:
        config = _config_from_args(args)
        if args.list_plans:
            if config.test_plans_path is None:
                raise ConfigurationError("--list-plans requires --test-plans-path")
            for name in list_plans(config.test_plans_path):
                print(name)
            return 0
        uris = resolve_run_request(RunRequest.from_config(config))
    except ConfigurationError as e:
        print(f"error: {e}", file=sys.stderr)
        return 2

    for uri in uris:
        print(uri)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
