from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Optional, Sequence

from cts_harness.errors import MalformedResultError
from cts_harness.result.session import SUMMARY_ATTRS, SessionResult
from cts_harness.result.status import TestStatus


def _format_summary(session: SessionResult) -> str:
    counts = session.count_by_status()
    parts = [f"{attr}={counts[status]}" for status, attr in SUMMARY_ATTRS.items()]
    plan = session.plan_name or "-"
    return f"plan={plan} packages={len(session.packages)} " + " ".join(parts)


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Summarize a session result file.")
    parser.add_argument("result", type=Path, help="Session result XML file.")
    parser.add_argument(
        "--status",
        type=str,
        default=TestStatus.FAIL.value,
        choices=[s.value for s in TestStatus],
        help="List the tests with this result (default: fail).",
    )
    parser.add_argument("--summary-only", action="store_true", help="Print the summary line only.")
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.INFO, format="[%(levelname)s] %(name)s: %(message)s")

    if not args.result.is_file():
        print(f"error: result file not found: {args.result}", file=sys.stderr)
        return 2
    try:
        session = SessionResult.load(args.result)
    except MalformedResultError as e:
        print(f"error: {e}", file=sys.stderr)
        return 2

    print(_format_summary(session))
    if args.summary_only:
        return 0

    for entry in session.get_tests_with_status(TestStatus.from_value(args.status)):
        print(f"{entry.package_name}\t{entry.test_id}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
