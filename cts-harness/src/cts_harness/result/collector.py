from __future__ import annotations

import datetime as dt
import logging
from dataclasses import dataclass
from typing import Callable, Dict, Mapping, Optional, Tuple

from cts_harness.result.listener import PackageContext
from cts_harness.result.package_result import PackageResult
from cts_harness.result.session import SessionResult
from cts_harness.result.status import TestId, TestOutcome, TestStatus

logger = logging.getLogger(__name__)

INCOMPLETE_MESSAGE = "test did not complete"


def _utc_timestamp() -> str:
    now = dt.datetime.now(dt.timezone.utc)
    return now.strftime("%Y-%m-%dT%H:%M:%SZ")


def _first_line(trace: Optional[str]) -> Optional[str]:
    lines = (trace or "").strip().splitlines()
    return lines[0] if lines else None


@dataclass
class _Pending:
    start_time: Optional[str]
    status: TestStatus = TestStatus.PASS
    trace: Optional[str] = None


class ResultCollector:
    """Result sink that accumulates listener events into a `SessionResult`."""

    def __init__(
        self,
        session: Optional[SessionResult] = None,
        *,
        clock: Optional[Callable[[], str]] = None,
    ) -> None:
        self.session = session if session is not None else SessionResult()
        self._clock = clock or _utc_timestamp
        self._pending: Dict[Tuple[str, TestId], _Pending] = {}
        self._run_failures: Dict[str, str] = {}

    def _package(self, context: PackageContext) -> PackageResult:
        package = self.session.get_or_create_package(context.name)
        if context.app_package_name is not None:
            package.app_package_name = context.app_package_name
        if context.digest is not None:
            package.digest = context.digest
        return package

    def test_run_started(self, context: PackageContext, test_count: int) -> None:
        self._package(context)
        self._run_failures.pop(context.name, None)
        logger.debug("run started for %s (%d tests)", context.name, test_count)

    def test_started(self, context: PackageContext, test: TestId) -> None:
        self._pending[(context.name, test)] = _Pending(start_time=self._clock())

    def test_failed(
        self,
        context: PackageContext,
        test: TestId,
        trace: str,
        status: TestStatus = TestStatus.FAIL,
    ) -> None:
        pending = self._pending.setdefault((context.name, test), _Pending(start_time=None))
        pending.status = status
        pending.trace = trace

    def test_ended(self, context: PackageContext, test: TestId) -> None:
        pending = self._pending.pop((context.name, test), None) or _Pending(start_time=None)
        self._record(context, test, pending)

    def test_run_failed(self, context: PackageContext, message: str) -> None:
        logger.warning("test run for %s failed: %s", context.name, message)
        self._run_failures[context.name] = message

    def test_run_ended(
        self,
        context: PackageContext,
        elapsed_ms: int,
        metrics: Optional[Mapping[str, str]] = None,
    ) -> None:
        # Tests that started but never reported an end are recorded as failures.
        failure = self._run_failures.pop(context.name, None)
        for key in [k for k in self._pending if k[0] == context.name]:
            pending = self._pending.pop(key)
            pending.status = TestStatus.FAIL
            pending.trace = pending.trace or f"{INCOMPLETE_MESSAGE}: {failure or 'run ended'}"
            self._record(context, key[1], pending)
        logger.debug("run ended for %s after %d ms", context.name, elapsed_ms)

    def _record(self, context: PackageContext, test: TestId, pending: _Pending) -> None:
        outcome = TestOutcome(
            status=pending.status,
            start_time=pending.start_time,
            end_time=self._clock(),
            message=_first_line(pending.trace),
            stack_trace=pending.trace,
        )
        self._package(context).insert_test(test.class_name, test.method_name, outcome)
