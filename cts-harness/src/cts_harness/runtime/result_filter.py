from __future__ import annotations

import logging
from typing import Mapping, Optional, Sequence

from cts_harness.result.listener import PackageContext, ResultListener
from cts_harness.result.status import TestId, TestStatus
from cts_harness.runtime.interfaces import TestPackageDef

logger = logging.getLogger(__name__)


def package_context(package_def: TestPackageDef) -> PackageContext:
    return PackageContext(
        name=package_def.uri,
        app_package_name=package_def.app_package_name,
        digest=package_def.digest,
    )


class ResultFilter:
    """Routes one package's events to every listener, attributed to that package.

    Test objects report under whatever run name their instrumentation uses;
    listeners always see the package uri and digest instead.
    """

    def __init__(self, listeners: Sequence[ResultListener], package_def: TestPackageDef) -> None:
        self._listeners = list(listeners)
        self.context = package_context(package_def)

    def test_run_started(self, run_name: str, test_count: int) -> None:
        if run_name != self.context.name:
            logger.debug("attributing run %r to package %s", run_name, self.context.name)
        for listener in self._listeners:
            listener.test_run_started(self.context, test_count)

    def test_started(self, test: TestId) -> None:
        for listener in self._listeners:
            listener.test_started(self.context, test)

    def test_failed(self, test: TestId, trace: str, status: TestStatus = TestStatus.FAIL) -> None:
        for listener in self._listeners:
            listener.test_failed(self.context, test, trace, status)

    def test_ended(self, test: TestId) -> None:
        for listener in self._listeners:
            listener.test_ended(self.context, test)

    def test_run_failed(self, message: str) -> None:
        for listener in self._listeners:
            listener.test_run_failed(self.context, message)

    def test_run_ended(self, elapsed_ms: int, metrics: Optional[Mapping[str, str]] = None) -> None:
        for listener in self._listeners:
            listener.test_run_ended(self.context, elapsed_ms, metrics)
