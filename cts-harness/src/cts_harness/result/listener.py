from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping, Optional, Protocol, runtime_checkable

from cts_harness.result.status import TestId, TestStatus


@dataclass(frozen=True)
class PackageContext:
    """Package identity that every reported result is attributed to."""

    name: str
    app_package_name: Optional[str] = None
    digest: Optional[str] = None


@runtime_checkable
class TestReporter(Protocol):
    """Events a running test object reports, before package attribution."""

    def test_run_started(self, run_name: str, test_count: int) -> None: ...

    def test_started(self, test: TestId) -> None: ...

    def test_failed(
        self, test: TestId, trace: str, status: TestStatus = TestStatus.FAIL
    ) -> None: ...

    def test_ended(self, test: TestId) -> None: ...

    def test_run_failed(self, message: str) -> None: ...

    def test_run_ended(
        self, elapsed_ms: int, metrics: Optional[Mapping[str, str]] = None
    ) -> None: ...


@runtime_checkable
class ResultListener(Protocol):
    """A result sink. Every event carries the package it belongs to."""

    def test_run_started(self, context: PackageContext, test_count: int) -> None: ...

    def test_started(self, context: PackageContext, test: TestId) -> None: ...

    def test_failed(
        self,
        context: PackageContext,
        test: TestId,
        trace: str,
        status: TestStatus = TestStatus.FAIL,
    ) -> None: ...

    def test_ended(self, context: PackageContext, test: TestId) -> None: ...

    def test_run_failed(self, context: PackageContext, message: str) -> None: ...

    def test_run_ended(
        self,
        context: PackageContext,
        elapsed_ms: int,
        metrics: Optional[Mapping[str, str]] = None,
    ) -> None: ...
