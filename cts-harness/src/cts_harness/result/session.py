"""Whole-invocation result document: every package of one run in a single file."""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional

from cts_harness.errors import MalformedResultError
from cts_harness.result.package_result import PACKAGE_TAG, PackageResult
from cts_harness.result.status import TestId, TestStatus
from cts_harness.result.xml_io import END_DOCUMENT, END_TAG, START_TAG, XmlCursor, XmlWriter

RESULT_TAG = "TestResult"
SUMMARY_TAG = "Summary"
PLAN_ATTR = "testPlan"
START_TIME_ATTR = "starttime"
END_TIME_ATTR = "endtime"

# Summary attribute per status; ordering here is the ordering on disk.
SUMMARY_ATTRS = {
    TestStatus.PASS: "pass",
    TestStatus.FAIL: "failed",
    TestStatus.ERROR: "error",
    TestStatus.TIMEOUT: "timeout",
    TestStatus.NOT_EXECUTED: "notExecuted",
}


@dataclass(frozen=True)
class PackageTestId:
    package_name: str
    test_id: TestId


class SessionResult:
    def __init__(
        self,
        *,
        plan_name: Optional[str] = None,
        start_time: Optional[str] = None,
        end_time: Optional[str] = None,
    ) -> None:
        self.plan_name = plan_name
        self.start_time = start_time
        self.end_time = end_time
        self._packages: Dict[str, PackageResult] = {}

    @property
    def packages(self) -> List[PackageResult]:
        return list(self._packages.values())

    def get_package(self, name: str) -> Optional[PackageResult]:
        return self._packages.get(name)

    def get_or_create_package(self, name: str) -> PackageResult:
        package = self._packages.get(name)
        if package is None:
            package = PackageResult(name)
            self._packages[name] = package
        return package

    def add_package(self, package: PackageResult) -> None:
        if not package.name:
            raise ValueError("package result must be named")
        existing = self._packages.get(package.name)
        if existing is None:
            self._packages[package.name] = package
        else:
            existing.tree.merge(package.tree.root)

    def count_by_status(self) -> Counter:
        counts: Counter = Counter()
        for package in self._packages.values():
            counts.update(package.tree.count_by_status())
        return counts

    def get_tests_with_status(self, status: TestStatus) -> List[PackageTestId]:
        return [
            PackageTestId(package.name or "", test_id)
            for package in self._packages.values()
            for test_id in package.get_tests_with_status(status)
        ]

    def serialize(self, writer: XmlWriter) -> None:
        writer.start(
            RESULT_TAG,
            {
                PLAN_ATTR: self.plan_name,
                START_TIME_ATTR: self.start_time,
                END_TIME_ATTR: self.end_time,
            },
        )
        counts = self.count_by_status()
        writer.start(SUMMARY_TAG, {attr: str(counts[s]) for s, attr in SUMMARY_ATTRS.items()})
        writer.end(SUMMARY_TAG)
        for package in self._packages.values():
            package.serialize(writer)
        writer.end(RESULT_TAG)

    @classmethod
    def parse(cls, cursor: XmlCursor) -> "SessionResult":
        if not cursor.at_start(RESULT_TAG):
            raise MalformedResultError(
                f"invalid XML: Expected {RESULT_TAG} tag but received {cursor.name}"
            )
        session = cls(
            plan_name=cursor.attr(PLAN_ATTR),
            start_time=cursor.attr(START_TIME_ATTR),
            end_time=cursor.attr(END_TIME_ATTR),
        )
        while True:
            event = cursor.next()
            if event == END_DOCUMENT:
                raise MalformedResultError(f"unexpected end of document inside {RESULT_TAG}")
            if event == START_TAG and cursor.name == PACKAGE_TAG:
                session.add_package(PackageResult.parse(cursor))
            elif event == END_TAG and cursor.name == RESULT_TAG:
                return session

    def write(self, path: Path) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        tmp = path.with_suffix(path.suffix + ".tmp")
        with tmp.open("wb") as fh:
            writer = XmlWriter(fh)
            writer.start_document()
            self.serialize(writer)
            writer.end_document()
        tmp.replace(path)

    @classmethod
    def load(cls, path: Path) -> "SessionResult":
        with path.open("rb") as fh:
            cursor = XmlCursor(fh)
            cursor.next_tag()
            return cls.parse(cursor)
