"""Result aggregation: namespace tree, package/session documents and the collecting sink."""

from __future__ import annotations

from cts_harness.result.collector import ResultCollector
from cts_harness.result.listener import PackageContext, ResultListener, TestReporter
from cts_harness.result.package_result import SIGNATURE_TEST_PKG, PackageResult
from cts_harness.result.session import PackageTestId, SessionResult
from cts_harness.result.status import TestId, TestOutcome, TestStatus
from cts_harness.result.suite import ResultTree, SuiteNode, TestLocation
from cts_harness.result.xml_io import XmlCursor, XmlWriter

__all__ = [
    "PackageContext",
    "PackageResult",
    "PackageTestId",
    "ResultCollector",
    "ResultListener",
    "ResultTree",
    "SIGNATURE_TEST_PKG",
    "SessionResult",
    "SuiteNode",
    "TestId",
    "TestLocation",
    "TestOutcome",
    "TestReporter",
    "TestStatus",
    "XmlCursor",
    "XmlWriter",
]
