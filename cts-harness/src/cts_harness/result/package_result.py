from __future__ import annotations

import io
import logging
from typing import List, Optional

from cts_harness.errors import MalformedResultError
from cts_harness.result.status import TestId, TestOutcome, TestStatus
from cts_harness.result.suite import SUITE_TAG, ResultTree
from cts_harness.result.xml_io import END_DOCUMENT, END_TAG, START_TAG, XmlCursor, XmlWriter

logger = logging.getLogger(__name__)

PACKAGE_TAG = "TestPackage"
NAME_ATTR = "name"
APP_PACKAGE_NAME_ATTR = "appPackageName"
DIGEST_ATTR = "digest"
SIGNATURE_CHECK_ATTR = "signatureCheck"

# Result viewers special-case this package; the marker is written for its sake only.
SIGNATURE_TEST_PKG = "android.tests.sigtest"


def split_class_name(class_name: str) -> Optional[tuple[list[str], str]]:
    """Split `a.b.C` into (["a", "b"], "C"); None if there is no namespace to split off."""
    if not class_name or "." not in class_name:
        return None
    *segments, case_name = class_name.split(".")
    return segments, case_name


class PackageResult:
    """Results of one test package, serializable as a self-contained `TestPackage` element."""

    def __init__(
        self,
        name: Optional[str] = None,
        *,
        app_package_name: Optional[str] = None,
        digest: Optional[str] = None,
    ) -> None:
        self.name = name
        self.app_package_name = app_package_name
        self.digest = digest
        self.tree = ResultTree()

    def insert_test(self, class_name: str, method_name: str, outcome: TestOutcome) -> bool:
        """Record one method outcome.

        Returns False (and logs) when `class_name` has no package namespace;
        a single unplaceable result never aborts the package.
        """
        split = split_class_name(class_name)
        if split is None:
            logger.error("Unrecognized package name format for test class %r", class_name)
            return False
        segments, case_name = split
        self.tree.insert(segments, case_name, method_name, outcome)
        return True

    def get_tests_with_status(self, status: TestStatus) -> List[TestId]:
        return [loc.test_id for loc in self.tree.get_tests_with_status(status)]

    def serialize(self, writer: XmlWriter) -> None:
        if not self.name:
            raise ValueError("package result name must be set before serialization")
        attrs = {
            NAME_ATTR: self.name,
            APP_PACKAGE_NAME_ATTR: self.app_package_name,
            DIGEST_ATTR: self.digest,
        }
        if self.name == SIGNATURE_TEST_PKG:
            attrs[SIGNATURE_CHECK_ATTR] = "true"
        writer.start(PACKAGE_TAG, attrs)
        self.tree.serialize(writer)
        writer.end(PACKAGE_TAG)

    @classmethod
    def parse(cls, cursor: XmlCursor) -> "PackageResult":
        """Parse the `TestPackage` element the cursor sits on; leaves it on the end tag."""
        if not cursor.at_start(PACKAGE_TAG):
            raise MalformedResultError(
                f"invalid XML: Expected {PACKAGE_TAG} tag but received {cursor.name}"
            )
        result = cls(
            cursor.attr(NAME_ATTR),
            app_package_name=cursor.attr(APP_PACKAGE_NAME_ATTR),
            digest=cursor.attr(DIGEST_ATTR),
        )
        while True:
            event = cursor.next()
            if event == END_DOCUMENT:
                raise MalformedResultError(f"unexpected end of document inside {PACKAGE_TAG}")
            if event == START_TAG and cursor.name == SUITE_TAG:
                result.tree.merge(ResultTree.parse(cursor).root)
            elif event == END_TAG and cursor.name == PACKAGE_TAG:
                return result

    def to_xml(self) -> str:
        out = io.StringIO()
        writer = XmlWriter(out)
        self.serialize(writer)
        writer.end_document()
        return out.getvalue()

    @classmethod
    def from_xml(cls, text: str) -> "PackageResult":
        cursor = XmlCursor.from_string(text)
        cursor.next_tag()
        return cls.parse(cursor)

    def __repr__(self) -> str:
        return f"PackageResult(name={self.name!r}, digest={self.digest!r})"
