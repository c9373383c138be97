"""Namespace tree of test results.

Fully qualified class names are split on `.` and stored as a trie of
`SuiteNode`s; the last segment (the class itself) is a test case on the
deepest node. For example `android.app.cts.ActivityTest#testFoo` lives at
root -> android -> app -> cts, case `ActivityTest`, method `testFoo`.
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass
from typing import Dict, Iterator, List, Optional, Sequence, Tuple

from cts_harness.errors import MalformedResultError
from cts_harness.result.status import TestId, TestOutcome, TestStatus
from cts_harness.result.xml_io import END_DOCUMENT, END_TAG, START_TAG, XmlCursor, XmlWriter

SUITE_TAG = "TestSuite"
CASE_TAG = "TestCase"
TEST_TAG = "Test"
FAILED_SCENE_TAG = "FailedScene"
STACK_TRACE_TAG = "StackTrace"

NAME_ATTR = "name"
RESULT_ATTR = "result"
START_TIME_ATTR = "starttime"
END_TIME_ATTR = "endtime"
MESSAGE_ATTR = "message"

CaseResults = List[Tuple[str, TestOutcome]]


@dataclass(frozen=True)
class TestLocation:
    __test__ = False

    suite_path: Tuple[str, ...]
    case_name: str
    method_name: str

    @property
    def class_name(self) -> str:
        return ".".join((*self.suite_path, self.case_name))

    @property
    def test_id(self) -> TestId:
        return TestId(self.class_name, self.method_name)


class SuiteNode:
    def __init__(self, name: str = "") -> None:
        self.name = name
        self.children: Dict[str, SuiteNode] = {}
        self.cases: Dict[str, CaseResults] = {}

    def get_or_create_child(self, name: str) -> "SuiteNode":
        child = self.children.get(name)
        if child is None:
            child = SuiteNode(name)
            self.children[name] = child
        return child

    def add_result(self, case_name: str, method_name: str, outcome: TestOutcome) -> None:
        self.cases.setdefault(case_name, []).append((method_name, outcome))

    def merge(self, other: "SuiteNode") -> None:
        for child in other.children.values():
            self.get_or_create_child(child.name).merge(child)
        for case_name, results in other.cases.items():
            self.cases.setdefault(case_name, []).extend(results)

    def __repr__(self) -> str:
        return (
            f"SuiteNode(name={self.name!r}, children={list(self.children)}, "
            f"cases={list(self.cases)})"
        )


class ResultTree:
    def __init__(self, root: Optional[SuiteNode] = None) -> None:
        self.root = root if root is not None else SuiteNode()

    def insert(
        self,
        class_path: Sequence[str],
        case_name: str,
        method_name: str,
        outcome: TestOutcome,
    ) -> None:
        node = self.root
        for segment in class_path:
            node = node.get_or_create_child(segment)
        node.add_result(case_name, method_name, outcome)

    def merge(self, node: SuiteNode) -> None:
        if node.name:
            self.root.get_or_create_child(node.name).merge(node)
        else:
            self.root.merge(node)

    def iter_results(self) -> Iterator[Tuple[TestLocation, TestOutcome]]:
        for path, node in self._iter_case_owners():
            for case_name, results in node.cases.items():
                for method_name, outcome in results:
                    yield TestLocation(path, case_name, method_name), outcome

    def get_tests_with_status(self, status: TestStatus) -> List[TestLocation]:
        return [loc for loc, outcome in self.iter_results() if outcome.status == status]

    def count_by_status(self) -> Counter:
        return Counter(outcome.status for _loc, outcome in self.iter_results())

    def _iter_case_owners(self) -> Iterator[Tuple[Tuple[str, ...], SuiteNode]]:
        # Cases of a node come after all of its descendant suites, matching
        # the order they are written in.
        stack: List[Tuple[Tuple[str, ...], SuiteNode, bool]] = [((), self.root, False)]
        while stack:
            path, node, expanded = stack.pop()
            if expanded:
                yield path, node
                continue
            stack.append((path, node, True))
            for child in reversed(list(node.children.values())):
                stack.append(((*path, child.name), child, False))

    def serialize(self, writer: XmlWriter) -> None:
        # Iterative so that deeply nested namespaces don't hit the recursion limit.
        stack: List[Tuple[SuiteNode, bool]] = [(self.root, False)]
        while stack:
            node, closing = stack.pop()
            if closing:
                for case_name, results in node.cases.items():
                    _serialize_case(writer, case_name, results)
                writer.end(SUITE_TAG)
                continue
            writer.start(SUITE_TAG, {NAME_ATTR: node.name})
            stack.append((node, True))
            for child in reversed(list(node.children.values())):
                stack.append((child, False))

    @classmethod
    def parse(cls, cursor: XmlCursor) -> "ResultTree":
        """Parse a `TestSuite` element into a new tree.

        The suite the cursor sits on becomes the root of the returned tree.
        The cursor is left on the matching `TestSuite` end tag.
        """
        if not cursor.at_start(SUITE_TAG):
            raise MalformedResultError(
                f"invalid XML: Expected {SUITE_TAG} tag but received {cursor.name}"
            )
        root = SuiteNode(cursor.attr(NAME_ATTR) or "")
        stack: List[SuiteNode] = [root]
        case_name: Optional[str] = None

        while True:
            event = cursor.next()
            if event == END_DOCUMENT:
                raise MalformedResultError(f"unexpected end of document inside {SUITE_TAG}")
            if event == START_TAG:
                if cursor.name == SUITE_TAG:
                    stack.append(stack[-1].get_or_create_child(cursor.attr(NAME_ATTR) or ""))
                elif cursor.name == CASE_TAG:
                    case_name = cursor.attr(NAME_ATTR) or ""
                elif cursor.name == TEST_TAG:
                    if case_name is None:
                        raise MalformedResultError(f"{TEST_TAG} element outside of {CASE_TAG}")
                    method_name = cursor.attr(NAME_ATTR) or ""
                    stack[-1].add_result(case_name, method_name, _parse_test(cursor))
            elif event == END_TAG:
                if cursor.name == SUITE_TAG:
                    stack.pop()
                    if not stack:
                        return cls(root)
                elif cursor.name == CASE_TAG:
                    case_name = None


def _serialize_case(writer: XmlWriter, case_name: str, results: CaseResults) -> None:
    writer.start(CASE_TAG, {NAME_ATTR: case_name})
    for method_name, outcome in results:
        writer.start(
            TEST_TAG,
            {
                NAME_ATTR: method_name,
                RESULT_ATTR: outcome.status.value,
                START_TIME_ATTR: outcome.start_time,
                END_TIME_ATTR: outcome.end_time,
            },
        )
        if outcome.has_failure_details():
            writer.start(FAILED_SCENE_TAG, {MESSAGE_ATTR: outcome.message})
            if outcome.stack_trace is not None:
                writer.start(STACK_TRACE_TAG)
                writer.text(outcome.stack_trace)
                writer.end(STACK_TRACE_TAG)
            writer.end(FAILED_SCENE_TAG)
        writer.end(TEST_TAG)
    writer.end(CASE_TAG)


def _parse_test(cursor: XmlCursor) -> TestOutcome:
    status = TestStatus.from_value(cursor.attr(RESULT_ATTR))
    start_time = cursor.attr(START_TIME_ATTR)
    end_time = cursor.attr(END_TIME_ATTR)
    message: Optional[str] = None
    stack_trace: Optional[str] = None

    while True:
        event = cursor.next()
        if event == END_DOCUMENT:
            raise MalformedResultError(f"unexpected end of document inside {TEST_TAG}")
        if event == START_TAG and cursor.name == FAILED_SCENE_TAG:
            message = cursor.attr(MESSAGE_ATTR)
        elif event == END_TAG:
            if cursor.name == STACK_TRACE_TAG:
                stack_trace = cursor.text or ""
            elif cursor.name == TEST_TAG:
                break

    return TestOutcome(
        status=status,
        start_time=start_time,
        end_time=end_time,
        message=message,
        stack_trace=stack_trace,
    )
