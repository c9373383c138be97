from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from cts_harness.errors import MalformedResultError


class TestStatus(str, Enum):
    """Per-method outcome values, spelled the way the result document stores them."""

    __test__ = False

    PASS = "pass"
    FAIL = "fail"
    ERROR = "error"
    TIMEOUT = "timeout"
    NOT_EXECUTED = "notExecuted"

    @classmethod
    def from_value(cls, value: Optional[str]) -> "TestStatus":
        for status in cls:
            if status.value == value:
                return status
        raise MalformedResultError(f"unknown test result value: {value!r}")


@dataclass(frozen=True)
class TestOutcome:
    __test__ = False

    status: TestStatus
    start_time: Optional[str] = None
    end_time: Optional[str] = None
    message: Optional[str] = None
    stack_trace: Optional[str] = None

    def has_failure_details(self) -> bool:
        return self.message is not None or self.stack_trace is not None


@dataclass(frozen=True)
class TestId:
    __test__ = False

    class_name: str
    method_name: str

    def __str__(self) -> str:
        return f"{self.class_name}#{self.method_name}"
