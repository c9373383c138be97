"""Collaborators the runner drives but does not implement.

Device access, package repositories, instrumentation and device-info
collection are provided by the embedding harness.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional, Protocol, Sequence, runtime_checkable

from cts_harness.result.listener import ResultListener, TestReporter


@runtime_checkable
class TestDevice(Protocol):
    @property
    def serial(self) -> str: ...

    def is_available(self) -> bool: ...


@runtime_checkable
class RemoteTest(Protocol):
    def run(self, reporter: TestReporter) -> None:
        """Run all tests, reporting through `reporter`.

        May raise `DeviceNotAvailableError`.
        """
        ...


@runtime_checkable
class DeviceTest(Protocol):
    """A test object that needs the device handed to it before running."""

    def set_device(self, device: TestDevice) -> None: ...


@runtime_checkable
class TestPackageDef(Protocol):
    @property
    def uri(self) -> str: ...

    @property
    def app_package_name(self) -> Optional[str]: ...

    @property
    def digest(self) -> Optional[str]: ...

    def create_test(self, test_case_dir: Path) -> Optional[RemoteTest]: ...


@runtime_checkable
class TestCaseRepo(Protocol):
    def get_test_package(self, uri: str) -> Optional[TestPackageDef]: ...


@runtime_checkable
class DeviceInfoCollector(Protocol):
    def collect(
        self,
        device: TestDevice,
        test_case_dir: Path,
        listeners: Sequence[ResultListener],
    ) -> None: ...
