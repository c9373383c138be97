from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence, Tuple

from cts_harness.errors import DeviceNotAvailableError
from cts_harness.result.listener import PackageContext
from cts_harness.result.status import TestId, TestStatus


class FakeDevice:
    def __init__(self, serial: str = "FAKE_SERIAL") -> None:
        self.serial = serial
        self.available = True

    def is_available(self) -> bool:
        return self.available


class FakeTest:
    """Test object that replays a scripted list of (class, method, failure trace or None)."""

    def __init__(
        self,
        results: Sequence[Tuple[str, str, Optional[str]]] = (),
        *,
        run_name: str = "instrumentation",
        on_run: Optional[Callable[[], None]] = None,
    ) -> None:
        self.results = list(results)
        self.run_name = run_name
        self.on_run = on_run
        self.ran = False

    def run(self, reporter: Any) -> None:
        self.ran = True
        reporter.test_run_started(self.run_name, len(self.results))
        if self.on_run is not None:
            self.on_run()
        for class_name, method_name, trace in self.results:
            test = TestId(class_name, method_name)
            reporter.test_started(test)
            if trace is not None:
                reporter.test_failed(test, trace)
            reporter.test_ended(test)
        reporter.test_run_ended(0, {})


class FakeDeviceAwareTest(FakeTest):
    def __init__(self, *args: Any, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self.device: Any = None

    def set_device(self, device: Any) -> None:
        self.device = device


@dataclass
class FakePackageDef:
    uri: str
    app_package_name: Optional[str] = None
    digest: Optional[str] = None
    test: Any = None
    created_with: List[Path] = field(default_factory=list)

    def create_test(self, test_case_dir: Path) -> Any:
        self.created_with.append(test_case_dir)
        return self.test


class FakeRepo:
    def __init__(self, packages: Sequence[FakePackageDef] = ()) -> None:
        self.packages: Dict[str, FakePackageDef] = {p.uri: p for p in packages}
        self.lookups: List[str] = []

    def get_test_package(self, uri: str) -> Optional[FakePackageDef]:
        self.lookups.append(uri)
        return self.packages.get(uri)


class FakeDeviceInfoCollector:
    def __init__(self) -> None:
        self.calls: List[Tuple[Any, Path, int]] = []

    def collect(self, device: Any, test_case_dir: Path, listeners: Sequence[Any]) -> None:
        self.calls.append((device, test_case_dir, len(listeners)))


class RecordingListener:
    def __init__(self) -> None:
        self.events: List[Tuple[Any, ...]] = []

    def test_run_started(self, context: PackageContext, test_count: int) -> None:
        self.events.append(("run_started", context, test_count))

    def test_started(self, context: PackageContext, test: TestId) -> None:
        self.events.append(("started", context.name, str(test)))

    def test_failed(
        self,
        context: PackageContext,
        test: TestId,
        trace: str,
        status: TestStatus = TestStatus.FAIL,
    ) -> None:
        self.events.append(("failed", context.name, str(test), status))

    def test_ended(self, context: PackageContext, test: TestId) -> None:
        self.events.append(("ended", context.name, str(test)))

    def test_run_failed(self, context: PackageContext, message: str) -> None:
        self.events.append(("run_failed", context.name, message))

    def test_run_ended(
        self,
        context: PackageContext,
        elapsed_ms: int,
        metrics: Optional[Mapping[str, str]] = None,
    ) -> None:
        self.events.append(("run_ended", context.name))

    def run_names(self) -> List[str]:
        return [e[1].name for e in self.events if e[0] == "run_started"]


def lose_device(device: FakeDevice) -> Callable[[], None]:
    def _lose() -> None:
        device.available = False
        raise DeviceNotAvailableError(serial=device.serial)

    return _lose
