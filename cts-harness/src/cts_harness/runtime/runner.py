"""Sequential package execution.

Packages run one after another on the calling thread. A package that can't
be found or has nothing to run is logged and skipped; losing the device
aborts the whole run because every later package would fail the same way.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, List, Optional, Sequence

from cts_harness.config.run_config import RunConfig
from cts_harness.errors import ConfigurationError, DeviceNotAvailableError
from cts_harness.plan.run_request import RunRequest, resolve_run_request
from cts_harness.result.listener import ResultListener
from cts_harness.runtime.interfaces import (
    DeviceInfoCollector,
    DeviceTest,
    TestCaseRepo,
    TestDevice,
    TestPackageDef,
)
from cts_harness.runtime.result_filter import ResultFilter

logger = logging.getLogger(__name__)


@dataclass
class RunSummary:
    executed: List[str] = field(default_factory=list)
    missing: List[str] = field(default_factory=list)
    skipped: List[str] = field(default_factory=list)
    device_info_collected: bool = False


def _ensure_device_available(device: TestDevice) -> None:
    if not device.is_available():
        raise DeviceNotAvailableError(serial=device.serial)


def gather_device_info(
    *,
    device: TestDevice,
    test_case_dir: Path,
    listeners: Sequence[ResultListener],
    collector: Optional[DeviceInfoCollector],
    enabled: bool = True,
) -> bool:
    if not enabled:
        return False
    if collector is None:
        logger.warning("device info collection enabled but no collector configured; skipping")
        return False
    _ensure_device_available(device)
    collector.collect(device, test_case_dir, listeners)
    return True


def run_package(
    package_def: TestPackageDef,
    *,
    device: TestDevice,
    test_case_dir: Path,
    listeners: Sequence[ResultListener],
) -> bool:
    """Run one package; returns False when it has no tests to run."""
    test = package_def.create_test(test_case_dir)
    if test is None:
        return False
    if isinstance(test, DeviceTest):
        test.set_device(device)
    test.run(ResultFilter(listeners, package_def))
    return True


def execute_packages(
    uris: Iterable[str],
    *,
    repo: TestCaseRepo,
    listeners: Sequence[ResultListener],
    device: TestDevice,
    test_case_dir: Path,
    collect_device_info: bool = True,
    device_info_collector: Optional[DeviceInfoCollector] = None,
) -> RunSummary:
    summary = RunSummary()
    summary.device_info_collected = gather_device_info(
        device=device,
        test_case_dir=test_case_dir,
        listeners=listeners,
        collector=device_info_collector,
        enabled=collect_device_info,
    )

    for uri in uris:
        package_def = repo.get_test_package(uri)
        if package_def is None:
            logger.error("Could not find test package uri %s", uri)
            summary.missing.append(uri)
            continue

        _ensure_device_available(device)
        logger.info("Running test package %s", uri)
        try:
            ran = run_package(
                package_def,
                device=device,
                test_case_dir=test_case_dir,
                listeners=listeners,
            )
        except DeviceNotAvailableError:
            logger.error("Device %s became unavailable while running %s", device.serial, uri)
            raise
        if ran:
            summary.executed.append(uri)
        else:
            logger.debug("test package %s has nothing to run", uri)
            summary.skipped.append(uri)

    return summary


class PlanRunner:
    """Validates and resolves a run configuration, then executes it on one device."""

    def __init__(
        self,
        config: RunConfig,
        *,
        device: Optional[TestDevice],
        repo: TestCaseRepo,
        device_info_collector: Optional[DeviceInfoCollector] = None,
    ) -> None:
        self.config = config
        self.device = device
        self.repo = repo
        self.device_info_collector = device_info_collector

    def resolve(self) -> List[str]:
        return resolve_run_request(RunRequest.from_config(self.config))

    def run(self, listeners: Sequence[ResultListener]) -> RunSummary:
        request = RunRequest.from_config(self.config)
        if self.device is None:
            raise ConfigurationError("missing device")
        uris = resolve_run_request(request)
        if request.test_case_dir is None:
            raise ConfigurationError("missing test-cases-path option")

        if self.config.plan:
            logger.info("Executing test plan %s", self.config.plan)
        else:
            logger.info("Executing %d test package(s)", len(uris))

        return execute_packages(
            uris,
            repo=self.repo,
            listeners=listeners,
            device=self.device,
            test_case_dir=request.test_case_dir,
            collect_device_info=self.config.collect_device_info,
            device_info_collector=self.device_info_collector,
        )
