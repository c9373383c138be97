"""Package execution: collaborator protocols, per-package result routing and the runner."""

from __future__ import annotations

from cts_harness.runtime.result_filter import ResultFilter, package_context
from cts_harness.runtime.runner import PlanRunner, RunSummary, execute_packages, run_package

__all__ = [
    "PlanRunner",
    "ResultFilter",
    "RunSummary",
    "execute_packages",
    "package_context",
    "run_package",
]
