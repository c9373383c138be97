"""Plan loading and run request resolution."""

from __future__ import annotations

from cts_harness.plan.plan_parser import list_plans, load_plan, parse_plan, plan_path
from cts_harness.plan.run_request import (
    PackageSeed,
    PlanSeed,
    RunRequest,
    build_run_request,
    resolve_run_request,
)

__all__ = [
    "PackageSeed",
    "PlanSeed",
    "RunRequest",
    "build_run_request",
    "list_plans",
    "load_plan",
    "parse_plan",
    "plan_path",
    "resolve_run_request",
]
