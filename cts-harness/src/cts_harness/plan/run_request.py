"""Turn run configuration into the ordered list of package uris to execute."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, FrozenSet, Iterable, List, Optional, Tuple, Union

from cts_harness.errors import ConfigurationError, PlanMalformedError, PlanNotFoundError
from cts_harness.plan.plan_parser import load_plan, plan_path

if TYPE_CHECKING:
    from cts_harness.config.run_config import RunConfig

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PlanSeed:
    name: str


@dataclass(frozen=True)
class PackageSeed:
    packages: Tuple[str, ...]


Seed = Union[PlanSeed, PackageSeed]


@dataclass(frozen=True)
class RunRequest:
    seed: Seed
    test_case_dir: Optional[Path] = None
    test_plan_dir: Optional[Path] = None
    excluded_packages: FrozenSet[str] = field(default_factory=frozenset)

    @classmethod
    def from_config(cls, config: "RunConfig") -> "RunRequest":
        return build_run_request(
            plan=config.plan,
            packages=config.packages,
            excluded_packages=config.exclude_packages,
            test_case_dir=config.test_cases_path,
            test_plan_dir=config.test_plans_path,
        )


def _dedupe(values: Iterable[str]) -> Tuple[str, ...]:
    out: dict[str, None] = {}
    for raw in values:
        s = str(raw).strip()
        if s:
            out.setdefault(s, None)
    return tuple(out)


def build_run_request(
    *,
    plan: Optional[str] = None,
    packages: Iterable[str] = (),
    excluded_packages: Iterable[str] = (),
    test_case_dir: Optional[Path] = None,
    test_plan_dir: Optional[Path] = None,
) -> RunRequest:
    plan_name = (plan or "").strip() or None
    package_names = _dedupe(packages)

    if plan_name is None and not package_names:
        raise ConfigurationError("Missing the --plan or --package(s) to run")
    # Keep command line usage simple: one way of choosing what to run.
    if plan_name is not None and package_names:
        raise ConfigurationError("Only one of a --plan or --package(s) to run can be specified")

    seed: Seed = PlanSeed(plan_name) if plan_name is not None else PackageSeed(package_names)
    return RunRequest(
        seed=seed,
        test_case_dir=test_case_dir,
        test_plan_dir=test_plan_dir,
        excluded_packages=frozenset(_dedupe(excluded_packages)),
    )


def check_directories(request: RunRequest) -> None:
    if request.test_case_dir is None:
        raise ConfigurationError("missing test-cases-path option")
    if not request.test_case_dir.is_dir():
        raise ConfigurationError(f"test cases directory does not exist: {request.test_case_dir}")
    if isinstance(request.seed, PlanSeed):
        if request.test_plan_dir is None:
            raise ConfigurationError("missing test-plans-path option")
        if not request.test_plan_dir.is_dir():
            raise ConfigurationError(
                f"test plans directory does not exist: {request.test_plan_dir}"
            )


def resolve_run_request(request: RunRequest) -> List[str]:
    """Return the package uris to run, in first-seen order, with exclusions removed."""
    check_directories(request)

    seed = request.seed
    if isinstance(seed, PlanSeed):
        plan_dir = request.test_plan_dir
        if plan_dir is None:
            raise ConfigurationError("missing test-plans-path option")
        path = plan_path(plan_dir, seed.name)
        try:
            uris: Tuple[str, ...] = load_plan(path)
        except PlanNotFoundError as e:
            raise ConfigurationError(f"failed to find test plan file {path}") from e
        except PlanMalformedError as e:
            raise ConfigurationError(f"failed to parse test plan file {path}") from e
        logger.info("Resolved test plan %s: %d package(s)", seed.name, len(uris))
    else:
        uris = seed.packages

    resolved = [uri for uri in uris if uri not in request.excluded_packages]
    skipped = len(uris) - len(resolved)
    if skipped:
        logger.info("Excluded %d package(s) from the run", skipped)
    return resolved
