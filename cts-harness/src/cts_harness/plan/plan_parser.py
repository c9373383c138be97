"""Test plan documents.

A plan names the packages to run together::

    <TestPlan version="1.0">
      <Entry uri="android.app"/>
      <Entry uri="android.bluetooth"/>
    </TestPlan>

Plans live in a plan directory as `<plan name>.xml`.
"""

from __future__ import annotations

import xml.etree.ElementTree as ET
from pathlib import Path
from typing import IO, Any, List, Tuple

from cts_harness.errors import PlanMalformedError, PlanNotFoundError

PLAN_TAG = "TestPlan"
ENTRY_TAG = "Entry"
URI_ATTR = "uri"
PLAN_SUFFIX = ".xml"


def plan_path(plan_dir: Path, plan_name: str) -> Path:
    return plan_dir / f"{plan_name}{PLAN_SUFFIX}"


def parse_plan(stream: IO[Any], *, where: str = "<plan>") -> Tuple[str, ...]:
    """Return the package uris named by a plan, in document order, without duplicates."""
    try:
        root = ET.parse(stream).getroot()
    except ET.ParseError as e:
        raise PlanMalformedError(f"failed to parse test plan {where}: {e}") from e

    if root.tag != PLAN_TAG:
        raise PlanMalformedError(f"{where}: expected <{PLAN_TAG}> root but found <{root.tag}>")

    uris: dict[str, None] = {}
    for idx, entry in enumerate(root.iter(ENTRY_TAG)):
        uri = (entry.get(URI_ATTR) or "").strip()
        if not uri:
            raise PlanMalformedError(f"{where}: {ENTRY_TAG} #{idx} is missing a {URI_ATTR}")
        uris.setdefault(uri, None)
    return tuple(uris)


def load_plan(path: Path) -> Tuple[str, ...]:
    if not path.is_file():
        raise PlanNotFoundError(path)
    with path.open("rb") as fh:
        return parse_plan(fh, where=str(path))


def list_plans(plan_dir: Path) -> List[str]:
    if not plan_dir.is_dir():
        return []
    return sorted(p.stem for p in plan_dir.glob(f"*{PLAN_SUFFIX}") if p.is_file())
