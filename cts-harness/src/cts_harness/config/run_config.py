"""Run configuration: which plan or packages to run, and where they live.

A run config is a YAML or JSON object checked against the bundled
`schemas/run_config.schema.json`. Every schema violation is reported in a
single `ConfigurationError` so a user can fix the file in one pass.
"""

from __future__ import annotations

import functools
import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Tuple

import yaml
from jsonschema import Draft202012Validator

from cts_harness.errors import ConfigurationError

RUN_CONFIG_SCHEMA_PATH = Path(__file__).resolve().parent / "schemas" / "run_config.schema.json"

_MAX_REPORTED_ERRORS = 20


@functools.lru_cache(maxsize=1)
def _run_config_validator() -> Draft202012Validator:
    schema = json.loads(RUN_CONFIG_SCHEMA_PATH.read_text(encoding="utf-8"))
    return Draft202012Validator(schema)


def _schema_errors(data: Mapping[str, Any], *, where: str) -> List[str]:
    errors = sorted(_run_config_validator().iter_errors(data), key=lambda e: list(e.path))
    msgs = [
        f"- {where}:{'/'.join(str(p) for p in e.path)}: {e.message}"
        for e in errors[:_MAX_REPORTED_ERRORS]
    ]
    if len(errors) > _MAX_REPORTED_ERRORS:
        msgs.append(f"... ({len(errors) - _MAX_REPORTED_ERRORS} more)")
    return msgs


def _read_config_file(path: Path) -> Dict[str, Any]:
    if not path.exists():
        raise ConfigurationError(f"run config not found: {path}")

    suffix = path.suffix.lower()
    if suffix in {".yaml", ".yml"}:
        parse = yaml.safe_load
    elif suffix == ".json":
        parse = json.loads
    else:
        raise ConfigurationError(f"Unsupported run config extension: {path}")

    try:
        data = parse(path.read_text(encoding="utf-8"))
    except (yaml.YAMLError, json.JSONDecodeError) as e:
        raise ConfigurationError(f"failed to parse run config {path}: {e}") from e

    # An empty YAML file is an empty config; the schema then reports what's missing.
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigurationError(f"Top-level run config must be an object: {path}")
    return data


def _resolve_path(base_dir: Optional[Path], raw: Optional[str]) -> Optional[Path]:
    if raw is None:
        return None
    p = Path(raw).expanduser()
    if p.is_absolute() or base_dir is None:
        return p
    return (base_dir / p).resolve()


@dataclass(frozen=True)
class RunConfig:
    test_cases_path: Optional[Path] = None
    test_plans_path: Optional[Path] = None
    plan: Optional[str] = None
    packages: Tuple[str, ...] = ()
    exclude_packages: Tuple[str, ...] = ()
    collect_device_info: bool = True

    @classmethod
    def from_mapping(
        cls,
        data: Mapping[str, Any],
        *,
        base_dir: Optional[Path] = None,
        where: str = "run_config",
    ) -> "RunConfig":
        """Validate `data` and build a config; relative paths resolve against `base_dir`."""
        problems = _schema_errors(data, where=where)
        if problems:
            raise ConfigurationError("\n".join(problems))
        return cls(
            test_cases_path=_resolve_path(base_dir, data.get("test_cases_path")),
            test_plans_path=_resolve_path(base_dir, data.get("test_plans_path")),
            plan=data.get("plan"),
            packages=tuple(data.get("packages") or ()),
            exclude_packages=tuple(data.get("exclude_packages") or ()),
            collect_device_info=bool(data.get("collect_device_info", True)),
        )


def load_run_config(path: Path) -> RunConfig:
    data = _read_config_file(path)
    return RunConfig.from_mapping(data, base_dir=path.resolve().parent, where=str(path))
