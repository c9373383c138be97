"""Run configuration loading and validation."""

from __future__ import annotations

from cts_harness.config.run_config import RunConfig, load_run_config

__all__ = ["RunConfig", "load_run_config"]
