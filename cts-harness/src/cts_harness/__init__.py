"""cts-harness: test result aggregation and plan-driven package execution.

- `cts_harness.result`: namespace result tree and its streaming XML documents
- `cts_harness.plan`: test plans and run request resolution
- `cts_harness.runtime`: sequential package execution with per-package result routing
- `cts_harness.config`: YAML/JSON run configuration
"""

__version__ = "0.1.0"

__all__ = [
    "cli",
    "config",
    "errors",
    "plan",
    "result",
    "runtime",
]
