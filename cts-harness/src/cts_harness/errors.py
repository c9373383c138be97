from __future__ import annotations

from pathlib import Path
from typing import Optional


class ConfigurationError(ValueError):
    """Raised when a run is misconfigured; always surfaces before execution starts."""


class PlanError(RuntimeError):
    pass


class PlanNotFoundError(PlanError):
    def __init__(self, path: Path) -> None:
        super().__init__(f"test plan not found: {path}")
        self.path = path


class PlanMalformedError(PlanError):
    pass


class MalformedResultError(ValueError):
    """Raised when a result document does not have the expected structure."""


class DeviceNotAvailableError(RuntimeError):
    """Raised when the device under test is lost; aborts the whole run."""

    def __init__(self, message: str = "device not available", *, serial: Optional[str] = None):
        if serial:
            message = f"{message}: {serial}"
        super().__init__(message)
        self.serial = serial
