from __future__ import annotations

import sys
from pathlib import Path


def _ensure_src_on_path() -> None:
    src = Path(__file__).resolve().parents[1] / "src"
    src_str = str(src)
    if src_str not in sys.path:
        sys.path.insert(0, src_str)

    # Runtime fakes (device, repo, test objects) live under `tests/unit/runtime`.
    fakes_root = Path(__file__).resolve().parent / "unit" / "runtime"
    fakes_root_str = str(fakes_root)
    if fakes_root.is_dir() and fakes_root_str not in sys.path:
        sys.path.insert(0, fakes_root_str)


_ensure_src_on_path()
