from __future__ import annotations

import inspect
import json
import uuid
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Optional


def new_workspace_id() -> str:
    """Create a random run-scoped identifier used to name the workspace."""

    return uuid.uuid4().hex


def now_iso() -> str:
    """Return current local timestamp in stable ISO format."""

    return datetime.now().isoformat(timespec="seconds")


def now_human() -> str:
    """Return local timestamp in a compact log-friendly format."""

    return datetime.now().strftime("%Y-%m-%d %H:%M:%S")


def write_manifest(path: Path, payload: Dict[str, Any]) -> None:
    """Write manifest JSON and fail fast on non-serializable values."""

    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(payload, indent=2) + "\n", encoding="utf-8")


def infer_log_source(skip: int = 2) -> str:
    """Best-effort caller source in file:line format, `skip` frames above this one."""

    frame = inspect.currentframe()
    try:
        caller = frame
        for _ in range(skip):
            caller = caller.f_back if caller is not None else None
        if caller is None:
            return "unknown:0"
        return f"{Path(caller.f_code.co_filename).name}:{caller.f_lineno}"
    finally:
        del frame


def format_log_line(message: str, *, level: str, source: str) -> str:
    """Render one run-log line in the `time | LEVEL | source | message` layout."""

    normalized_level = (level or "INFO").upper()
    return f"{now_human()} | {normalized_level:<8} | {source:<24} | {message}"


def append_log(
    path: Path,
    message: str,
    *,
    level: str = "INFO",
    source: Optional[str] = None,
) -> None:
    """Append one formatted line to the run log."""

    path.parent.mkdir(parents=True, exist_ok=True)
    line = format_log_line(message, level=level, source=source or infer_log_source())
    with path.open("a", encoding="utf-8") as f:
        f.write(line + "\n")
