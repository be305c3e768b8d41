from __future__ import annotations

import shutil
import subprocess
from pathlib import Path
from typing import Optional, Sequence, Union

from buildtask.schemas import ProcessResult


# Keeps a console window from flashing up on Windows; zero elsewhere.
NO_WINDOW_FLAGS = getattr(subprocess, "CREATE_NO_WINDOW", 0)


def _as_text(value: Union[str, bytes, None]) -> str:
    """Normalize captured stream content, which is bytes on timeout even in text mode."""

    if value is None:
        return ""
    if isinstance(value, bytes):
        return value.decode("utf-8", errors="replace")
    return value


def run_process(
    args: Sequence[str],
    *,
    timeout_s: Optional[float] = None,
) -> ProcessResult:
    """Run one external process with both streams captured in memory.

    `subprocess.run` owns the child for the whole call: the handle is released
    on every path, and on timeout the child is killed and reaped before
    `TimeoutExpired` propagates here. The child inherits the caller's
    working directory.
    """

    try:
        proc = subprocess.run(
            list(args),
            capture_output=True,
            text=True,
            timeout=timeout_s,
            creationflags=NO_WINDOW_FLAGS,
        )
    except subprocess.TimeoutExpired as exc:
        return ProcessResult(
            returncode=None,
            stdout=_as_text(exc.stdout),
            stderr=_as_text(exc.stderr),
            timed_out=True,
        )
    except OSError as exc:
        return ProcessResult(returncode=None, start_error=f"{exc.__class__.__name__}: {exc}")
    return ProcessResult(returncode=proc.returncode, stdout=proc.stdout or "", stderr=proc.stderr or "")


def format_command_line(executable: str, args: Sequence[str]) -> str:
    """Render an invocation as the single space-separated command line that gets logged."""

    return " ".join([executable, *args])


def resolve_executable(executable: str) -> Optional[str]:
    """Return the executable location, trying the literal path before the PATH lookup."""

    if not executable:
        return None
    candidate = Path(executable)
    if candidate.is_file():
        return str(candidate)
    return shutil.which(executable)
