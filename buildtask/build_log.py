from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Protocol

from rich.console import Console
from rich.markup import escape

from buildtask.manifest_store import append_log, infer_log_source


class BuildLog(Protocol):
    """Diagnostics sink provided by the enclosing build engine."""

    def error(self, message: str) -> None: ...

    def warning(self, message: str) -> None: ...

    def message(self, message: str) -> None: ...

    def command_line(self, message: str) -> None: ...


@dataclass
class LogEntry:
    """One diagnostic captured during a task run."""

    level: str
    message: str
    source: str


_STYLES = {
    "ERROR": "bold red",
    "WARNING": "yellow",
    "CMD": "cyan",
    "INFO": "",
}


class RunLog:
    """BuildLog that records entries in memory, a run log file, and optionally the terminal."""

    def __init__(
        self,
        log_path: Optional[Path] = None,
        console: Optional[Console] = None,
        verbose: bool = False,
    ) -> None:
        self.log_path = log_path
        self.console = console
        self.verbose = verbose
        self.entries: List[LogEntry] = []

    def error(self, message: str) -> None:
        self._record("ERROR", message)

    def warning(self, message: str) -> None:
        self._record("WARNING", message)

    def message(self, message: str) -> None:
        self._record("INFO", message)

    def command_line(self, message: str) -> None:
        self._record("CMD", message)

    @property
    def errors(self) -> List[str]:
        return [entry.message for entry in self.entries if entry.level == "ERROR"]

    @property
    def has_logged_errors(self) -> bool:
        return any(entry.level == "ERROR" for entry in self.entries)

    def _record(self, level: str, message: str) -> None:
        source = infer_log_source(skip=3)
        self.entries.append(LogEntry(level=level, message=message, source=source))
        if self.log_path is not None:
            append_log(self.log_path, message, level=level, source=source)
        if self.console is None:
            return
        # Errors always reach the terminal; the rest only in verbose mode.
        if level == "ERROR" or self.verbose:
            style = _STYLES.get(level, "")
            text = f"{level.lower()}: {escape(message)}"
            self.console.print(f"[{style}]{text}[/{style}]" if style else text)
