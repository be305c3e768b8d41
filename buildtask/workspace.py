from __future__ import annotations

import shutil
from pathlib import Path
from typing import Optional, Sequence

from buildtask.manifest_store import new_workspace_id


class Workspace:
    """Run-scoped scratch directory holding the descriptor set of one task run.

    The identifier is fixed at construction; every path derived during the run
    hangs off it, so concurrent runs sharing a temp root never collide.
    """

    def __init__(self, temp_root: Path, workspace_id: Optional[str] = None) -> None:
        self.temp_root = temp_root
        self.workspace_id = workspace_id or new_workspace_id()
        self._created = False

    @property
    def root(self) -> Path:
        return self.temp_root / self.workspace_id

    @property
    def created(self) -> bool:
        return self._created

    def descriptor_path(self, protos: Sequence[str]) -> Path:
        """Descriptor set location: named after the first input file."""

        if not protos:
            raise ValueError("descriptor path needs at least one input file")
        return self.root / Path(protos[0]).name

    def create(self) -> Path:
        """Create the workspace directory (and missing parents) once per run."""

        if not self._created:
            self.root.mkdir(parents=True, exist_ok=True)
            self._created = True
        return self.root

    def cleanup(self) -> bool:
        """Remove the workspace directory; returns whether anything was removed."""

        if not self.root.exists():
            return False
        shutil.rmtree(self.root)
        return True
