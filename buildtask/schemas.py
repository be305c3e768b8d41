from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


@dataclass
class ProcessResult:
    """Exit status and captured streams of one external process invocation."""

    returncode: Optional[int]
    stdout: str = ""
    stderr: str = ""
    timed_out: bool = False
    start_error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.returncode == 0 and not self.timed_out and self.start_error is None


@dataclass
class GeneratorRequest:
    """Descriptor sets to generate from and the directory that receives sources."""

    input_files: List[str]
    output_directory: str


@dataclass
class CompileRequest:
    """Native compilation request built from the generated sources."""

    sources: List[str]
    references: List[str]
    output_assembly: str
    key_file: Optional[str] = None
    debug_type: str = "pdbonly"
    warning_level: int = 1
    target_type: str = "library"


@dataclass
class StageRecord:
    """Outcome of one pipeline stage."""

    name: str
    status: str
    detail: Optional[str] = None


@dataclass
class TaskOutcome:
    """Structured result returned after one task run."""

    success: bool
    workspace_id: str
    workspace_dir: str
    descriptor_path: Optional[str]
    command_line: Optional[str]
    stages: List[StageRecord] = field(default_factory=list)
    generated_sources: List[str] = field(default_factory=list)
    started_at: Optional[str] = None
    finished_at: Optional[str] = None

    @property
    def failed_stage(self) -> Optional[str]:
        for stage in self.stages:
            if stage.status == "failed":
                return stage.name
        return None

    def to_manifest(self) -> Dict[str, Any]:
        """Render the outcome as a JSON-serializable manifest payload."""

        return {
            "success": self.success,
            "workspace_id": self.workspace_id,
            "workspace_dir": self.workspace_dir,
            "descriptor_path": self.descriptor_path,
            "command_line": self.command_line,
            "failed_stage": self.failed_stage,
            "stages": [
                {"name": stage.name, "status": stage.status, "detail": stage.detail}
                for stage in self.stages
            ],
            "generated_sources": list(self.generated_sources),
            "started_at": self.started_at,
            "finished_at": self.finished_at,
        }
