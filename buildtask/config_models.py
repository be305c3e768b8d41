from __future__ import annotations

import tempfile
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class OutputAssemblyConfig(BaseModel):
    """Requested library artifact produced from the generated sources."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    path: str
    target_kind: Literal["library"] = "library"

    @field_validator("path")
    @classmethod
    def validate_path(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("task.output_assembly.path must be a non-empty string")
        return value


class TaskConfig(BaseModel):
    """Inputs governing one protoc task run. Read-only once constructed."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    protos: List[str] = Field(default_factory=list)
    output: str = "."
    protoc_exe: str = "protoc"
    proto_path: Optional[str] = None
    include_imports: bool = False
    output_assembly: Optional[OutputAssemblyConfig] = None
    assembly_references: List[str] = Field(default_factory=list)
    key_file: Optional[str] = None
    temp_dir: str = Field(default_factory=tempfile.gettempdir)
    timeout_s: int = 30
    keep_workspace: bool = True

    @field_validator("timeout_s")
    @classmethod
    def validate_timeout(cls, value: int) -> int:
        if value <= 0:
            raise ValueError("task.timeout_s must be a positive number of seconds")
        return value


class GeneratorConfig(BaseModel):
    """Code generator backend selection and command settings."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    type: str = "protogen"
    command: str = "ProtoGen"
    params: Dict[str, Any] = Field(default_factory=dict)
    timeout_s: int = 120

    @field_validator("timeout_s")
    @classmethod
    def validate_timeout(cls, value: int) -> int:
        if value <= 0:
            raise ValueError("generator.timeout_s must be a positive number of seconds")
        return value


class CompilerConfig(BaseModel):
    """Native compiler backend used when an output assembly is requested."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    type: str = "csc"
    executable: str = "csc"
    source_extension: str = ".cs"
    params: Dict[str, Any] = Field(default_factory=dict)
    timeout_s: int = 300

    @field_validator("source_extension")
    @classmethod
    def validate_source_extension(cls, value: str) -> str:
        if not value.startswith(".") or len(value) < 2:
            raise ValueError("compiler.source_extension must look like '.cs'")
        return value

    @field_validator("timeout_s")
    @classmethod
    def validate_timeout(cls, value: int) -> int:
        if value <= 0:
            raise ValueError("compiler.timeout_s must be a positive number of seconds")
        return value


class OutputConfig(BaseModel):
    """Where run diagnostics are written."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    log_path: Optional[str] = None
    manifest_path: Optional[str] = None


class BuildConfig(BaseModel):
    """Top-level strongly typed build configuration."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    task: TaskConfig = Field(default_factory=TaskConfig)
    generator: GeneratorConfig = Field(default_factory=GeneratorConfig)
    compiler: CompilerConfig = Field(default_factory=CompilerConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)
