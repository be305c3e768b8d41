from __future__ import annotations

from typing import ClassVar, List, Protocol, Tuple

from buildtask.build_log import BuildLog
from buildtask.config_models import CompilerConfig, GeneratorConfig
from buildtask.schemas import CompileRequest, GeneratorRequest


class GenerationError(RuntimeError):
    """Raised by a code generator that could not write its sources."""


class CodeGenerator(Protocol):
    """Protocol for collaborators that turn descriptor sets into source files."""

    backend_name: ClassVar[str]

    @classmethod
    def from_config(cls, config: GeneratorConfig) -> "CodeGenerator": ...

    def validate(self, request: GeneratorRequest) -> Tuple[bool, List[str]]: ...

    def generate(self, request: GeneratorRequest) -> None: ...


class NativeCompiler(Protocol):
    """Protocol for collaborators that compile generated sources into a library."""

    backend_name: ClassVar[str]

    @classmethod
    def from_config(cls, config: CompilerConfig) -> "NativeCompiler": ...

    def compile(self, request: CompileRequest, log: BuildLog) -> bool: ...
