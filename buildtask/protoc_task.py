from __future__ import annotations

from pathlib import Path
from typing import List, Optional

from backends.contracts import CodeGenerator, NativeCompiler
from backends.registry import BackendRegistry, build_compiler, build_generator
from buildtask.assembly import build_assembly, collect_generated_sources
from buildtask.build_log import BuildLog
from buildtask.config_models import BuildConfig, TaskConfig
from buildtask.generation import generate_sources
from buildtask.manifest_store import now_iso
from buildtask.pipeline import Stage, run_stages
from buildtask.protoc_invoker import build_command_line, invoke_protoc
from buildtask.schemas import ProcessResult, TaskOutcome
from buildtask.validation import validate_inputs
from buildtask.workspace import Workspace


class ProtocTask:
    """Build task compiling .proto files to a descriptor set, sources, and optionally a library.

    Stages run strictly in order (validate, workspace, protoc, generate, and
    assemble when an output assembly is requested); the first failure stops
    the run.
    """

    def __init__(
        self,
        config: TaskConfig,
        generator: CodeGenerator,
        log: BuildLog,
        compiler: Optional[NativeCompiler] = None,
        source_extension: str = ".cs",
        workspace_id: Optional[str] = None,
    ) -> None:
        self.config = config
        self.generator = generator
        self.compiler = compiler
        self.log = log
        self.source_extension = source_extension
        self.workspace = Workspace(Path(config.temp_dir), workspace_id)
        self.protoc_result: Optional[ProcessResult] = None
        self.generated_sources: List[str] = []

    @classmethod
    def from_build_config(
        cls,
        build_config: BuildConfig,
        log: BuildLog,
        registry: Optional[BackendRegistry] = None,
    ) -> "ProtocTask":
        """Wire backends named in the config; the compiler is built only when needed."""

        registry = registry or BackendRegistry()
        compiler = None
        if build_config.task.output_assembly is not None:
            compiler = build_compiler(build_config.compiler, registry)
        return cls(
            config=build_config.task,
            generator=build_generator(build_config.generator, registry),
            log=log,
            compiler=compiler,
            source_extension=build_config.compiler.source_extension,
        )

    @property
    def workspace_id(self) -> str:
        return self.workspace.workspace_id

    def temp_dir(self) -> Path:
        return self.workspace.root

    def descriptor_path(self) -> Path:
        return self.workspace.descriptor_path(self.config.protos)

    def command_line(self) -> Optional[str]:
        if not self.config.protos:
            return None
        return build_command_line(self.config, self.descriptor_path())

    def execute(self) -> bool:
        """Build-engine entry point: True when every requested stage succeeded."""

        return self.run().success

    def run(self) -> TaskOutcome:
        started_at = now_iso()
        try:
            result = run_stages(self._stages(), self.log)
        finally:
            if not self.config.keep_workspace and self.workspace.created:
                self._cleanup_workspace()

        if result.success:
            self.log.message(f"Generated sources in '{self.config.output}'")
        return TaskOutcome(
            success=result.success,
            workspace_id=self.workspace_id,
            workspace_dir=str(self.workspace.root),
            descriptor_path=str(self.descriptor_path()) if self.config.protos else None,
            command_line=self.command_line(),
            stages=result.stages,
            generated_sources=list(self.generated_sources),
            started_at=started_at,
            finished_at=now_iso(),
        )

    def _cleanup_workspace(self) -> None:
        try:
            self.workspace.cleanup()
        except OSError as exc:
            self.log.warning(f"Could not remove workspace '{self.workspace.root}': {exc}")

    def _stages(self) -> List[Stage]:
        stages = [
            Stage("validate", self._validate),
            Stage("workspace", self._create_workspace),
            Stage("protoc", self._run_protoc),
            Stage("generate", self._generate),
        ]
        if self.config.output_assembly is not None:
            stages.append(Stage("assemble", self._assemble))
        return stages

    def _validate(self) -> bool:
        return validate_inputs(self.config, self.log)

    def _create_workspace(self) -> bool:
        self.workspace.create()
        return True

    def _run_protoc(self) -> bool:
        self.protoc_result = invoke_protoc(self.config, self.descriptor_path(), self.log)
        return self.protoc_result.ok

    def _generate(self) -> bool:
        return generate_sources(self.generator, self.descriptor_path(), self.config.output, self.log)

    def _assemble(self) -> bool:
        if self.compiler is None:
            self.log.error("An output assembly was requested but no native compiler is configured")
            return False
        self.generated_sources = collect_generated_sources(self.config.output, self.source_extension)
        return build_assembly(self.config, self.compiler, self.generated_sources, self.log)
