from __future__ import annotations

from pathlib import Path
from typing import List

from backends.contracts import NativeCompiler
from buildtask.build_log import BuildLog
from buildtask.config_models import TaskConfig
from buildtask.schemas import CompileRequest


def collect_generated_sources(output_directory: str, source_extension: str) -> List[str]:
    """List generated sources directly inside the output directory (not recursive)."""

    root = Path(output_directory)
    return [
        str(path)
        for path in sorted(root.glob(f"*{source_extension}"))
        if path.is_file()
    ]


def build_compile_request(config: TaskConfig, sources: List[str]) -> CompileRequest:
    if config.output_assembly is None:
        raise ValueError("compile request needs task.output_assembly")
    return CompileRequest(
        sources=sources,
        references=list(config.assembly_references),
        output_assembly=config.output_assembly.path,
        key_file=config.key_file,
        target_type=config.output_assembly.target_kind,
    )


def build_assembly(
    config: TaskConfig,
    compiler: NativeCompiler,
    sources: List[str],
    log: BuildLog,
) -> bool:
    """Compile the generated sources into the requested assembly; returns the compiler's verdict."""

    request = build_compile_request(config, sources)
    return compiler.compile(request, log)
