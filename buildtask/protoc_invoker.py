from __future__ import annotations

from pathlib import Path
from typing import List

from buildtask.build_log import BuildLog
from buildtask.config_models import TaskConfig
from buildtask.process import format_command_line, resolve_executable, run_process
from buildtask.schemas import ProcessResult


def build_arguments(config: TaskConfig, descriptor_path: Path) -> List[str]:
    """Return protoc arguments in their fixed order, inputs last and in given order."""

    args: List[str] = []
    if config.proto_path and config.proto_path.strip():
        args.append(f"--proto_path={config.proto_path}")
    if config.include_imports:
        args.append("--include_imports")
    args.append(f"--descriptor_set_out={descriptor_path}")
    args.extend(config.protos)
    return args


def build_command_line(config: TaskConfig, descriptor_path: Path) -> str:
    return format_command_line(config.protoc_exe, build_arguments(config, descriptor_path))


def invoke_protoc(config: TaskConfig, descriptor_path: Path, log: BuildLog) -> ProcessResult:
    """Run protoc to write the descriptor set and report its diagnostics to the build log."""

    args = build_arguments(config, descriptor_path)
    log.command_line(format_command_line(config.protoc_exe, args))

    # Runs from the caller's working directory: relative inputs and protoc's
    # implicit `--proto_path=.` are resolved against it.
    executable = resolve_executable(config.protoc_exe) or config.protoc_exe
    result = run_process([executable, *args], timeout_s=config.timeout_s)

    log.command_line(result.stdout)
    if result.start_error is not None:
        log.error(f"Could not start protoc '{config.protoc_exe}': {result.start_error}")
    elif result.timed_out:
        log.error(f"protoc did not exit within {config.timeout_s} seconds and was terminated")
        if result.stderr:
            log.error(result.stderr)
    elif result.returncode != 0:
        log.error(result.stderr or f"protoc exited with code {result.returncode}")
    return result
