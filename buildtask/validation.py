from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from buildtask.build_log import BuildLog
from buildtask.config_models import TaskConfig
from buildtask.process import resolve_executable


@dataclass
class PreconditionFailure:
    """First precondition that does not hold for a task configuration."""

    check: str
    path: Optional[str]
    message: str


def find_precondition_failure(config: TaskConfig) -> Optional[PreconditionFailure]:
    """Check preconditions in their fixed order and return the first failure.

    Only reads the filesystem. The output directory is checked before anything
    is created so a missing directory is reported as such.
    """

    if resolve_executable(config.protoc_exe) is None:
        return PreconditionFailure(
            check="protoc_exe",
            path=config.protoc_exe,
            message=f"Could not find protoc at path '{config.protoc_exe}'",
        )

    if not Path(config.temp_dir).is_dir():
        return PreconditionFailure(
            check="temp_dir",
            path=config.temp_dir,
            message=f"Temporary directory does not exist '{config.temp_dir}'",
        )

    if not Path(config.output).is_dir():
        return PreconditionFailure(
            check="output",
            path=config.output,
            message=f"Output directory does not exist '{config.output}'",
        )

    if not config.protos:
        return PreconditionFailure(
            check="protos",
            path=None,
            message="No input files were specified",
        )

    for proto in config.protos:
        if not Path(proto).is_file():
            return PreconditionFailure(
                check="proto_file",
                path=proto,
                message=f"Could not find input file '{proto}'",
            )
    return None


def validate_inputs(config: TaskConfig, log: BuildLog) -> bool:
    """Log the first failing precondition; True when every check passes."""

    failure = find_precondition_failure(config)
    if failure is None:
        return True
    log.error(failure.message)
    return False
