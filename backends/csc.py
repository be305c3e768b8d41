from __future__ import annotations

import os
import shlex
from typing import Any, Dict, List, Optional

from buildtask.build_log import BuildLog
from buildtask.config_models import CompilerConfig
from buildtask.process import format_command_line, resolve_executable, run_process
from buildtask.schemas import CompileRequest


class CscCompiler:
    """C# command-line compiler (csc, mcs) used to build the generated sources."""

    backend_name = "csc"

    def __init__(
        self,
        executable: str = "csc",
        params: Optional[Dict[str, Any]] = None,
        timeout_s: Optional[int] = None,
    ) -> None:
        self.command = shlex.split(executable, posix=os.name != "nt")
        self.params = dict(params or {})
        self.timeout_s = timeout_s

    @classmethod
    def from_config(cls, config: CompilerConfig) -> "CscCompiler":
        return cls(executable=config.executable, params=config.params, timeout_s=config.timeout_s)

    def build_arguments(self, request: CompileRequest) -> List[str]:
        args = [
            "/noconfig",
            "/nologo",
            f"/target:{request.target_type}",
            f"/debug:{request.debug_type}",
            f"/warn:{request.warning_level}",
            f"/out:{request.output_assembly}",
        ]
        args.extend(f"/reference:{reference}" for reference in request.references)
        if request.key_file:
            args.append(f"/keyfile:{request.key_file}")
        for key in sorted(self.params):
            value = self.params[key]
            if value is True:
                args.append(f"/{key}")
            elif value is False or value is None:
                continue
            else:
                args.append(f"/{key}:{value}")
        args.extend(request.sources)
        return args

    def compile(self, request: CompileRequest, log: BuildLog) -> bool:
        """Compile the request's sources; True when the compiler exits with code zero."""

        if not self.command:
            log.error("Compiler executable is empty")
            return False
        args = [*self.command[1:], *self.build_arguments(request)]
        log.command_line(format_command_line(self.command[0], args))

        executable = resolve_executable(self.command[0]) or self.command[0]
        result = run_process([executable, *args], timeout_s=self.timeout_s)
        if result.stdout:
            log.command_line(result.stdout)
        if result.start_error is not None:
            log.error(f"Could not start compiler '{self.command[0]}': {result.start_error}")
            return False
        if result.timed_out:
            log.error(f"Compiler did not exit within {self.timeout_s} seconds and was terminated")
            return False
        if result.returncode != 0:
            log.error(result.stderr or f"Compiler exited with code {result.returncode}")
            return False
        return True
