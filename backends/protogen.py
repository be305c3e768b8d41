from __future__ import annotations

import os
import re
import shlex
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from backends.contracts import GenerationError
from buildtask.config_models import GeneratorConfig
from buildtask.process import resolve_executable, run_process
from buildtask.schemas import GeneratorRequest


OPTION_NAME_PATTERN = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


class ProtoGenGenerator:
    """Code generator driven through the ProtoGen command-line front end.

    Invoked as `<command> -output_directory=<dir> [-<param>=<value>...] <descriptor sets...>`.
    """

    backend_name = "protogen"

    def __init__(
        self,
        command: str = "ProtoGen",
        params: Optional[Dict[str, Any]] = None,
        timeout_s: Optional[int] = None,
    ) -> None:
        self.command = shlex.split(command, posix=os.name != "nt")
        self.params = dict(params or {})
        self.timeout_s = timeout_s

    @classmethod
    def from_config(cls, config: GeneratorConfig) -> "ProtoGenGenerator":
        return cls(command=config.command, params=config.params, timeout_s=config.timeout_s)

    def validate(self, request: GeneratorRequest) -> Tuple[bool, List[str]]:
        """Check the request and generator settings; returns (valid, failures)."""

        failures: List[str] = []
        if not self.command:
            failures.append("Generator command is empty.")
        elif resolve_executable(self.command[0]) is None:
            failures.append(f"Generator command '{self.command[0]}' could not be found.")

        if not request.input_files:
            failures.append("No input files specified.")
        for input_file in request.input_files:
            if not Path(input_file).is_file():
                failures.append(f"Input file '{input_file}' doesn't exist.")

        if not request.output_directory:
            failures.append("No output directory specified.")
        elif not Path(request.output_directory).is_dir():
            failures.append(f"Output directory '{request.output_directory}' doesn't exist.")

        for key in self.params:
            if key == "output_directory":
                failures.append("Option 'output_directory' is set by the build task and cannot be overridden.")
            elif not OPTION_NAME_PATTERN.match(str(key)):
                failures.append(f"Invalid generator option name '{key}'.")
        return not failures, failures

    def build_arguments(self, request: GeneratorRequest) -> List[str]:
        args = [f"-output_directory={request.output_directory}"]
        for key in sorted(self.params):
            value = self.params[key]
            if isinstance(value, bool):
                value = "true" if value else "false"
            args.append(f"-{key}={value}")
        args.extend(request.input_files)
        return args

    def generate(self, request: GeneratorRequest) -> None:
        """Write generated sources into the request's output directory."""

        executable = resolve_executable(self.command[0]) or self.command[0]
        result = run_process(
            [executable, *self.command[1:], *self.build_arguments(request)],
            timeout_s=self.timeout_s,
        )
        if result.ok:
            return
        if result.start_error is not None:
            raise GenerationError(f"Could not start generator '{self.command[0]}': {result.start_error}")
        if result.timed_out:
            raise GenerationError(f"Generator did not exit within {self.timeout_s} seconds and was terminated")
        detail = (result.stderr or result.stdout).strip()
        raise GenerationError(f"Generator exited with code {result.returncode}: {detail}")
