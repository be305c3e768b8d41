from __future__ import annotations

from pathlib import Path
from typing import List

from backends.contracts import CodeGenerator, GenerationError
from buildtask.build_log import BuildLog
from buildtask.schemas import GeneratorRequest


def build_generator_request(descriptor_path: Path, output_directory: str) -> GeneratorRequest:
    return GeneratorRequest(input_files=[str(descriptor_path)], output_directory=output_directory)


def format_validation_failures(failures: List[str]) -> str:
    """Join generator validation failures into one diagnostic, one failure per line."""

    lines = ["Invalid options:"]
    lines.extend(f"  {failure}" for failure in failures)
    return "\n".join(lines)


def generate_sources(
    generator: CodeGenerator,
    descriptor_path: Path,
    output_directory: str,
    log: BuildLog,
) -> bool:
    """Validate the generator request, then let the generator write its sources."""

    request = build_generator_request(descriptor_path, output_directory)
    valid, failures = generator.validate(request)
    if not valid:
        log.error(format_validation_failures(failures or ["generator rejected the request"]))
        return False

    try:
        generator.generate(request)
    except GenerationError as exc:
        log.error(str(exc))
        return False
    return True
