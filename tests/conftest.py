from __future__ import annotations

import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Sequence, Tuple

import pytest

from buildtask.build_log import BuildLog
from buildtask.config_models import TaskConfig
from buildtask.schemas import CompileRequest, GeneratorRequest


class FakeRun:
    """Stand-in for subprocess.run that records calls and fakes protoc output."""

    def __init__(self) -> None:
        self.returncode = 0
        self.stdout = ""
        self.stderr = ""
        self.raise_exc: Exception | None = None
        self.calls: List[Tuple[List[str], Dict[str, Any]]] = []

    def __call__(self, args: Sequence[str], **kwargs: Any) -> subprocess.CompletedProcess:
        self.calls.append((list(args), kwargs))
        if self.raise_exc is not None:
            raise self.raise_exc
        if self.returncode == 0:
            for arg in args:
                if arg.startswith("--descriptor_set_out="):
                    Path(arg.split("=", 1)[1]).write_bytes(b"\n\x0faddressbook.proto")
        return subprocess.CompletedProcess(list(args), self.returncode, stdout=self.stdout, stderr=self.stderr)


class RecordingGenerator:
    backend_name = "recording"

    def __init__(self, failures: Sequence[str] = (), files: Sequence[str] = ()) -> None:
        self.failures = list(failures)
        self.files = list(files)
        self.validated: List[GeneratorRequest] = []
        self.generated: List[GeneratorRequest] = []

    def validate(self, request: GeneratorRequest) -> Tuple[bool, List[str]]:
        self.validated.append(request)
        return not self.failures, list(self.failures)

    def generate(self, request: GeneratorRequest) -> None:
        self.generated.append(request)
        for name in self.files:
            (Path(request.output_directory) / name).write_text("// generated\n", encoding="utf-8")


class RecordingCompiler:
    backend_name = "recording"

    def __init__(self, result: bool = True) -> None:
        self.result = result
        self.requests: List[CompileRequest] = []

    def compile(self, request: CompileRequest, log: BuildLog) -> bool:
        self.requests.append(request)
        return self.result


@dataclass
class TaskEnv:
    root: Path
    protoc: Path
    temp_root: Path
    output: Path
    protos: List[Path]

    def config(self, **overrides: Any) -> TaskConfig:
        values: Dict[str, Any] = {
            "protos": [str(path) for path in self.protos],
            "output": str(self.output),
            "protoc_exe": str(self.protoc),
            "temp_dir": str(self.temp_root),
        }
        values.update(overrides)
        return TaskConfig(**values)


@pytest.fixture
def fake_run(monkeypatch) -> FakeRun:
    runner = FakeRun()
    monkeypatch.setattr("buildtask.process.subprocess.run", runner)
    return runner


@pytest.fixture
def task_env(tmp_path: Path) -> TaskEnv:
    protoc = tmp_path / "bin" / "protoc"
    protoc.parent.mkdir()
    protoc.write_text("#!/bin/sh\n", encoding="utf-8")
    temp_root = tmp_path / "tmp"
    temp_root.mkdir()
    output = tmp_path / "generated"
    output.mkdir()
    protos_dir = tmp_path / "protos"
    protos_dir.mkdir()
    protos = []
    for name in ("addressbook.proto", "person.proto"):
        path = protos_dir / name
        path.write_text('syntax = "proto2";\n', encoding="utf-8")
        protos.append(path)
    return TaskEnv(root=tmp_path, protoc=protoc, temp_root=temp_root, output=output, protos=protos)
