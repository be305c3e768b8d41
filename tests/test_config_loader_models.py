from __future__ import annotations

import tempfile
from pathlib import Path

import pytest

from buildtask.config_loader import apply_task_overrides, load_build_config, normalize_build_config


def test_normalize_build_config_fills_defaults():
    cfg = normalize_build_config({"task": {"protos": ["a.proto"], "output": "gen"}})

    assert cfg.task.protos == ["a.proto"]
    assert cfg.task.protoc_exe == "protoc"
    assert cfg.task.proto_path is None
    assert cfg.task.include_imports is False
    assert cfg.task.output_assembly is None
    assert cfg.task.assembly_references == []
    assert cfg.task.temp_dir == tempfile.gettempdir()
    assert cfg.task.timeout_s == 30
    assert cfg.task.keep_workspace is True
    assert cfg.generator.type == "protogen"
    assert cfg.compiler.source_extension == ".cs"


def test_normalize_build_config_keeps_params_maps():
    cfg = normalize_build_config(
        {
            "task": {"protos": ["a.proto"]},
            "generator": {"params": {"namespace": "Demo"}},
            "compiler": {"type": "mcs", "executable": "mcs", "params": {"optimize": True}},
        }
    )
    assert cfg.generator.params["namespace"] == "Demo"
    assert cfg.compiler.params["optimize"] is True
    assert cfg.compiler.type == "mcs"


def test_normalize_build_config_rejects_flat_top_level_keys():
    with pytest.raises(ValueError):
        normalize_build_config(
            {
                "task": {},
                "protos": ["a.proto"],
                "output": "gen",
            }
        )


def test_normalize_build_config_requires_task_section():
    with pytest.raises(ValueError, match="'task'"):
        normalize_build_config({"generator": {"command": "ProtoGen"}})


def test_invalid_types_fail_validation():
    with pytest.raises(Exception):
        normalize_build_config({"task": {"protos": ["a.proto"], "timeout_s": "not-an-int"}})


def test_unknown_task_fields_fail_validation():
    with pytest.raises(Exception):
        normalize_build_config({"task": {"protos": ["a.proto"], "proto_paths": ["x"]}})


def test_non_positive_timeout_is_rejected():
    with pytest.raises(Exception):
        normalize_build_config({"task": {"timeout_s": 0}})


def test_output_assembly_kind_is_library_only():
    cfg = normalize_build_config({"task": {"output_assembly": {"path": "out/Protos.dll"}}})
    assert cfg.task.output_assembly.target_kind == "library"

    with pytest.raises(Exception):
        normalize_build_config({"task": {"output_assembly": {"path": "out/Protos.exe", "target_kind": "exe"}}})


def test_config_is_frozen():
    cfg = normalize_build_config({"task": {"protos": ["a.proto"]}})
    with pytest.raises(Exception):
        cfg.task.protos = ["b.proto"]


def test_load_build_config_anchors_relative_paths(tmp_path: Path):
    config_dir = tmp_path / "profiles"
    config_dir.mkdir()
    config_path = config_dir / "task.yaml"
    config_path.write_text(
        """
task:
  protos: [protos/a.proto]
  output: generated
  proto_path: protos
  output_assembly: {path: generated/A.dll}
  assembly_references: [Google.ProtocolBuffers.dll, lib/Extra.dll]
""",
        encoding="utf-8",
    )

    cfg = load_build_config(config_path)

    assert cfg.task.protos == [str(config_dir / "protos" / "a.proto")]
    assert cfg.task.output == str(config_dir / "generated")
    assert cfg.task.proto_path == str(config_dir / "protos")
    assert cfg.task.output_assembly.path == str(config_dir / "generated" / "A.dll")
    assert cfg.task.assembly_references == ["Google.ProtocolBuffers.dll", str(config_dir / "lib" / "Extra.dll")]


def test_load_build_config_missing_file(tmp_path: Path):
    with pytest.raises(FileNotFoundError):
        load_build_config(tmp_path / "missing.yaml")


def test_load_build_config_rejects_non_object_root(tmp_path: Path):
    config_path = tmp_path / "task.yaml"
    config_path.write_text("- a.proto\n", encoding="utf-8")
    with pytest.raises(ValueError):
        load_build_config(config_path)


def test_repo_task_profiles_parse():
    root = Path(__file__).resolve().parent.parent
    paths = sorted((root / "profiles" / "tasks").glob("*.yaml"))
    assert paths, "No task profiles found under profiles/tasks/"
    for path in paths:
        cfg = load_build_config(path)
        assert cfg.task.protos
        assert cfg.generator.type


def test_apply_task_overrides_returns_new_config():
    cfg = normalize_build_config({"task": {"protos": ["a.proto"], "output": "gen"}})

    effective = apply_task_overrides(cfg, protos=["b.proto", "c.proto"], include_imports=True, keep_workspace=False)

    assert effective is not cfg
    assert effective.task.protos == ["b.proto", "c.proto"]
    assert effective.task.include_imports is True
    assert effective.task.keep_workspace is False
    assert effective.task.output == "gen"
    assert cfg.task.protos == ["a.proto"]
    assert apply_task_overrides(cfg) is cfg


def test_load_build_config_anchors_protoc_path_but_not_bare_name(tmp_path: Path):
    config_path = tmp_path / "task.yaml"
    config_path.write_text("task:\n  protoc_exe: tools/protoc\n", encoding="utf-8")
    assert load_build_config(config_path).task.protoc_exe == str(tmp_path / "tools" / "protoc")

    config_path.write_text("task:\n  protoc_exe: protoc\n", encoding="utf-8")
    assert load_build_config(config_path).task.protoc_exe == "protoc"
