from __future__ import annotations

import tempfile
from copy import deepcopy
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from buildtask.config_models import BuildConfig


REQUIRED_SECTIONS = ("task", "generator", "compiler", "output")


def default_build_config_dict() -> Dict[str, Any]:
    """Return the canonical nested defaults for all build config sections."""

    return {
        "task": {
            "protos": [],
            "output": ".",
            "protoc_exe": "protoc",
            "proto_path": None,
            "include_imports": False,
            "output_assembly": None,
            "assembly_references": [],
            "key_file": None,
            "temp_dir": tempfile.gettempdir(),
            "timeout_s": 30,
            "keep_workspace": True,
        },
        "generator": {
            "type": "protogen",
            "command": "ProtoGen",
            "params": {},
            "timeout_s": 120,
        },
        "compiler": {
            "type": "csc",
            "executable": "csc",
            "source_extension": ".cs",
            "params": {},
            "timeout_s": 300,
        },
        "output": {
            "log_path": None,
            "manifest_path": None,
        },
    }


def _deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """Merge nested config values while preserving default sections."""

    merged = deepcopy(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _deep_merge(merged[key], value)
        elif value is not None:
            merged[key] = value
    return merged


def _resolve_relative(value: Optional[str], base_dir: Path) -> Optional[str]:
    """Anchor a relative path from a config file at the file's directory."""

    if value is None:
        return None
    raw = Path(value)
    if raw.is_absolute():
        return value
    return str(base_dir / raw)


def normalize_build_config_dict(raw_config: Dict[str, Any]) -> Dict[str, Any]:
    """Validate nested config shape and merge with canonical defaults."""

    for key in raw_config:
        if key not in REQUIRED_SECTIONS:
            raise ValueError(
                "Build config must use nested sections "
                f"{REQUIRED_SECTIONS}; unexpected top-level key '{key}'."
            )
    task_section = raw_config.get("task")
    if not isinstance(task_section, dict):
        raise ValueError("Build config section 'task' is missing or not an object.")
    for key in REQUIRED_SECTIONS:
        value = raw_config.get(key)
        if value is not None and not isinstance(value, dict):
            raise ValueError(f"Build config section '{key}' must be an object.")

    return _deep_merge(default_build_config_dict(), raw_config)


def normalize_build_config(raw_config: Dict[str, Any]) -> BuildConfig:
    """Parse and strictly validate build config values."""

    return BuildConfig.model_validate(normalize_build_config_dict(raw_config))


def _has_separator(value: str) -> bool:
    return "/" in value or "\\" in value


def _anchor_task_paths(raw_config: Dict[str, Any], base_dir: Path) -> Dict[str, Any]:
    """Rewrite relative file locations in the task section against base_dir."""

    anchored = deepcopy(raw_config)
    task = anchored.get("task")
    if not isinstance(task, dict):
        return anchored
    if isinstance(task.get("protos"), list):
        task["protos"] = [_resolve_relative(str(item), base_dir) for item in task["protos"]]
    for key in ("output", "proto_path", "key_file", "temp_dir"):
        if isinstance(task.get(key), str):
            task[key] = _resolve_relative(task[key], base_dir)
    # Bare names (`protoc`, `System.dll`) are left for PATH or compiler lookup.
    if isinstance(task.get("protoc_exe"), str) and _has_separator(task["protoc_exe"]):
        task["protoc_exe"] = _resolve_relative(task["protoc_exe"], base_dir)
    if isinstance(task.get("assembly_references"), list):
        task["assembly_references"] = [
            _resolve_relative(str(item), base_dir) if _has_separator(str(item)) else str(item)
            for item in task["assembly_references"]
        ]
    assembly = task.get("output_assembly")
    if isinstance(assembly, dict) and isinstance(assembly.get("path"), str):
        assembly["path"] = _resolve_relative(assembly["path"], base_dir)
    return anchored


def load_build_config(config_path: Path) -> BuildConfig:
    """Load and validate a build config YAML file from disk."""

    if not config_path.exists():
        raise FileNotFoundError(
            "Missing build config: "
            f"{config_path}. Create one from `profiles/tasks/example.yaml`."
        )
    with config_path.open("r", encoding="utf-8") as config_file:
        raw_config = yaml.safe_load(config_file) or {}
    if not isinstance(raw_config, dict):
        raise ValueError(f"Invalid build config shape in {config_path}: expected object at root")
    return normalize_build_config(_anchor_task_paths(raw_config, config_path.parent))


def apply_task_overrides(
    config: BuildConfig,
    *,
    protos: Optional[List[str]] = None,
    output: Optional[str] = None,
    protoc_exe: Optional[str] = None,
    proto_path: Optional[str] = None,
    include_imports: Optional[bool] = None,
    temp_dir: Optional[str] = None,
    keep_workspace: Optional[bool] = None,
) -> BuildConfig:
    """Apply CLI overrides after strict config parsing."""

    updates: Dict[str, Any] = {}
    if protos:
        updates["protos"] = list(protos)
    if output:
        updates["output"] = output
    if protoc_exe:
        updates["protoc_exe"] = protoc_exe
    if proto_path:
        updates["proto_path"] = proto_path
    if include_imports is not None:
        updates["include_imports"] = include_imports
    if temp_dir:
        updates["temp_dir"] = temp_dir
    if keep_workspace is not None:
        updates["keep_workspace"] = keep_workspace
    if not updates:
        return config

    # Re-validate so overrides go through the same field checks as YAML input.
    task = type(config.task).model_validate({**config.task.model_dump(), **updates})
    return config.model_copy(update={"task": task})
