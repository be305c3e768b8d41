from __future__ import annotations

from typing import Any, Dict, Mapping, Optional

from backends.contracts import CodeGenerator, NativeCompiler
from backends.csc import CscCompiler
from backends.protogen import ProtoGenGenerator
from buildtask.config_models import CompilerConfig, GeneratorConfig


class BackendRegistry:
    """Lookup table for code generator and native compiler backends."""

    DEFAULT_GENERATORS: Mapping[str, type[Any]] = {
        ProtoGenGenerator.backend_name: ProtoGenGenerator,
    }
    DEFAULT_COMPILERS: Mapping[str, type[Any]] = {
        CscCompiler.backend_name: CscCompiler,
        # mcs accepts the same switches as csc.
        "mcs": CscCompiler,
    }

    def __init__(
        self,
        generators: Optional[Mapping[str, type[Any]]] = None,
        compilers: Optional[Mapping[str, type[Any]]] = None,
    ) -> None:
        """Start from the built-in backends and apply optional override mappings."""

        self._generators: Dict[str, type[Any]] = dict(self.DEFAULT_GENERATORS)
        self._compilers: Dict[str, type[Any]] = dict(self.DEFAULT_COMPILERS)
        if generators:
            self._generators.update(dict(generators))
        if compilers:
            self._compilers.update(dict(compilers))

    def get_generator(self, name: str):
        """Return generator class for a backend name or raise a deterministic error."""

        return self._lookup(self._generators, name, "generator")

    def get_compiler(self, name: str):
        """Return compiler class for a backend name or raise a deterministic error."""

        return self._lookup(self._compilers, name, "compiler")

    def list_generators(self) -> list[str]:
        return sorted(self._generators.keys())

    def list_compilers(self) -> list[str]:
        return sorted(self._compilers.keys())

    @staticmethod
    def _lookup(table: Dict[str, type[Any]], name: str, kind: str):
        if name not in table:
            supported = ", ".join(sorted(table.keys()))
            raise KeyError(f"Unknown {kind} backend '{name}'. Supported {kind}s: {supported}")
        return table[name]


def build_generator(config: GeneratorConfig, registry: Optional[BackendRegistry] = None) -> CodeGenerator:
    """Construct the code generator named by the generator config section."""

    generator_cls = (registry or BackendRegistry()).get_generator(config.type)
    return generator_cls.from_config(config)


def build_compiler(config: CompilerConfig, registry: Optional[BackendRegistry] = None) -> NativeCompiler:
    """Construct the native compiler named by the compiler config section."""

    compiler_cls = (registry or BackendRegistry()).get_compiler(config.type)
    return compiler_cls.from_config(config)
