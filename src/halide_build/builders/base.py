"""Typed inputs shared by the generator pipeline stages."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from halide_build.artifacts import artifact_path
from halide_build.config import BuildConfig
from halide_build.toolchain import ToolchainPaths

GENERATOR_SUFFIX = ".generator"


@dataclass(frozen=True, slots=True)
class GeneratorSpec:
    kernel: str
    sources: tuple[Path, ...]
    toolchain: ToolchainPaths
    output_dir: Path
    config: BuildConfig

    @property
    def generator_path(self) -> Path:
        return self.output_dir / f"{self.kernel}{GENERATOR_SUFFIX}"

    @property
    def artifact_path(self) -> Path:
        return artifact_path(self.output_dir, self.kernel, self.config.primary_emit)

    @property
    def generator_name(self) -> str:
        return self.config.generator_name or self.kernel

    @property
    def function_name(self) -> str:
        return self.config.function_name or self.kernel
