"""Core typed dataclasses for generator builds and their outputs."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Literal

EmitKind = Literal["static_library", "object", "shared_library", "h", "assembly", "stmt"]

# Emit kinds that produce a linkable artifact, mapped to their file suffix.
LINKABLE_SUFFIXES: dict[str, str] = {
    "static_library": ".a",
    "object": ".o",
    "shared_library": ".so",
}

DEFAULT_EMIT: tuple[EmitKind, ...] = ("static_library", "h")
DEFAULT_TARGET = "host"


@dataclass(frozen=True, slots=True)
class GeneratorExecutable:
    kernel: str
    path: Path
    command: tuple[str, ...]


@dataclass(frozen=True, slots=True)
class Artifact:
    kernel: str
    path: Path
    target: str
    emit: tuple[EmitKind, ...]
    command: tuple[str, ...]

    @property
    def header_path(self) -> Path | None:
        if "h" not in self.emit:
            return None
        return self.path.with_suffix(".h")
