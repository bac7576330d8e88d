"""Artifact naming and link-step helpers."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from halide_build.errors import ValidationError
from halide_build.models import LINKABLE_SUFFIXES, EmitKind

LIBRARY_SUFFIXES = (".a", ".so", ".dylib")


def artifact_basename(kernel: str) -> str:
    return f"lib{kernel}"


def artifact_path(output_dir: str | Path, kernel: str, emit: EmitKind = "static_library") -> Path:
    """Return where the generator writes the linkable artifact for *kernel*.

    Pure path construction; the filesystem is not consulted.
    """
    if not kernel:
        raise ValidationError("artifact_path() requires a kernel name.")
    suffix = LINKABLE_SUFFIXES.get(emit)
    if suffix is None:
        raise ValidationError(
            "Emit kind does not produce a linkable artifact.",
            context={"emit": emit},
        )
    return Path(output_dir) / f"{artifact_basename(kernel)}{suffix}"


def shared_library_path(path: str | Path) -> Path:
    """``out/k.o`` -> ``out/libk.so``; an existing ``lib`` prefix is kept."""
    source = Path(path)
    stem = source.stem
    if not stem.startswith("lib"):
        stem = f"lib{stem}"
    return source.with_name(f"{stem}.so")


@dataclass(frozen=True, slots=True)
class LinkSpec:
    search_dir: Path | None
    library: str

    def linker_args(self) -> list[str]:
        args: list[str] = []
        if self.search_dir is not None:
            args.append(f"-L{self.search_dir}")
        args.append(f"-l{self.library}")
        return args


def link_spec(path: str | Path) -> LinkSpec:
    """Split a library path into a search directory and a ``-l`` name."""
    library_path = Path(path)
    name = library_path.name
    for suffix in LIBRARY_SUFFIXES:
        if name.endswith(suffix):
            name = name[: -len(suffix)]
            break
    if name.startswith("lib"):
        name = name[3:]
    if not name:
        raise ValidationError("Invalid library filename.", context={"path": str(library_path)})
    parent = library_path.parent
    return LinkSpec(search_dir=parent if str(parent) not in ("", ".") else None, library=name)
