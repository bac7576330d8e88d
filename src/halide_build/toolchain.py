"""Locate and validate an installed Halide toolchain."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from halide_build.errors import ToolchainIncomplete, ToolchainNotFound

HEADER = Path("include") / "Halide.h"
LIBRARY_NAMES = ("libHalide.so", "libHalide.a", "libHalide.dylib", "Halide.lib")
HARNESS_NAME = "GenGen.cpp"
# Source builds keep tools/ at the root; release packages ship share/Halide/tools.
HARNESS_DIRS = (Path("tools"), Path("share") / "Halide" / "tools")

LINK_LIBRARIES = ("-lHalide", "-lpthread", "-ldl", "-lz")


@dataclass(frozen=True, slots=True)
class ToolchainPaths:
    root: Path
    include_dir: Path
    lib_dir: Path
    library: Path
    tools_dir: Path | None = None
    harness: Path | None = None

    @property
    def include_dirs(self) -> tuple[Path, ...]:
        if self.tools_dir is None:
            return (self.include_dir,)
        return (self.include_dir, self.tools_dir)


def locate_toolchain(root: str | Path, *, require_harness: bool = True) -> ToolchainPaths:
    """Resolve include/library/tool paths under *root*.

    Performs read-only checks only.
    """
    root_path = Path(root).expanduser()
    if not root_path.is_dir():
        raise ToolchainNotFound(
            "Halide toolchain root does not exist.",
            hint="Pass the Halide install/build directory or set HALIDE_PATH.",
            context={"operation": "locate_toolchain", "root": str(root_path)},
        )
    root_path = root_path.resolve()

    missing: list[str] = []
    include_dir = root_path / "include"
    if not (root_path / HEADER).is_file():
        missing.append(str(HEADER))

    lib_dir = root_path / "lib"
    library = _find_library(lib_dir)
    if library is None:
        missing.append(f"lib/{LIBRARY_NAMES[0]}")

    harness = _find_harness(root_path)
    if harness is None and require_harness:
        missing.append(f"{HARNESS_DIRS[0] / HARNESS_NAME}")

    if missing or library is None:
        raise ToolchainIncomplete(
            "Halide toolchain is missing required components.",
            missing=missing,
            hint="Build or install Halide fully before compiling generators.",
            context={"operation": "locate_toolchain", "root": str(root_path)},
        )

    return ToolchainPaths(
        root=root_path,
        include_dir=include_dir,
        lib_dir=lib_dir,
        library=library,
        tools_dir=harness.parent if harness is not None else None,
        harness=harness,
    )


def _find_library(lib_dir: Path) -> Path | None:
    if not lib_dir.is_dir():
        return None
    for name in LIBRARY_NAMES:
        candidate = lib_dir / name
        if candidate.is_file():
            return candidate
    return None


def _find_harness(root: Path) -> Path | None:
    for rel in HARNESS_DIRS:
        candidate = root / rel / HARNESS_NAME
        if candidate.is_file():
            return candidate
    return None
