"""Wrap a generated object or archive in a shared library."""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path

from halide_build.builders.process import run_process
from halide_build.config import CXX_STANDARD, DEFAULT_CXX
from halide_build.errors import CompilationFailed, CompilerInvocationFailed, ValidationError


def compile_shared_library(
    output: str | Path,
    inputs: Sequence[str | Path],
    *,
    compiler: str | None = None,
    flags: Sequence[str] = (),
) -> Path:
    if not inputs:
        raise ValidationError("compile_shared_library() requires at least one input.")
    output_path = Path(output)
    command = (
        compiler or DEFAULT_CXX,
        CXX_STANDARD,
        "-shared",
        "-o",
        str(output_path),
        *(str(item) for item in inputs),
        *flags,
    )
    output_path.parent.mkdir(parents=True, exist_ok=True)
    try:
        result = run_process(command)
    except OSError as exc:
        raise CompilerInvocationFailed(
            "C++ compiler could not be started.",
            command=command,
            context={"output": str(output_path), "error": str(exc)},
        ) from exc
    if result.returncode != 0:
        raise CompilationFailed(
            "Shared library link failed.",
            command=command,
            returncode=result.returncode,
            stdout=result.stdout,
            stderr=result.stderr,
            context={"output": str(output_path)},
        )
    return output_path
