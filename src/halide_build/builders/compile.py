"""Compile generator sources and the harness into a generator executable."""

from __future__ import annotations

import os

from halide_build.builders.base import GeneratorSpec
from halide_build.builders.process import run_process
from halide_build.config import CXX_STANDARD
from halide_build.errors import CompilationFailed, CompilerInvocationFailed, ValidationError
from halide_build.models import GeneratorExecutable
from halide_build.toolchain import LINK_LIBRARIES


def compile_command(spec: GeneratorSpec) -> tuple[str, ...]:
    """Compiler argv; identical inputs always yield the identical command."""
    config = spec.config
    toolchain = spec.toolchain
    command: list[str] = [config.cxx, CXX_STANDARD]
    for include_dir in toolchain.include_dirs:
        command.extend(["-I", str(include_dir)])
    command.extend(config.cxxflags)
    if config.use_harness:
        if toolchain.harness is None:
            raise ValidationError(
                "Generator harness requested but the toolchain has no GenGen.cpp.",
                hint="Disable the harness or point at a complete Halide toolchain.",
                context={"toolchain": str(toolchain.root)},
            )
        command.append(str(toolchain.harness))
    command.extend(config.build_args)
    command.extend(str(source) for source in spec.sources)
    command.extend(["-o", str(spec.generator_path)])
    command.extend(["-L", str(toolchain.lib_dir), *LINK_LIBRARIES])
    command.extend(config.ldflags)
    return tuple(command)


def compile_generator(spec: GeneratorSpec) -> GeneratorExecutable:
    if not spec.sources:
        raise ValidationError("compile_generator() requires at least one source.")
    command = compile_command(spec)
    spec.output_dir.mkdir(parents=True, exist_ok=True)
    try:
        result = run_process(command, env=_compile_env(spec))
    except OSError as exc:
        raise CompilerInvocationFailed(
            "C++ compiler could not be started.",
            command=command,
            hint="Check the compiler path (CXX) and its permissions.",
            context={"kernel": spec.kernel, "error": str(exc)},
        ) from exc
    if result.returncode != 0:
        raise CompilationFailed(
            "Generator compilation failed.",
            command=command,
            returncode=result.returncode,
            stdout=result.stdout,
            stderr=result.stderr,
            hint="See the compiler output below.",
            context={"kernel": spec.kernel},
        )
    return GeneratorExecutable(kernel=spec.kernel, path=spec.generator_path, command=command)


def _compile_env(spec: GeneratorSpec) -> dict[str, str] | None:
    if not spec.config.env:
        return None
    env = dict(os.environ)
    env.update(spec.config.env)
    return env
