"""Execute a compiled generator to emit the kernel artifact."""

from __future__ import annotations

from halide_build.builders.base import GeneratorSpec
from halide_build.builders.process import library_path_env, run_process
from halide_build.errors import ArtifactNotProduced, GeneratorExecutionFailed
from halide_build.models import Artifact, GeneratorExecutable


def generator_command(executable: GeneratorExecutable, spec: GeneratorSpec) -> tuple[str, ...]:
    config = spec.config
    command: list[str] = [str(executable.path)]
    if config.use_harness:
        command.extend(
            [
                "-g",
                spec.generator_name,
                "-f",
                spec.function_name,
                "-n",
                spec.artifact_path.stem,
                "-o",
                str(spec.output_dir),
                "-e",
                ",".join(config.emit),
                f"target={config.target_string}",
            ]
        )
    command.extend(config.run_args)
    return tuple(command)


def run_generator(executable: GeneratorExecutable, spec: GeneratorSpec) -> Artifact:
    command = generator_command(executable, spec)
    expected = spec.artifact_path
    # A leftover artifact must not pass for output of this run.
    expected.unlink(missing_ok=True)
    try:
        result = run_process(
            command,
            cwd=spec.output_dir,
            env=library_path_env(spec.toolchain.lib_dir, spec.config.env),
        )
    except OSError as exc:
        raise GeneratorExecutionFailed(
            "Generator executable could not be started.",
            command=command,
            hint="The generator binary may be missing or not executable.",
            context={"kernel": spec.kernel, "error": str(exc)},
        ) from exc
    if result.returncode != 0:
        raise GeneratorExecutionFailed(
            "Generator exited with an error.",
            command=command,
            returncode=result.returncode,
            stdout=result.stdout,
            stderr=result.stderr,
            hint="See the generator output below.",
            context={"kernel": spec.kernel},
        )
    if not expected.is_file():
        raise ArtifactNotProduced(
            "Generator succeeded but did not write the expected artifact.",
            command=command,
            stdout=result.stdout,
            stderr=result.stderr,
            hint="Check the generator name and emit options match the registered generator.",
            context={"kernel": spec.kernel, "expected": str(expected)},
        )
    return Artifact(
        kernel=spec.kernel,
        path=expected,
        target=spec.config.target_string,
        emit=spec.config.emit,
        command=command,
    )
