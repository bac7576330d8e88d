"""Build context driving the compile -> generate pipeline for one kernel."""

from __future__ import annotations

import os
import re
from collections.abc import Callable
from pathlib import Path
from typing import Self, TypeVar

from .artifacts import artifact_path
from .builders import GeneratorSpec, compile_generator, run_generator
from .builders.process import library_path_env, run_process
from .config import BuildConfig
from .errors import ArtifactMissing, HalideBuildError, SelfTestInvocationFailed, ValidationError
from .fingerprint import FingerprintStore, current_fingerprint, is_stale
from .models import Artifact
from .observability import Stage, StructuredLogger
from .sources import SourceSet
from .toolchain import ToolchainPaths, locate_toolchain

KERNEL_PATTERN = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")

T = TypeVar("T")


class BuildContext:
    """Owns one generator-to-artifact pipeline.

    A context assumes exclusive use of its output directory for the span of
    each :meth:`build` / :meth:`run` call and takes no lock; callers sharing
    an output directory must serialize externally.
    """

    def __init__(
        self,
        toolchain_root: str | Path,
        output_dir: str | Path,
        *,
        kernel: str | None = None,
        config: BuildConfig | None = None,
        logger: StructuredLogger | None = None,
    ) -> None:
        if not str(toolchain_root).strip():
            raise ValidationError("BuildContext requires a toolchain root path.")
        if not str(output_dir).strip():
            raise ValidationError("BuildContext requires an output directory path.")
        if kernel is not None and not KERNEL_PATTERN.fullmatch(kernel):
            raise ValidationError(
                "Kernel names must be valid C identifiers.",
                context={"kernel": kernel},
            )
        self.toolchain_root = Path(toolchain_root)
        self.output_dir = Path(output_dir)
        self.config = config or BuildConfig()
        self.logger = logger or StructuredLogger()
        self.sources = SourceSet()
        self._kernel = kernel
        self._last_artifact: Artifact | None = None

    def __repr__(self) -> str:
        return (
            f"BuildContext(toolchain_root={str(self.toolchain_root)!r}, "
            f"output_dir={str(self.output_dir)!r}, sources={self.sources!r})"
        )

    @property
    def kernel(self) -> str:
        """Explicit kernel name, else derived from the first source's stem."""
        if self._kernel is not None:
            return self._kernel
        if not self.sources:
            raise ValidationError(
                "Kernel name cannot be derived from an empty source set.",
                hint="Add a source file or pass kernel= explicitly.",
            )
        stem = re.sub(r"[^A-Za-z0-9_]", "_", self.sources[0].stem)
        return stem if not stem[:1].isdigit() else f"_{stem}"

    @property
    def last_artifact(self) -> Artifact | None:
        return self._last_artifact

    def source_file(self, path: str | Path) -> Self:
        self.sources.append(path)
        return self

    def source_files(self, *paths: str | Path) -> Self:
        self.sources.extend(paths)
        return self

    def artifact_path(self) -> Path:
        return artifact_path(self.output_dir, self.kernel, self.config.primary_emit)

    def is_stale(self) -> bool:
        return is_stale(self)

    def build(self) -> bool:
        """Rebuild the artifact if needed.

        Returns False when the recorded fingerprint matches and the artifact
        exists, True after a full compile + generate pipeline.
        """
        toolchain = self._validate()
        kernel = self.kernel
        target = self.artifact_path()
        if not is_stale(self) and target.is_file():
            self.logger.log(
                operation="build_up_to_date",
                kernel=kernel,
                stage="fingerprint",
                message=f"{target} is up to date.",
            )
            return False

        fingerprint = current_fingerprint(self)
        store = FingerprintStore(self.output_dir)
        self._stage("fingerprint", kernel, store.clear)
        spec = GeneratorSpec(
            kernel=kernel,
            sources=self.sources.as_tuple(),
            toolchain=toolchain,
            output_dir=self.output_dir,
            config=self.config,
        )

        self.logger.log(
            operation="compile_start",
            kernel=kernel,
            stage="compile",
            message=f"Compiling {[str(s) for s in spec.sources]} to {spec.generator_path}",
        )
        executable = self._stage("compile", kernel, lambda: compile_generator(spec))
        self.logger.log(
            operation="generate_start",
            kernel=kernel,
            stage="generate",
            message=f"Running {executable.path}",
            extra={"target": self.config.target_string},
        )
        artifact = self._stage("generate", kernel, lambda: run_generator(executable, spec))
        if not self.config.keep_generator:
            executable.path.unlink(missing_ok=True)

        marker = store.save(fingerprint)
        self._last_artifact = artifact
        self.logger.log(
            operation="build_complete",
            kernel=kernel,
            stage="generate",
            message=f"Built {artifact.path}",
            extra={"fingerprint": fingerprint.key, "marker": str(marker)},
        )
        return True

    def run(self) -> bool:
        """Verify the artifact exists and run the configured self-test, if any."""
        if self._kernel is None and not self.sources:
            raise ArtifactMissing(
                "No kernel artifact exists for an empty source set.",
                hint="Add sources and call build() before run().",
                context={"output_dir": str(self.output_dir)},
            )
        kernel = self.kernel
        target = self.artifact_path()
        if not target.is_file():
            raise ArtifactMissing(
                "Kernel artifact does not exist.",
                hint="Call build() before run().",
                context={"kernel": kernel, "expected": str(target)},
            )
        if not self.config.self_test:
            self.logger.log(
                operation="artifact_verified",
                kernel=kernel,
                stage="self_test",
                message=f"{target} exists.",
            )
            return True

        command = self._self_test_command(target)
        try:
            result = run_process(
                command,
                cwd=self.output_dir,
                env=library_path_env(self.toolchain_root / "lib", self.config.env),
            )
        except OSError as exc:
            raise SelfTestInvocationFailed(
                "Self-test command could not be started.",
                command=command,
                context={"kernel": kernel, "error": str(exc)},
            ) from exc
        ok = result.returncode == 0
        self.logger.log(
            operation="self_test_complete",
            kernel=kernel,
            stage="self_test",
            level="info" if ok else "error",
            message=f"Self-test {'passed' if ok else 'failed'} for {target}",
            extra={
                "returncode": result.returncode,
                "stdout": result.stdout,
                "stderr": result.stderr,
            },
        )
        return ok

    def _validate(self) -> ToolchainPaths:
        return self._stage("validate", self._kernel, self._check_inputs)

    def _check_inputs(self) -> ToolchainPaths:
        if not self.sources:
            raise ValidationError(
                "Cannot build with an empty source set.",
                hint="Append at least one generator source before calling build().",
                context={"output_dir": str(self.output_dir)},
            )
        missing = self.sources.missing()
        if missing:
            raise ValidationError(
                "Generator sources do not exist.",
                hint="Create the sources before building.",
                context={"missing": ", ".join(str(path) for path in missing)},
            )
        toolchain = locate_toolchain(self.toolchain_root, require_harness=self.config.use_harness)
        self.output_dir.mkdir(parents=True, exist_ok=True)
        if not os.access(self.output_dir, os.W_OK):
            raise ValidationError(
                "Output directory is not writable.",
                context={"output_dir": str(self.output_dir)},
            )
        return toolchain

    def _stage(self, stage: Stage, kernel: str | None, action: Callable[[], T]) -> T:
        try:
            return action()
        except HalideBuildError as exc:
            self._log_failure(stage, kernel, exc)
            raise

    def _log_failure(self, stage: Stage, kernel: str | None, exc: HalideBuildError) -> None:
        self.logger.log(
            operation=f"{stage}_failed",
            kernel=kernel,
            stage=stage,
            level="error",
            message=str(exc),
            extra={"code": exc.code},
        )

    def _self_test_command(self, target: Path) -> tuple[str, ...]:
        replacements = {
            "{artifact}": str(target),
            "{output_dir}": str(self.output_dir),
            "{kernel}": self.kernel,
        }
        command: list[str] = []
        for arg in self.config.self_test:
            for placeholder, value in replacements.items():
                arg = arg.replace(placeholder, value)
            command.append(arg)
        return tuple(command)
