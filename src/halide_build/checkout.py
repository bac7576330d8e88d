"""Clone, update, and build a Halide toolchain from source."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from halide_build.builders.process import run_process
from halide_build.errors import SourceCheckoutError, ValidationError

DEFAULT_REPOSITORY = "https://github.com/halide/Halide"
DEFAULT_BRANCH = "main"


@dataclass(frozen=True, slots=True)
class HalideSource:
    """A Halide source checkout that doubles as a toolchain root once built."""

    path: Path
    repository: str = DEFAULT_REPOSITORY
    branch: str = DEFAULT_BRANCH
    make: str = "make"
    make_flags: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        if not self.repository:
            raise ValidationError("HalideSource requires a repository URL.")
        if not self.branch:
            raise ValidationError("HalideSource requires a branch.")

    @property
    def exists(self) -> bool:
        return self.path.exists()

    def download(self) -> None:
        """Clone the repository for the first time."""
        if self.path.exists():
            raise ValidationError(
                "Checkout destination already exists.",
                hint="Use update() for an existing checkout.",
                context={"path": str(self.path)},
            )
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self._run(
            ["git", "clone", "-b", self.branch, self.repository, str(self.path)],
            operation="download",
        )

    def update(self) -> None:
        self._require_checkout("update")
        self._run(["git", "pull", "origin", self.branch], operation="update", cwd=self.path)

    def build(self) -> None:
        self._require_checkout("build")
        self._run([self.make, *self.make_flags], operation="build", cwd=self.path)

    def sync(self) -> None:
        """Download or update, then build."""
        if self.path.exists():
            self.update()
        else:
            self.download()
        self.build()

    def _require_checkout(self, operation: str) -> None:
        if not self.path.is_dir():
            raise ValidationError(
                "Halide checkout does not exist.",
                hint="Run download() first.",
                context={"operation": operation, "path": str(self.path)},
            )

    def _run(self, command: list[str], *, operation: str, cwd: Path | None = None) -> None:
        try:
            result = run_process(command, cwd=cwd)
        except OSError as exc:
            raise SourceCheckoutError(
                f"Could not start `{command[0]}`.",
                command=command,
                hint="Ensure git and make are installed and on PATH.",
                context={"operation": operation, "error": str(exc)},
            ) from exc
        if result.returncode != 0:
            raise SourceCheckoutError(
                f"Halide source {operation} failed.",
                command=command,
                returncode=result.returncode,
                stdout=result.stdout,
                stderr=result.stderr,
                context={"operation": operation, "path": str(self.path)},
            )
