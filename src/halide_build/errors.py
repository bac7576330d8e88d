"""Typed build error model with stable, machine-readable error codes."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from enum import StrEnum


class ErrorCode(StrEnum):
    """Stable error identifiers used across API surfaces."""

    VALIDATION = "E_VALIDATION"
    TOOLCHAIN_NOT_FOUND = "E_TOOLCHAIN_NOT_FOUND"
    TOOLCHAIN_INCOMPLETE = "E_TOOLCHAIN_INCOMPLETE"
    COMPILER_INVOCATION = "E_COMPILER_INVOCATION"
    COMPILATION = "E_COMPILATION"
    GENERATOR_EXECUTION = "E_GENERATOR_EXECUTION"
    ARTIFACT_NOT_PRODUCED = "E_ARTIFACT_NOT_PRODUCED"
    ARTIFACT_MISSING = "E_ARTIFACT_MISSING"
    SELF_TEST_INVOCATION = "E_SELF_TEST_INVOCATION"
    SOURCE_CHECKOUT = "E_SOURCE_CHECKOUT"


class HalideBuildError(Exception):
    """Base error class that carries code, optional hint, and context."""

    code: str
    hint: str | None
    context: Mapping[str, str]

    def __init__(
        self,
        message: str,
        *,
        code: ErrorCode,
        hint: str | None = None,
        context: Mapping[str, str] | None = None,
    ) -> None:
        super().__init__(message)
        self.code = code.value
        self.hint = hint
        self.context = dict(context or {})

    def __str__(self) -> str:
        parts = [super().__str__()]
        if self.hint:
            parts.append(f"Hint: {self.hint}")
        if self.context:
            for k, v in self.context.items():
                if v:
                    parts.append(f"  {k}: {v}")
        return "\n".join(parts)

    def to_dict(self) -> dict[str, object]:
        payload: dict[str, object] = {
            "code": self.code,
            "message": str(self),
            "context": dict(self.context),
        }
        if self.hint is not None:
            payload["hint"] = self.hint
        return payload


class ProcessError(HalideBuildError):
    """Error raised around an external process; keeps its output verbatim.

    ``returncode`` is ``None`` when the process never started.
    """

    command: tuple[str, ...]
    returncode: int | None
    stdout: str
    stderr: str

    def __init__(
        self,
        message: str,
        *,
        code: ErrorCode,
        command: Sequence[str],
        returncode: int | None = None,
        stdout: str = "",
        stderr: str = "",
        hint: str | None = None,
        context: Mapping[str, str] | None = None,
    ) -> None:
        merged = {"command": " ".join(command)}
        if returncode is not None:
            merged["returncode"] = str(returncode)
        merged.update(context or {})
        super().__init__(message, code=code, hint=hint, context=merged)
        self.command = tuple(command)
        self.returncode = returncode
        self.stdout = stdout
        self.stderr = stderr

    @property
    def diagnostics(self) -> str:
        """Captured process output, stdout first, exactly as emitted."""
        return "".join(part for part in (self.stdout, self.stderr) if part)

    def to_dict(self) -> dict[str, object]:
        payload = super().to_dict()
        payload["stdout"] = self.stdout
        payload["stderr"] = self.stderr
        return payload


class ValidationError(HalideBuildError):
    def __init__(
        self,
        message: str,
        *,
        hint: str | None = None,
        context: Mapping[str, str] | None = None,
    ) -> None:
        super().__init__(message, code=ErrorCode.VALIDATION, hint=hint, context=context)


class ToolchainNotFound(HalideBuildError):
    def __init__(
        self,
        message: str,
        *,
        hint: str | None = None,
        context: Mapping[str, str] | None = None,
    ) -> None:
        super().__init__(message, code=ErrorCode.TOOLCHAIN_NOT_FOUND, hint=hint, context=context)


class ToolchainIncomplete(HalideBuildError):
    missing: tuple[str, ...]

    def __init__(
        self,
        message: str,
        *,
        missing: Sequence[str] = (),
        hint: str | None = None,
        context: Mapping[str, str] | None = None,
    ) -> None:
        merged = dict(context or {})
        if missing:
            merged["missing"] = ", ".join(missing)
        super().__init__(message, code=ErrorCode.TOOLCHAIN_INCOMPLETE, hint=hint, context=merged)
        self.missing = tuple(missing)


class ArtifactMissing(HalideBuildError):
    def __init__(
        self,
        message: str,
        *,
        hint: str | None = None,
        context: Mapping[str, str] | None = None,
    ) -> None:
        super().__init__(message, code=ErrorCode.ARTIFACT_MISSING, hint=hint, context=context)


class CompilerInvocationFailed(ProcessError):
    def __init__(
        self,
        message: str,
        *,
        command: Sequence[str],
        hint: str | None = None,
        context: Mapping[str, str] | None = None,
    ) -> None:
        super().__init__(
            message,
            code=ErrorCode.COMPILER_INVOCATION,
            command=command,
            hint=hint,
            context=context,
        )


class CompilationFailed(ProcessError):
    def __init__(
        self,
        message: str,
        *,
        command: Sequence[str],
        returncode: int,
        stdout: str = "",
        stderr: str = "",
        hint: str | None = None,
        context: Mapping[str, str] | None = None,
    ) -> None:
        super().__init__(
            message,
            code=ErrorCode.COMPILATION,
            command=command,
            returncode=returncode,
            stdout=stdout,
            stderr=stderr,
            hint=hint,
            context=context,
        )


class GeneratorExecutionFailed(ProcessError):
    def __init__(
        self,
        message: str,
        *,
        command: Sequence[str],
        returncode: int | None = None,
        stdout: str = "",
        stderr: str = "",
        hint: str | None = None,
        context: Mapping[str, str] | None = None,
    ) -> None:
        super().__init__(
            message,
            code=ErrorCode.GENERATOR_EXECUTION,
            command=command,
            returncode=returncode,
            stdout=stdout,
            stderr=stderr,
            hint=hint,
            context=context,
        )


class ArtifactNotProduced(ProcessError):
    def __init__(
        self,
        message: str,
        *,
        command: Sequence[str],
        stdout: str = "",
        stderr: str = "",
        hint: str | None = None,
        context: Mapping[str, str] | None = None,
    ) -> None:
        super().__init__(
            message,
            code=ErrorCode.ARTIFACT_NOT_PRODUCED,
            command=command,
            returncode=0,
            stdout=stdout,
            stderr=stderr,
            hint=hint,
            context=context,
        )


class SelfTestInvocationFailed(ProcessError):
    def __init__(
        self,
        message: str,
        *,
        command: Sequence[str],
        hint: str | None = None,
        context: Mapping[str, str] | None = None,
    ) -> None:
        super().__init__(
            message,
            code=ErrorCode.SELF_TEST_INVOCATION,
            command=command,
            hint=hint,
            context=context,
        )


class SourceCheckoutError(ProcessError):
    def __init__(
        self,
        message: str,
        *,
        command: Sequence[str],
        returncode: int | None = None,
        stdout: str = "",
        stderr: str = "",
        hint: str | None = None,
        context: Mapping[str, str] | None = None,
    ) -> None:
        super().__init__(
            message,
            code=ErrorCode.SOURCE_CHECKOUT,
            command=command,
            returncode=returncode,
            stdout=stdout,
            stderr=stderr,
            hint=hint,
            context=context,
        )


__all__ = [
    "ArtifactMissing",
    "ArtifactNotProduced",
    "CompilationFailed",
    "CompilerInvocationFailed",
    "ErrorCode",
    "GeneratorExecutionFailed",
    "HalideBuildError",
    "ProcessError",
    "SelfTestInvocationFailed",
    "SourceCheckoutError",
    "ToolchainIncomplete",
    "ToolchainNotFound",
    "ValidationError",
]
