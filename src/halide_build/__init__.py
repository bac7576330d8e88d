"""Public package entrypoint for halide-build."""

from .artifacts import LinkSpec, artifact_path, link_spec, shared_library_path
from .builders import compile_shared_library
from .checkout import HalideSource
from .config import BuildConfig
from .context import BuildContext
from .errors import (
    ArtifactMissing,
    ArtifactNotProduced,
    CompilationFailed,
    CompilerInvocationFailed,
    ErrorCode,
    GeneratorExecutionFailed,
    HalideBuildError,
    ProcessError,
    SelfTestInvocationFailed,
    SourceCheckoutError,
    ToolchainIncomplete,
    ToolchainNotFound,
    ValidationError,
)
from .fingerprint import BuildFingerprint, FingerprintStore, is_stale
from .models import Artifact, GeneratorExecutable
from .observability import StructuredLogger
from .scaffold import write_generator_template
from .sources import DuplicateSourceWarning, SourceSet
from .toolchain import ToolchainPaths, locate_toolchain

__all__ = [
    "Artifact",
    "ArtifactMissing",
    "ArtifactNotProduced",
    "BuildConfig",
    "BuildContext",
    "BuildFingerprint",
    "CompilationFailed",
    "CompilerInvocationFailed",
    "DuplicateSourceWarning",
    "ErrorCode",
    "FingerprintStore",
    "GeneratorExecutable",
    "GeneratorExecutionFailed",
    "HalideBuildError",
    "HalideSource",
    "LinkSpec",
    "ProcessError",
    "SelfTestInvocationFailed",
    "SourceCheckoutError",
    "SourceSet",
    "StructuredLogger",
    "ToolchainIncomplete",
    "ToolchainNotFound",
    "ToolchainPaths",
    "ValidationError",
    "artifact_path",
    "compile_shared_library",
    "is_stale",
    "link_spec",
    "locate_toolchain",
    "shared_library_path",
    "write_generator_template",
]
