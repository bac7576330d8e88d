"""Build configuration and environment defaults."""

from __future__ import annotations

import os
import shlex
from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from typing import Self

from halide_build.errors import ValidationError
from halide_build.models import DEFAULT_EMIT, DEFAULT_TARGET, LINKABLE_SUFFIXES, EmitKind

DEFAULT_CXX = "c++"
CXX_STANDARD = "-std=c++17"


@dataclass(frozen=True, slots=True)
class BuildConfig:
    """Everything that shapes the generator build besides sources and paths.

    Every field except ``keep_generator`` and ``self_test`` participates in
    the build fingerprint, so changing one forces a rebuild.
    """

    cxx: str = DEFAULT_CXX
    cxxflags: tuple[str, ...] = ()
    ldflags: tuple[str, ...] = ()
    target: str = DEFAULT_TARGET
    features: tuple[str, ...] = ()
    generator_name: str | None = None
    function_name: str | None = None
    emit: tuple[EmitKind, ...] = DEFAULT_EMIT
    build_args: tuple[str, ...] = ()
    run_args: tuple[str, ...] = ()
    use_harness: bool = True
    keep_generator: bool = True
    self_test: tuple[str, ...] = ()
    env: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if not self.cxx:
            raise ValidationError("BuildConfig.cxx must be non-empty.")
        if not self.target:
            raise ValidationError("BuildConfig.target must be non-empty.")
        if not self.emit:
            raise ValidationError("BuildConfig.emit requires at least one emit kind.")
        linkable = [kind for kind in self.emit if kind in LINKABLE_SUFFIXES]
        if len(linkable) != 1:
            raise ValidationError(
                "BuildConfig.emit must name exactly one linkable output.",
                hint=f"Use one of: {', '.join(sorted(LINKABLE_SUFFIXES))}.",
                context={"emit": ",".join(self.emit)},
            )

    @property
    def primary_emit(self) -> EmitKind:
        return next(kind for kind in self.emit if kind in LINKABLE_SUFFIXES)

    @property
    def target_string(self) -> str:
        """Halide target string, e.g. ``host-cuda-debug``."""
        return "-".join((self.target, *self.features))

    def with_overrides(self, **changes: object) -> Self:
        return replace(self, **changes)  # type: ignore[arg-type]

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None, **overrides: object) -> Self:
        """Build a config from ``CXX``, ``CXXFLAGS``, ``LDFLAGS`` and ``HL_TARGET``."""
        env = os.environ if environ is None else environ
        values: dict[str, object] = {}
        cxx = (env.get("CXX") or "").strip()
        if cxx:
            values["cxx"] = cxx
        cxxflags = env.get("CXXFLAGS") or ""
        if cxxflags.strip():
            values["cxxflags"] = tuple(shlex.split(cxxflags))
        ldflags = env.get("LDFLAGS") or ""
        if ldflags.strip():
            values["ldflags"] = tuple(shlex.split(ldflags))
        target = (env.get("HL_TARGET") or "").strip()
        if target:
            values["target"] = target
        values.update(overrides)
        return cls(**values)  # type: ignore[arg-type]

    def fingerprint_payload(self) -> dict[str, object]:
        return {
            "cxx": self.cxx,
            "cxxflags": list(self.cxxflags),
            "ldflags": list(self.ldflags),
            "target": self.target_string,
            "generator_name": self.generator_name,
            "function_name": self.function_name,
            "emit": list(self.emit),
            "build_args": list(self.build_args),
            "run_args": list(self.run_args),
            "use_harness": self.use_harness,
            "env": dict(sorted(self.env.items())),
        }
