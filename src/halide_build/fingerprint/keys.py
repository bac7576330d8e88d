"""Build fingerprint derivation."""

from __future__ import annotations

import hashlib
import json
from collections.abc import Iterable
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from halide_build.config import BuildConfig
from halide_build.errors import ValidationError

SCHEMA_VERSION = 1
_CHUNK_SIZE = 1 << 16


@dataclass(frozen=True, slots=True)
class SourceDigest:
    path: str
    sha256: str


@dataclass(frozen=True, slots=True)
class BuildFingerprint:
    sources: tuple[SourceDigest, ...]
    toolchain: str
    kernel: str
    config: dict[str, Any] = field(default_factory=dict)

    @property
    def key(self) -> str:
        return fingerprint_key(self)

    def to_payload(self) -> dict[str, Any]:
        return _to_payload(self)

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> BuildFingerprint:
        sources = payload["sources"]
        return cls(
            sources=tuple(SourceDigest(path=str(s["path"]), sha256=str(s["sha256"])) for s in sources),
            toolchain=str(payload["toolchain"]),
            kernel=str(payload["kernel"]),
            config=dict(payload["config"]),
        )


def fingerprint_key(fingerprint: BuildFingerprint) -> str:
    canonical = json.dumps(_to_payload(fingerprint), sort_keys=True, separators=(",", ":"))
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()


def compute_fingerprint(
    *,
    sources: Iterable[Path],
    toolchain_root: Path,
    kernel: str,
    config: BuildConfig,
) -> BuildFingerprint:
    """Hash every source in declared order together with the build settings."""
    digests = tuple(
        SourceDigest(path=str(path.resolve()), sha256=file_sha256(path)) for path in sources
    )
    return BuildFingerprint(
        sources=digests,
        toolchain=str(toolchain_root.expanduser().resolve()),
        kernel=kernel,
        config=config.fingerprint_payload(),
    )


def file_sha256(path: Path) -> str:
    digest = hashlib.sha256()
    try:
        with path.open("rb") as handle:
            for chunk in iter(lambda: handle.read(_CHUNK_SIZE), b""):
                digest.update(chunk)
    except OSError as exc:
        raise ValidationError(
            "Source file cannot be read.",
            hint="Ensure every declared source exists and is readable.",
            context={"operation": "fingerprint", "path": str(path), "error": str(exc)},
        ) from exc
    return digest.hexdigest()


def _to_payload(fingerprint: BuildFingerprint) -> dict[str, Any]:
    return {
        "schema_version": SCHEMA_VERSION,
        "sources": [{"path": s.path, "sha256": s.sha256} for s in fingerprint.sources],
        "toolchain": fingerprint.toolchain,
        "kernel": fingerprint.kernel,
        "config": fingerprint.config,
    }
