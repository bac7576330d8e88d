"""Fingerprint marker persisted next to the build outputs."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

import cbor2

from halide_build.errors import ValidationError
from halide_build.fingerprint.keys import SCHEMA_VERSION, BuildFingerprint, fingerprint_key

MARKER_NAME = ".halide-build.fingerprint"


class FingerprintStore:
    """Reads and writes the last successful fingerprint of an output directory.

    The marker is an opaque cache: an unreadable or inconsistent marker is
    treated as absent, and deleting it forces a full rebuild.
    """

    def __init__(self, output_dir: str | Path) -> None:
        self.output_dir = Path(output_dir)

    @property
    def path(self) -> Path:
        return self.output_dir / MARKER_NAME

    def load(self) -> BuildFingerprint | None:
        try:
            raw = self.path.read_bytes()
        except OSError:
            return None
        try:
            marker = cbor2.loads(raw)
        except (cbor2.CBORDecodeError, ValueError):
            return None
        if not isinstance(marker, dict) or marker.get("schema_version") != SCHEMA_VERSION:
            return None
        inputs = marker.get("inputs")
        if not isinstance(inputs, dict):
            return None
        try:
            fingerprint = BuildFingerprint.from_payload(inputs)
        except (KeyError, TypeError, ValueError):
            return None
        if marker.get("key") != fingerprint_key(fingerprint):
            return None
        return fingerprint

    def save(self, fingerprint: BuildFingerprint) -> Path:
        marker: dict[str, Any] = {
            "schema_version": SCHEMA_VERSION,
            "key": fingerprint.key,
            "inputs": fingerprint.to_payload(),
        }
        self.output_dir.mkdir(parents=True, exist_ok=True)
        temp_path = self.path.with_suffix(".tmp")
        temp_path.write_bytes(cbor2.dumps(marker, canonical=True))
        os.replace(temp_path, self.path)
        return self.path

    def clear(self) -> None:
        try:
            self.path.unlink(missing_ok=True)
        except OSError as exc:
            raise ValidationError(
                "Fingerprint marker cannot be removed.",
                hint="Delete the marker path by hand; it must be a regular file.",
                context={"path": str(self.path), "error": str(exc)},
            ) from exc
