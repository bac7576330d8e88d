"""Staleness detection against the last successful build."""

from __future__ import annotations

from typing import TYPE_CHECKING

from halide_build.errors import ValidationError
from halide_build.fingerprint.keys import BuildFingerprint, compute_fingerprint
from halide_build.fingerprint.store import FingerprintStore

if TYPE_CHECKING:
    from halide_build.context import BuildContext


def current_fingerprint(context: BuildContext) -> BuildFingerprint:
    return compute_fingerprint(
        sources=context.sources,
        toolchain_root=context.toolchain_root,
        kernel=context.kernel,
        config=context.config,
    )


def is_stale(context: BuildContext) -> bool:
    """Return True when the context must be rebuilt.

    Only declared sources are hashed; headers they include are not tracked
    unless they are part of the source set.
    """
    if not context.sources or context.sources.missing():
        return True
    recorded = FingerprintStore(context.output_dir).load()
    if recorded is None:
        return True
    try:
        current = current_fingerprint(context)
    except ValidationError:
        return True
    return current.key != recorded.key
