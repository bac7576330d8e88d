"""Build fingerprint APIs."""

from .detect import current_fingerprint, is_stale
from .keys import BuildFingerprint, SourceDigest, compute_fingerprint, file_sha256, fingerprint_key
from .store import MARKER_NAME, FingerprintStore

__all__ = [
    "MARKER_NAME",
    "BuildFingerprint",
    "FingerprintStore",
    "SourceDigest",
    "compute_fingerprint",
    "current_fingerprint",
    "file_sha256",
    "fingerprint_key",
    "is_stale",
]
