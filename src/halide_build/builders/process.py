"""Subprocess execution helpers for toolchain stages."""

from __future__ import annotations

import os
import subprocess
import sys
from collections.abc import Mapping, Sequence
from pathlib import Path


def run_process(
    command: Sequence[str],
    *,
    cwd: Path | None = None,
    env: Mapping[str, str] | None = None,
) -> subprocess.CompletedProcess[str]:
    """Run *command* to completion with output captured.

    ``OSError`` from a process that cannot be started propagates to the caller.
    """
    return subprocess.run(
        list(command),
        cwd=str(cwd) if cwd is not None else None,
        env=dict(env) if env is not None else None,
        capture_output=True,
        text=True,
        encoding="utf-8",
        errors="replace",
        check=False,
    )


def library_path_env(lib_dir: Path, extra: Mapping[str, str] | None = None) -> dict[str, str]:
    """Current environment with *lib_dir* first on the dynamic loader path."""
    env = dict(os.environ)
    env.update(extra or {})
    variable = "DYLD_LIBRARY_PATH" if sys.platform == "darwin" else "LD_LIBRARY_PATH"
    existing = env.get(variable, "")
    env[variable] = os.pathsep.join(p for p in (str(lib_dir), existing) if p)
    return env
