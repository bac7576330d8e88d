"""Ordered, append-only collection of generator source files."""

from __future__ import annotations

import warnings
from collections.abc import Iterable, Iterator
from pathlib import Path


class DuplicateSourceWarning(UserWarning):
    """Warning raised when the same source path is appended twice."""


class SourceSet:
    """Generator sources in declaration order.

    Paths are not checked when appended; sources may be produced by earlier
    steps of the surrounding build. Use :meth:`missing` at build time.
    """

    __slots__ = ("_paths",)

    def __init__(self, paths: Iterable[str | Path] = ()) -> None:
        self._paths: list[Path] = []
        self.extend(paths)

    def append(self, path: str | Path) -> None:
        source = Path(path)
        if source in self._paths:
            warnings.warn(
                f"Source `{source}` is already part of the build; it will be passed twice.",
                DuplicateSourceWarning,
                stacklevel=2,
            )
        self._paths.append(source)

    def extend(self, paths: Iterable[str | Path]) -> None:
        for path in paths:
            self.append(path)

    def missing(self) -> tuple[Path, ...]:
        return tuple(path for path in self._paths if not path.is_file())

    def as_tuple(self) -> tuple[Path, ...]:
        return tuple(self._paths)

    def __iter__(self) -> Iterator[Path]:
        return iter(tuple(self._paths))

    def __len__(self) -> int:
        return len(self._paths)

    def __getitem__(self, index: int) -> Path:
        return self._paths[index]

    def __bool__(self) -> bool:
        return bool(self._paths)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, SourceSet):
            return NotImplemented
        return self._paths == other._paths

    def __repr__(self) -> str:
        return f"SourceSet({[str(path) for path in self._paths]!r})"
