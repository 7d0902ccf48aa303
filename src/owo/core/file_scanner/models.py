"""
Data models for the file scanner module.
"""

from dataclasses import dataclass
from pathlib import Path, PurePosixPath


@dataclass(frozen=True)
class PathCandidate:
    """
    A directory entry considered by the ignore policy.

    Attributes:
        path: Absolute path to the entry
        rel_path: Path relative to the scan root, POSIX separators
        is_dir: True for real directories (symlinks are never directories here)
        is_symlink: True if the entry is a symbolic link
    """

    path: Path
    rel_path: str
    is_dir: bool = False
    is_symlink: bool = False

    @property
    def name(self) -> str:
        return PurePosixPath(self.rel_path).name

    @property
    def is_hidden(self) -> bool:
        """True when the basename starts with a dot."""
        return self.name.startswith(".")


@dataclass(frozen=True)
class FileTask:
    """
    An accepted file plus its enumeration index.

    Attributes:
        index: 0-based position in traversal order; the sole ordering key
        candidate: The accepted file
    """

    index: int
    candidate: PathCandidate

    @property
    def rel_path(self) -> str:
        return self.candidate.rel_path


@dataclass(frozen=True)
class FileResult:
    """
    Outcome of reading one FileTask.

    Exactly one of ``content`` and ``error`` is set.
    """

    index: int
    rel_path: str
    content: bytes | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def size_bytes(self) -> int:
        return len(self.content) if self.content is not None else 0
