"""
PathEnumerator implementation for ordered, pruning directory traversal.
"""

import itertools
import logging
from collections.abc import Iterator
from pathlib import Path

from owo.core.errors import ConfigurationError, DirectoryReadError
from owo.core.gitignore_manager import GitignoreLayer, GitignoreLayerCache
from owo.core.path_utils import validate_scan_root

from .ignore_matcher import IgnoreMatcher, IgnoreRuleSet
from .interfaces import PathEnumeratorInterface
from .models import FileTask, PathCandidate

logger = logging.getLogger(__name__)


class PathEnumerator(PathEnumeratorInterface):
    """
    Concrete implementation of PathEnumeratorInterface.

    Provides depth-first traversal with:
    - Children visited in code-point order of their names
    - Directory pruning driven by IgnoreMatcher
    - Gitignore layers collected along the current path
    - Symlinks reported as leaf entries and never followed
    - Graceful handling of unreadable subdirectories
    """

    def __init__(
        self,
        root_path: Path | str,
        ruleset: IgnoreRuleSet | None = None,
        layer_cache: GitignoreLayerCache | None = None,
    ):
        """
        Initialize the PathEnumerator.

        Args:
            root_path: Directory to traverse
            ruleset: Ignore rules; defaults to IgnoreRuleSet.build()
            layer_cache: Cache of gitignore layers for this root. If None,
                         one is created from the rule set's file names.

        Raises:
            ConfigurationError: If the root does not exist, is not a
                                directory or cannot be listed
        """
        validation = validate_scan_root(root_path)
        if not validation.valid:
            raise ConfigurationError(validation.error_message)

        self._root_path = Path(root_path).resolve()
        self._ruleset = ruleset or IgnoreRuleSet.build()
        self._matcher = IgnoreMatcher(self._ruleset)
        self._layer_cache = layer_cache or GitignoreLayerCache(
            self._root_path, self._ruleset.ignore_filenames
        )
        self._warnings: list[DirectoryReadError] = []
        self._ignored_count = 0

    @property
    def root_path(self) -> Path:
        return self._root_path

    @property
    def warnings(self) -> list[DirectoryReadError]:
        return list(self._warnings)

    @property
    def ignored_count(self) -> int:
        """Entries denied or pruned during the most recent traversal."""
        return self._ignored_count

    def __iter__(self) -> Iterator[FileTask]:
        self._warnings = []
        self._ignored_count = 0
        counter = itertools.count()

        try:
            entries = self._read_directory(self._root_path)
        except OSError as e:
            raise ConfigurationError(
                f"Cannot read root directory {self._root_path}: {e}"
            ) from e

        yield from self._walk(entries, "", self._layers_for(""), counter)

    def _layers_for(self, rel_dir: str) -> tuple[GitignoreLayer, ...]:
        if not self._ruleset.respect_gitignore:
            return ()
        return self._layer_cache.layers_for(rel_dir)

    @staticmethod
    def _list_directory(directory: Path) -> list[Path]:
        return sorted(directory.iterdir(), key=lambda p: p.name)

    def _read_directory(self, directory: Path) -> list[tuple[Path, bool, bool]]:
        """
        List a directory and classify its children.

        A directory that can be listed but not entered fails on the first
        child lookup, so listing and lookups succeed or fail together.

        Returns:
            Sorted (path, is_dir, is_symlink) tuples, special files removed

        Raises:
            OSError: If the directory cannot be listed or a child cannot be stat'ed
        """
        entries = []
        for entry in self._list_directory(directory):
            is_symlink = entry.is_symlink()
            is_dir = not is_symlink and entry.is_dir()
            if not (is_dir or is_symlink or entry.is_file()):
                logger.debug(f"Skipping special file: {entry}")
                continue
            entries.append((entry, is_dir, is_symlink))
        return entries

    def _walk(
        self,
        entries: list[tuple[Path, bool, bool]],
        rel_dir: str,
        layers: tuple[GitignoreLayer, ...],
        counter: Iterator[int],
    ) -> Iterator[FileTask]:
        """
        Visit one directory's sorted entries, descending into allowed subdirectories.

        Args:
            entries: Classified children of the directory, already sorted
            rel_dir: Directory relative to the root ("" for the root)
            layers: Gitignore layers of this directory and its ancestors
            counter: Shared source of enumeration indices
        """
        for entry, is_dir, is_symlink in entries:
            rel_path = f"{rel_dir}/{entry.name}" if rel_dir else entry.name
            candidate = PathCandidate(
                path=entry,
                rel_path=rel_path,
                is_dir=is_dir,
                is_symlink=is_symlink,
            )
            if not self._matcher.evaluate(candidate, layers).allowed:
                self._ignored_count += 1
                continue

            if not is_dir:
                yield FileTask(index=next(counter), candidate=candidate)
                continue

            try:
                children = self._read_directory(entry)
            except OSError as e:
                warning = DirectoryReadError(entry, e)
                logger.warning(str(warning))
                self._warnings.append(warning)
                continue

            yield from self._walk(
                children, rel_path, layers + self._layers_for(rel_path), counter
            )
