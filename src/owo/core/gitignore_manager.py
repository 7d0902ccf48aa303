"""
Gitignore rule layers for owo.

Each directory that holds a rule file (``.gitignore`` by default) contributes
one immutable layer. Layers are stacked root-to-leaf as the enumerator
descends, and a candidate is matched against every layer in that order:
- Patterns are scoped to the directory containing their rule file
- Later patterns override earlier ones (last match wins)
- Negation patterns (!) re-admit a path denied earlier in the same or a
  shallower layer
- Directory-only patterns (trailing /) match only directories
- Anchored patterns (leading /) match only relative to their own directory
- Double-star globs (**) follow gitwildmatch semantics
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path

import pathspec

logger = logging.getLogger(__name__)

DEFAULT_IGNORE_FILENAMES: tuple[str, ...] = (".gitignore",)


@dataclass(frozen=True)
class GitignorePattern:
    """
    A parsed gitignore pattern with metadata.

    Attributes:
        raw: Original pattern string (e.g., "!/important.py")
        pattern: Normalized pattern without markers (e.g., "important.py")
        negation: True if pattern starts with ! (re-includes paths)
        directory_only: True if pattern ends with / (matches only directories)
        anchored: True if pattern starts with / (layer-relative only)
        source_path: Path to the rule file containing this pattern
        line_number: 1-based line in the rule file
    """

    raw: str
    pattern: str
    negation: bool
    directory_only: bool
    anchored: bool
    source_path: Path
    line_number: int = 0
    _compiled: pathspec.patterns.GitWildMatchPattern | None = field(
        default=None, repr=False, compare=False
    )

    @classmethod
    def parse(
        cls, raw_line: str, source_path: Path, line_number: int = 0
    ) -> "GitignorePattern":
        """
        Parse a raw gitignore line into a GitignorePattern.

        Args:
            raw_line: Raw line from the rule file (already stripped)
            source_path: Path to the rule file
            line_number: 1-based line number, used in diagnostics

        Returns:
            Parsed GitignorePattern instance

        Raises:
            ValueError: If pathspec rejects the pattern
        """
        pattern = raw_line
        negation = False
        directory_only = False
        anchored = False

        if pattern.startswith("!"):
            negation = True
            pattern = pattern[1:]

        if pattern.endswith("/"):
            directory_only = True
            pattern = pattern[:-1]

        if pattern.startswith("/"):
            anchored = True
            pattern = pattern[1:]

        compiled = pathspec.patterns.GitWildMatchPattern(raw_line)

        return cls(
            raw=raw_line,
            pattern=pattern,
            negation=negation,
            directory_only=directory_only,
            anchored=anchored,
            source_path=source_path,
            line_number=line_number,
            _compiled=compiled,
        )

    def matches(self, scoped_path: str, is_dir: bool) -> bool:
        """
        Check whether this pattern matches a path relative to its layer.

        Directories are matched with a trailing slash so that
        directory-only patterns apply to them and not to files.
        """
        if self._compiled is None or self._compiled.include is None:
            return False
        if self.directory_only and not is_dir:
            return False
        candidate = f"{scoped_path}/" if is_dir else scoped_path
        return self._compiled.regex.match(candidate) is not None


@dataclass(frozen=True)
class GitignoreLayer:
    """
    All patterns from one rule file, scoped to the directory holding it.

    Attributes:
        base: Directory of the rule file, relative to the scan root
              (POSIX form, "" for the root itself)
        source_path: Absolute path to the rule file
        patterns: Patterns in file order
    """

    base: str
    source_path: Path
    patterns: tuple[GitignorePattern, ...]

    @property
    def depth(self) -> int:
        """Return the depth of this layer below the scan root (0 = root)."""
        return 0 if not self.base else self.base.count("/") + 1

    def scope(self, rel_path: str) -> str | None:
        """
        Make a root-relative path relative to this layer's directory.

        Returns:
            The scoped path, or None if the path lies outside this layer
        """
        if not self.base:
            return rel_path
        prefix = self.base + "/"
        if rel_path.startswith(prefix):
            return rel_path[len(prefix):]
        return None

    def last_match(self, rel_path: str, is_dir: bool) -> GitignorePattern | None:
        """
        Return the last pattern in this layer matching the path, if any.

        Args:
            rel_path: Path relative to the scan root (POSIX form)
            is_dir: True if the path is a directory
        """
        scoped = self.scope(rel_path)
        if not scoped:
            return None
        for pattern in reversed(self.patterns):
            if pattern.matches(scoped, is_dir):
                return pattern
        return None


def load_layer(rule_file: Path, base: str) -> GitignoreLayer | None:
    """
    Load patterns from a rule file into a GitignoreLayer.

    Args:
        rule_file: Path to the rule file
        base: Directory of the rule file relative to the scan root

    Returns:
        The loaded layer, or None if the file is missing, unreadable or empty

    Raises:
        No exceptions - errors are logged and the function returns None
    """
    try:
        content = rule_file.read_text(encoding="utf-8")
    except FileNotFoundError:
        return None
    except UnicodeDecodeError as e:
        logger.warning(f"Invalid UTF-8 encoding in {rule_file}: {e}")
        return None
    except PermissionError as e:
        logger.warning(f"Permission denied reading {rule_file}: {e}")
        return None
    except OSError as e:
        logger.warning(f"Error reading {rule_file}: {e}")
        return None

    patterns: list[GitignorePattern] = []
    for line_number, line in enumerate(content.splitlines(), start=1):
        line = line.strip()

        if not line or line.startswith("#"):
            continue

        try:
            patterns.append(GitignorePattern.parse(line, rule_file, line_number))
        except ValueError as e:
            logger.warning(f"Malformed pattern '{line}' in {rule_file}:{line_number}: {e}")
            continue

    if not patterns:
        return None

    logger.debug(f"Loaded {len(patterns)} patterns from {rule_file}")
    return GitignoreLayer(base=base, source_path=rule_file, patterns=tuple(patterns))


class GitignoreLayerCache:
    """
    Memoises the rule layers found in each directory of one scan root.

    A directory is read at most once per cache, so restarting a traversal
    does not touch rule files again.
    """

    def __init__(
        self,
        root_path: Path,
        filenames: tuple[str, ...] = DEFAULT_IGNORE_FILENAMES,
    ):
        """
        Initialize the cache.

        Args:
            root_path: Root directory of the scan
            filenames: Rule file names to load in each directory, lowest
                       precedence first
        """
        self._root_path = Path(root_path)
        self._filenames = tuple(filenames)
        self._layers: dict[str, tuple[GitignoreLayer, ...]] = {}

    @property
    def filenames(self) -> tuple[str, ...]:
        return self._filenames

    def layers_for(self, rel_dir: str) -> tuple[GitignoreLayer, ...]:
        """
        Return the layers defined directly in a directory.

        Args:
            rel_dir: Directory relative to the scan root ("" for the root)
        """
        cached = self._layers.get(rel_dir)
        if cached is not None:
            return cached

        directory = self._root_path / rel_dir if rel_dir else self._root_path
        loaded = []
        for name in self._filenames:
            layer = load_layer(directory / name, rel_dir)
            if layer is not None:
                loaded.append(layer)

        layers = tuple(loaded)
        self._layers[rel_dir] = layers
        return layers

    def __len__(self) -> int:
        return sum(len(layers) for layers in self._layers.values())
