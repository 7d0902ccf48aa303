"""
Unit tests for PathEnumerator.

Tests traversal order, index assignment, pruning, symlink handling and
the failure policy for unreadable directories.
"""

import os
from pathlib import Path

import pytest

from owo.core.errors import ConfigurationError
from owo.core.file_scanner import IgnoreRuleSet, PathEnumerator


def _make_tree(root: Path, files: dict[str, str]) -> None:
    for rel_path, content in files.items():
        file_path = root / rel_path
        file_path.parent.mkdir(parents=True, exist_ok=True)
        file_path.write_text(content, encoding="utf-8")


def _rel_paths(enumerator: PathEnumerator) -> list[str]:
    return [task.rel_path for task in enumerator]


class TestOrdering:
    """Test deterministic traversal order and indices."""

    def test_children_visited_in_lexicographic_order(self, tmp_path):
        _make_tree(
            tmp_path,
            {
                "b.py": "",
                "a.txt": "",
                "src/z.py": "",
                "src/m/inner.py": "",
                "src/a.py": "",
                "C.md": "",
            },
        )

        paths = _rel_paths(PathEnumerator(tmp_path))

        assert paths == ["C.md", "a.txt", "b.py", "src/a.py", "src/m/inner.py", "src/z.py"]

    def test_order_is_by_path_component(self, tmp_path):
        _make_tree(tmp_path, {"a/x.txt": "", "a-b.txt": ""})

        assert _rel_paths(PathEnumerator(tmp_path)) == ["a/x.txt", "a-b.txt"]

    def test_indices_are_unique_and_increasing(self, tmp_path):
        _make_tree(tmp_path, {f"d{i}/f{j}.txt": "" for i in range(3) for j in range(3)})

        indices = [task.index for task in PathEnumerator(tmp_path)]

        assert indices == list(range(9))

    def test_traversal_is_restartable(self, tmp_path):
        _make_tree(tmp_path, {"a.txt": "", "sub/b.txt": ""})
        enumerator = PathEnumerator(tmp_path)

        first = [(t.index, t.rel_path) for t in enumerator]
        second = [(t.index, t.rel_path) for t in enumerator]

        assert first == second == [(0, "a.txt"), (1, "sub/b.txt")]

    def test_directories_are_not_emitted(self, tmp_path):
        (tmp_path / "empty").mkdir()
        _make_tree(tmp_path, {"full/a.txt": ""})

        tasks = list(PathEnumerator(tmp_path))

        assert [t.rel_path for t in tasks] == ["full/a.txt"]
        assert not any(t.candidate.is_dir for t in tasks)


class TestPruning:
    """Test that denied directories are never entered."""

    def test_regex_denied_directory_is_pruned(self, tmp_path):
        _make_tree(tmp_path, {"node_modules/index.js": "y", "node_modules/sub/x.js": "", "a.js": ""})
        ruleset = IgnoreRuleSet.build("node_modules")

        assert _rel_paths(PathEnumerator(tmp_path, ruleset)) == ["a.js"]

    def test_partial_user_pattern_denies_files(self, tmp_path):
        _make_tree(tmp_path, {"app.log": "", "logs/old.log": "", "main.py": ""})
        ruleset = IgnoreRuleSet.build(r"\.log")

        assert _rel_paths(PathEnumerator(tmp_path, ruleset)) == ["main.py"]

    def test_pruned_directory_is_not_listed(self, tmp_path, monkeypatch):
        _make_tree(tmp_path, {"build/out.o": "", "src/main.c": ""})
        listed: list[str] = []
        original = PathEnumerator._list_directory

        def tracking_list(directory: Path) -> list[Path]:
            listed.append(directory.name)
            return original(directory)

        monkeypatch.setattr(PathEnumerator, "_list_directory", staticmethod(tracking_list))

        assert _rel_paths(PathEnumerator(tmp_path)) == ["src/main.c"]
        assert "build" not in listed

    def test_top_level_prune_wins_over_nested_negation(self, tmp_path):
        _make_tree(
            tmp_path,
            {
                ".gitignore": "generated/\n",
                "generated/.gitignore": "!keep.txt\n",
                "generated/keep.txt": "",
                "main.py": "",
            },
        )

        assert _rel_paths(PathEnumerator(tmp_path)) == ["main.py"]

    def test_nested_gitignore_applies_to_its_subtree_only(self, tmp_path):
        _make_tree(
            tmp_path,
            {
                "pkg/.gitignore": "*.txt\n",
                "pkg/a.txt": "",
                "pkg/a.py": "",
                "top.txt": "",
            },
        )

        assert _rel_paths(PathEnumerator(tmp_path)) == ["pkg/a.py", "top.txt"]

    def test_gitignore_disabled(self, tmp_path):
        _make_tree(tmp_path, {".gitignore": "*.txt\n", "a.txt": ""})
        ruleset = IgnoreRuleSet.build(respect_gitignore=False)

        assert _rel_paths(PathEnumerator(tmp_path, ruleset)) == ["a.txt"]

    def test_dotfiles_toggle(self, tmp_path):
        _make_tree(tmp_path, {".env": "SECRET=1", ".editorconfig": "", "notes.txt": ""})

        without = _rel_paths(PathEnumerator(tmp_path, IgnoreRuleSet.build()))
        with_dotfiles = _rel_paths(
            PathEnumerator(tmp_path, IgnoreRuleSet.build(with_dotfiles=True))
        )

        assert without == ["notes.txt"]
        # .env stays excluded by the default alternation
        assert with_dotfiles == [".editorconfig", "notes.txt"]

    def test_ignored_count(self, tmp_path):
        _make_tree(tmp_path, {".hidden": "", "dist/a.js": "", "a.txt": ""})
        enumerator = PathEnumerator(tmp_path)

        list(enumerator)

        assert enumerator.ignored_count == 2


@pytest.mark.skipif(not hasattr(os, "symlink"), reason="symlinks not supported")
class TestSymlinks:
    """Test that symlinks are leaves and never followed."""

    def test_directory_symlink_is_not_followed(self, tmp_path):
        _make_tree(tmp_path, {"real/a.txt": ""})
        (tmp_path / "link").symlink_to(tmp_path / "real", target_is_directory=True)

        tasks = list(PathEnumerator(tmp_path))

        assert [t.rel_path for t in tasks] == ["link", "real/a.txt"]
        assert tasks[0].candidate.is_symlink
        assert not tasks[0].candidate.is_dir

    def test_symlink_cycle_terminates(self, tmp_path):
        (tmp_path / "loop").mkdir()
        (tmp_path / "loop" / "back").symlink_to(tmp_path, target_is_directory=True)

        assert _rel_paths(PathEnumerator(tmp_path)) == ["loop/back"]

    def test_symlink_subject_to_ignore_rules(self, tmp_path):
        _make_tree(tmp_path, {"a.txt": ""})
        (tmp_path / ".alias").symlink_to(tmp_path / "a.txt")

        assert _rel_paths(PathEnumerator(tmp_path)) == ["a.txt"]


class TestFailurePolicy:
    """Test fatal and recoverable traversal errors."""

    def test_missing_root_is_configuration_error(self, tmp_path):
        with pytest.raises(ConfigurationError, match="does not exist"):
            PathEnumerator(tmp_path / "missing")

    def test_file_root_is_configuration_error(self, tmp_path):
        (tmp_path / "file.txt").write_text("", encoding="utf-8")

        with pytest.raises(ConfigurationError, match="not a directory"):
            PathEnumerator(tmp_path / "file.txt")

    def test_unreadable_subdirectory_is_skipped_with_warning(self, tmp_path, monkeypatch, caplog):
        _make_tree(tmp_path, {"locked/secret.txt": "", "open/a.txt": "", "z.txt": ""})
        original = PathEnumerator._list_directory

        def failing_list(directory: Path) -> list[Path]:
            if directory.name == "locked":
                raise PermissionError(13, "Permission denied", str(directory))
            return original(directory)

        monkeypatch.setattr(PathEnumerator, "_list_directory", staticmethod(failing_list))
        enumerator = PathEnumerator(tmp_path)

        paths = _rel_paths(enumerator)

        assert paths == ["open/a.txt", "z.txt"]
        assert [w.path.name for w in enumerator.warnings] == ["locked"]
        assert any("Cannot read directory" in r.message for r in caplog.records)

    def test_listable_but_unenterable_subdirectory_is_skipped(self, tmp_path, monkeypatch):
        _make_tree(tmp_path, {"a.txt": "", "locked/inner.txt": "", "z.txt": ""})
        original = Path.is_symlink

        def failing_is_symlink(self: Path) -> bool:
            if self.parent.name == "locked":
                raise PermissionError(13, "Permission denied", str(self))
            return original(self)

        monkeypatch.setattr(Path, "is_symlink", failing_is_symlink)
        enumerator = PathEnumerator(tmp_path)

        paths = _rel_paths(enumerator)

        assert paths == ["a.txt", "z.txt"]
        assert [w.path.name for w in enumerator.warnings] == ["locked"]
        assert isinstance(enumerator.warnings[0].cause, PermissionError)

    def test_unlistable_root_is_configuration_error(self, tmp_path, monkeypatch):
        def failing_list(directory: Path) -> list[Path]:
            raise PermissionError(13, "Permission denied", str(directory))

        monkeypatch.setattr(PathEnumerator, "_list_directory", staticmethod(failing_list))

        with pytest.raises(ConfigurationError, match="Cannot read root directory"):
            list(PathEnumerator(tmp_path))
