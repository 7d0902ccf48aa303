"""
Unit tests for LanguageRegistry.
"""

from pathlib import Path

import pytest

from owo.core.file_scanner import UNKNOWN_LANGUAGE, LanguageRegistry, get_default_registry


class TestDefaults:
    """Test the bundled language table."""

    @pytest.mark.parametrize(
        "extension,language",
        [(".py", "python"), (".PY", "python"), (".go", "go"), (".yml", "yaml"), (".h", "c")],
    )
    def test_detect_extension(self, extension, language):
        assert get_default_registry().detect(extension) == language

    def test_unknown_extension(self):
        assert get_default_registry().detect(".nope") == UNKNOWN_LANGUAGE

    def test_file_name_wins_over_extension(self):
        registry = get_default_registry()

        assert registry.detect_from_path(Path("CMakeLists.txt")) == "cmake"
        assert registry.detect_from_path(Path("notes.txt")) == UNKNOWN_LANGUAGE

    def test_file_names_are_case_sensitive(self):
        assert get_default_registry().detect_from_path("makefile") == UNKNOWN_LANGUAGE

    def test_file_names_do_not_match_as_extensions(self):
        registry = get_default_registry()

        assert registry.detect("Dockerfile") == UNKNOWN_LANGUAGE
        assert registry.detect_from_path("app.Dockerfile") == "dockerfile"


class TestRegistration:
    """Test runtime registration."""

    def test_empty_registry(self):
        registry = LanguageRegistry(load_defaults=False)

        assert registry.detect(".py") == UNKNOWN_LANGUAGE

    def test_register_and_unregister(self):
        registry = LanguageRegistry(load_defaults=False)
        registry.register("nix", [".nix", "flake.lock"])

        assert registry.detect(".NIX") == "nix"
        assert registry.detect_from_path("flake.lock") == "nix"

        registry.unregister("nix")

        assert registry.detect(".nix") == UNKNOWN_LANGUAGE
        assert registry.detect_from_path("flake.lock") == UNKNOWN_LANGUAGE

    def test_unregister_unknown_language_is_noop(self):
        registry = LanguageRegistry(load_defaults=False)

        assert registry.unregister("cobol") is registry


class TestFromYaml:
    """Test loading a custom language table."""

    def test_from_yaml(self, tmp_path):
        config = tmp_path / "languages.yaml"
        config.write_text("gleam:\n  - .gleam\nbroken: .x\n", encoding="utf-8")

        registry = LanguageRegistry.from_yaml(config)

        assert registry.detect(".gleam") == "gleam"
        assert registry.detect(".x") == UNKNOWN_LANGUAGE
        assert registry.detect(".py") == UNKNOWN_LANGUAGE

    def test_from_yaml_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            LanguageRegistry.from_yaml(tmp_path / "missing.yaml")

    def test_from_yaml_invalid_yaml(self, tmp_path):
        config = tmp_path / "languages.yaml"
        config.write_text("a: [unclosed\n", encoding="utf-8")

        with pytest.raises(ValueError, match="Invalid YAML"):
            LanguageRegistry.from_yaml(config)

    def test_from_yaml_wrong_top_level(self, tmp_path):
        config = tmp_path / "languages.yaml"
        config.write_text("- .py\n", encoding="utf-8")

        with pytest.raises(ValueError, match="expected dict"):
            LanguageRegistry.from_yaml(config)
