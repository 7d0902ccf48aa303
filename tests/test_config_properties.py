"""
Property-based tests for OwoConfig round-trip serialization.

**Feature: owo-bundler, Property 5: Configuration Round-Trip**
"""

import tempfile
from pathlib import Path

from hypothesis import given, settings
from hypothesis import strategies as st

from owo.core.config import LoggingConfig, OutputConfig, OwoConfig, ReadConfig, ScanConfig

# Strategies for generating valid configuration values
safe_text = st.text(
    alphabet=st.characters(
        whitelist_categories=("L", "N", "P", "S"),
        blacklist_characters="\x00\n\r\t",
    ),
    min_size=1,
    max_size=50,
).filter(lambda s: s.strip() != "")

ignore_pattern = st.from_regex(r"[a-z0-9_]+(\|[a-z0-9_\.\*]+)*", fullmatch=True)

ignore_filename = st.from_regex(r"\.[a-z]{1,10}ignore", fullmatch=True)

log_level = st.sampled_from(["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"])


@st.composite
def scan_config_strategy(draw):
    """Generate valid ScanConfig instances."""
    return ScanConfig(
        ignore_pattern=draw(st.none() | ignore_pattern),
        use_default_ignore=draw(st.booleans()),
        with_dotfiles=draw(st.booleans()),
        respect_gitignore=draw(st.booleans()),
        ignore_filenames=draw(st.lists(ignore_filename, min_size=0, max_size=3, unique=True)),
    )


@st.composite
def read_config_strategy(draw):
    """Generate valid ReadConfig instances."""
    return ReadConfig(
        max_concurrency=draw(st.none() | st.integers(min_value=1, max_value=256)),
        read_timeout=draw(
            st.none()
            | st.floats(min_value=0.1, max_value=300.0, allow_nan=False, allow_infinity=False)
        ),
        max_file_bytes=draw(st.integers(min_value=0, max_value=2**31)),
    )


@st.composite
def output_config_strategy(draw):
    """Generate valid OutputConfig instances."""
    return OutputConfig(
        binary_placeholder=draw(st.booleans()),
        heading_template=draw(safe_text),
    )


@st.composite
def logging_config_strategy(draw):
    """Generate valid LoggingConfig instances."""
    return LoggingConfig(
        level=draw(log_level),
        format=draw(safe_text),
    )


@st.composite
def owo_config_strategy(draw):
    """Generate valid OwoConfig instances."""
    return OwoConfig(
        scan=draw(scan_config_strategy()),
        read=draw(read_config_strategy()),
        output=draw(output_config_strategy()),
        logging=draw(logging_config_strategy()),
    )


@given(config=owo_config_strategy())
@settings(max_examples=100)
def test_config_yaml_round_trip(config: OwoConfig):
    """
    **Feature: owo-bundler, Property 5: Configuration Round-Trip**

    For any valid OwoConfig object, serializing to YAML and deserializing
    should produce an equivalent configuration object.
    """
    with tempfile.TemporaryDirectory() as tmpdir:
        yaml_path = Path(tmpdir) / "config.yaml"

        config.save(yaml_path)
        loaded_config = OwoConfig.from_file(yaml_path)

        assert config.to_dict() == loaded_config.to_dict()


@given(config=owo_config_strategy())
@settings(max_examples=100)
def test_config_json_round_trip(config: OwoConfig):
    """
    **Feature: owo-bundler, Property 5: Configuration Round-Trip**

    For any valid OwoConfig object, serializing to JSON and deserializing
    should produce an equivalent configuration object.
    """
    with tempfile.TemporaryDirectory() as tmpdir:
        json_path = Path(tmpdir) / "config.json"

        config.save(json_path)
        loaded_config = OwoConfig.from_file(json_path)

        assert config.to_dict() == loaded_config.to_dict()


@given(config=owo_config_strategy())
@settings(max_examples=50)
def test_config_yaml_string_round_trip(config: OwoConfig):
    """
    **Feature: owo-bundler, Property 5: Configuration Round-Trip**

    For any valid OwoConfig object, the YAML string written by to_yaml()
    loads back into an equivalent configuration object.
    """
    yaml_str = config.to_yaml()

    with tempfile.TemporaryDirectory() as tmpdir:
        yaml_path = Path(tmpdir) / "config.yml"
        yaml_path.write_text(yaml_str, encoding="utf-8")
        loaded_config = OwoConfig.from_file(yaml_path)

        assert config.to_dict() == loaded_config.to_dict()
