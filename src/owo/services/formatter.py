"""
Markdown rendering of an aggregated document.

Each file becomes a heading carrying its relative path followed by a fenced
block tagged with the language looked up from its extension. Files that could
not be read get an inline error annotation instead of a block.
"""

import re
from typing import Optional

from owo.core.errors import ConfigurationError
from owo.core.file_scanner import (
    UNKNOWN_LANGUAGE,
    FileResult,
    LanguageRegistry,
    get_default_registry,
)

from .aggregator import AggregatedDocument

DEFAULT_HEADING_TEMPLATE = "## File: `{path}`"

_BACKTICK_RUN = re.compile(rb"`+")


def fence_for(content: bytes) -> bytes:
    """
    Pick a backtick fence longer than any backtick run inside the content.

    The content can then never close the block early.
    """
    longest = max((len(m.group()) for m in _BACKTICK_RUN.finditer(content)), default=0)
    return b"`" * max(3, longest + 1)


class DocumentFormatter:
    """Renders an AggregatedDocument into the final byte sequence."""

    def __init__(
        self,
        language_registry: Optional[LanguageRegistry] = None,
        heading_template: str = DEFAULT_HEADING_TEMPLATE,
        binary_placeholder: bool = False,
    ):
        """
        Initialize the formatter.

        Args:
            language_registry: Lookup for fence language tags (default registry if None)
            heading_template: Heading format with a ``{path}`` placeholder
            binary_placeholder: Replace non-UTF-8 content with a size note

        Raises:
            ConfigurationError: If the heading template is unusable
        """
        try:
            heading_template.format(path="")
        except (KeyError, IndexError, ValueError) as e:
            raise ConfigurationError(
                f"Invalid heading template {heading_template!r}: {e}"
            ) from e

        self._registry = language_registry or get_default_registry()
        self._heading_template = heading_template
        self._binary_placeholder = binary_placeholder

    def language_tag(self, rel_path: str) -> str:
        """Return the fence tag for a path, or "" when the language is unknown."""
        language = self._registry.detect_from_path(rel_path)
        return "" if language == UNKNOWN_LANGUAGE else language

    def format(self, document: AggregatedDocument) -> bytes:
        """Render every entry in document order, separated by blank lines."""
        return b"\n".join(self.render_entry(result) for result in document)

    def render_entry(self, result: FileResult) -> bytes:
        heading = self._heading_template.format(path=result.rel_path).encode("utf-8")

        if not result.ok:
            annotation = f"> **Error reading file:** {result.error}\n".encode("utf-8")
            return heading + b"\n" + annotation

        content = self._displayed_content(result.content or b"")
        if content and not content.endswith(b"\n"):
            content += b"\n"

        fence = fence_for(content)
        tag = self.language_tag(result.rel_path).encode("utf-8")
        return heading + b"\n" + fence + tag + b"\n" + content + fence + b"\n"

    def _displayed_content(self, content: bytes) -> bytes:
        if not self._binary_placeholder:
            return content
        try:
            content.decode("utf-8")
        except UnicodeDecodeError:
            return f"[Binary file: {len(content)} bytes]".encode("utf-8")
        return content
