"""
Bundle Service for owo.

Coordinates the bundling workflow: ordered traversal with the ignore policy,
bounded concurrent reads, order-restoring aggregation and Markdown rendering.
"""

import asyncio
import logging
import time
from pathlib import Path
from typing import Callable, Optional

from owo.core.config import OwoConfig
from owo.core.errors import OutputWriteError
from owo.core.file_scanner import IgnoreRuleSet, LanguageRegistry, PathEnumerator
from owo.core.path_utils import ensure_directory_exists

from .aggregator import Aggregator
from .bundle_models import BundleResult
from .formatter import DocumentFormatter
from .reader import ConcurrentReader, ReadFunction

logger = logging.getLogger(__name__)


class BundleService:
    """
    Service for packaging a directory tree into one Markdown document.

    The enumeration runs to completion first so every file has its index
    before any read starts; reads then fan out under the concurrency bound
    and the Aggregator restores traversal order.
    """

    def __init__(
        self,
        config: Optional[OwoConfig] = None,
        language_registry: Optional[LanguageRegistry] = None,
        progress_callback: Optional[Callable[[int, int, str], None]] = None,
        read_fn: Optional[ReadFunction] = None,
    ):
        """
        Initialize the bundle service.

        Args:
            config: Configuration (default: OwoConfig())
            language_registry: Lookup for fence language tags
            progress_callback: Optional callback(current, total, message)
            read_fn: Replacement for the byte reader, mainly for tests

        Raises:
            ConfigurationError: If the configuration is invalid
        """
        self._config = config or OwoConfig()
        self._ruleset = self.build_ruleset(self._config)
        self._reader = ConcurrentReader(
            max_concurrency=self._config.read.resolved_concurrency(),
            read_timeout=self._config.read.read_timeout,
            max_file_bytes=self._config.read.max_file_bytes,
            read_fn=read_fn,
        )
        self._formatter = DocumentFormatter(
            language_registry=language_registry,
            heading_template=self._config.output.heading_template,
            binary_placeholder=self._config.output.binary_placeholder,
        )
        self._progress_callback = progress_callback

    @staticmethod
    def build_ruleset(config: OwoConfig) -> IgnoreRuleSet:
        """Compile the ignore rule set described by a configuration."""
        scan = config.scan
        return IgnoreRuleSet.build(
            ignore_pattern=scan.ignore_pattern,
            with_dotfiles=scan.with_dotfiles,
            use_default_ignore=scan.use_default_ignore,
            respect_gitignore=scan.respect_gitignore,
            ignore_filenames=tuple(scan.ignore_filenames),
        )

    @property
    def config(self) -> OwoConfig:
        return self._config

    @property
    def ruleset(self) -> IgnoreRuleSet:
        return self._ruleset

    def _report_progress(self, current: int, total: int, message: str) -> None:
        if self._progress_callback:
            self._progress_callback(current, total, message)

    async def bundle_directory(self, root_path: Path | str) -> BundleResult:
        """
        Build the document for a directory tree.

        Args:
            root_path: Directory to bundle

        Returns:
            BundleResult with the rendered bytes and run statistics

        Raises:
            ConfigurationError: If the root path is not a readable directory
        """
        start_time = time.monotonic()

        enumerator = PathEnumerator(root_path, self._ruleset)
        logger.info(f"Scanning {enumerator.root_path}")
        self._report_progress(0, 0, "Scanning files...")

        tasks = list(enumerator)
        total = len(tasks)
        logger.info(
            f"Found {total} files ({enumerator.ignored_count} entries ignored, "
            f"{len(enumerator.warnings)} directories skipped)"
        )
        self._report_progress(0, total, f"Reading {total} files")

        aggregator = Aggregator(total)
        async for file_result in self._reader.stream(tasks):
            aggregator.add(file_result)
            received = aggregator.received
            if received % 10 == 0 or received == total:
                self._report_progress(received, total, f"Read {received} files")

        document = aggregator.finalize()
        content = self._formatter.format(document)

        result = BundleResult(
            root_path=str(enumerator.root_path),
            content=content,
            document=document,
            failed_files=[r.rel_path for r in document.errors],
            skipped_directories=[str(w.path) for w in enumerator.warnings],
            ignored_entries=enumerator.ignored_count,
            duration_seconds=time.monotonic() - start_time,
        )
        logger.info(
            f"Bundled {result.total_files} files ({len(result.failed_files)} failed) "
            f"in {result.duration_seconds:.2f}s"
        )
        return result

    def run(self, root_path: Path | str) -> BundleResult:
        """Synchronous wrapper around bundle_directory()."""
        return asyncio.run(self.bundle_directory(root_path))


def write_output(output_path: Path | str, content: bytes) -> Path:
    """
    Write the rendered document in a single call.

    Args:
        output_path: Destination file; missing parent directories are created
        content: Rendered document

    Returns:
        The resolved destination path

    Raises:
        OutputWriteError: If the destination cannot be created or written
    """
    output_path = Path(output_path)
    try:
        output_path = output_path.resolve()
    except (OSError, RuntimeError) as e:
        raise OutputWriteError(output_path, e) from e

    if not ensure_directory_exists(output_path.parent):
        raise OutputWriteError(
            output_path, OSError(f"cannot create directory {output_path.parent}")
        )

    try:
        output_path.write_bytes(content)
    except OSError as e:
        raise OutputWriteError(output_path, e) from e

    logger.info(f"Wrote {len(content)} bytes to {output_path}")
    return output_path
