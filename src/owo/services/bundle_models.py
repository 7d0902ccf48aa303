"""
Bundle service data models.
"""

from dataclasses import dataclass, field

from .aggregator import AggregatedDocument


@dataclass
class BundleResult:
    """Result of bundling one directory tree."""

    root_path: str
    content: bytes = b""
    document: AggregatedDocument = field(default_factory=AggregatedDocument)
    failed_files: list[str] = field(default_factory=list)
    skipped_directories: list[str] = field(default_factory=list)
    ignored_entries: int = 0
    duration_seconds: float = 0.0

    @property
    def total_files(self) -> int:
        return len(self.document)

    @property
    def total_bytes(self) -> int:
        return self.document.total_bytes
