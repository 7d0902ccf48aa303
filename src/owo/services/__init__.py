"""
Services layer for owo.

Wires the scanner, the concurrent reader, the aggregator and the formatter
into the bundling pipeline.
"""

from owo.services.aggregator import AggregatedDocument, Aggregator, aggregate
from owo.services.bundle_models import BundleResult
from owo.services.bundle_service import BundleService, write_output
from owo.services.formatter import DEFAULT_HEADING_TEMPLATE, DocumentFormatter, fence_for
from owo.services.reader import ConcurrentReader, read_file_bytes

__all__ = [
    "AggregatedDocument",
    "Aggregator",
    "aggregate",
    "BundleResult",
    "BundleService",
    "write_output",
    "DocumentFormatter",
    "DEFAULT_HEADING_TEMPLATE",
    "fence_for",
    "ConcurrentReader",
    "read_file_bytes",
]
