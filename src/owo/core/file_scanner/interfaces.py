"""
Abstract interfaces for path enumeration.
"""

from abc import ABC, abstractmethod
from collections.abc import Iterator
from pathlib import Path

from owo.core.errors import DirectoryReadError

from .models import FileTask


class PathEnumeratorInterface(ABC):
    """
    Abstract interface for ordered directory traversal.

    Implementations yield accepted files in a reproducible order and number
    them as they are accepted.
    """

    @property
    @abstractmethod
    def root_path(self) -> Path:
        """Absolute root of the traversal."""

    @abstractmethod
    def __iter__(self) -> Iterator[FileTask]:
        """
        Start a fresh traversal and yield FileTask objects.

        Yields:
            FileTask objects with indices 0, 1, 2, ... in traversal order

        Notes:
            - Denied directories are pruned without being listed
            - Unreadable subdirectories are skipped and recorded in ``warnings``
        """

    @property
    @abstractmethod
    def warnings(self) -> list[DirectoryReadError]:
        """Directories skipped during the most recent traversal."""
