"""
Order-restoring aggregation of file results.
"""

from collections.abc import AsyncIterable, Iterable, Iterator
from dataclasses import dataclass
from typing import Optional

from owo.core.errors import AggregationError
from owo.core.file_scanner import FileResult


@dataclass(frozen=True)
class AggregatedDocument:
    """
    File results in strict index order, with no gaps and no duplicates.

    Attributes:
        results: One FileResult per enumerated file, results[i].index == i
    """

    results: tuple[FileResult, ...] = ()

    def __iter__(self) -> Iterator[FileResult]:
        return iter(self.results)

    def __len__(self) -> int:
        return len(self.results)

    @property
    def errors(self) -> list[FileResult]:
        return [r for r in self.results if not r.ok]

    @property
    def total_bytes(self) -> int:
        return sum(r.size_bytes for r in self.results)


class Aggregator:
    """
    Collects results that arrive in any order into an index-addressed slot array.

    Example:
        >>> aggregator = Aggregator(expected=2)
        >>> aggregator.add(FileResult(index=1, rel_path="b.py", content=b""))
        >>> aggregator.add(FileResult(index=0, rel_path="a.txt", content=b""))
        >>> [r.rel_path for r in aggregator.finalize()]
        ['a.txt', 'b.py']
    """

    def __init__(self, expected: int):
        if expected < 0:
            raise ValueError(f"expected must be non-negative, got {expected}")
        self._slots: list[Optional[FileResult]] = [None] * expected
        self._received = 0

    @property
    def expected(self) -> int:
        return len(self._slots)

    @property
    def received(self) -> int:
        return self._received

    @property
    def complete(self) -> bool:
        return self._received == len(self._slots)

    def add(self, result: FileResult) -> None:
        """
        Store one result in its slot.

        Raises:
            AggregationError: If the index is out of range or already filled
        """
        if not 0 <= result.index < len(self._slots):
            raise AggregationError(
                f"Result index {result.index} out of range for {len(self._slots)} tasks"
            )
        if self._slots[result.index] is not None:
            raise AggregationError(
                f"Duplicate result for index {result.index} ({result.rel_path})"
            )
        self._slots[result.index] = result
        self._received += 1

    def finalize(self) -> AggregatedDocument:
        """
        Return the results in index order.

        Raises:
            AggregationError: If any slot is still empty
        """
        missing = [i for i, slot in enumerate(self._slots) if slot is None]
        if missing:
            shown = ", ".join(str(i) for i in missing[:10])
            raise AggregationError(f"Missing results for {len(missing)} task(s): {shown}")
        return AggregatedDocument(results=tuple(self._slots))

    @classmethod
    def collect(cls, results: Iterable[FileResult], expected: int) -> AggregatedDocument:
        """Aggregate an already-materialised result sequence."""
        aggregator = cls(expected)
        for result in results:
            aggregator.add(result)
        return aggregator.finalize()


async def aggregate(results: AsyncIterable[FileResult], expected: int) -> AggregatedDocument:
    """Aggregate a completion-ordered result stream."""
    aggregator = Aggregator(expected)
    async for result in results:
        aggregator.add(result)
    return aggregator.finalize()
