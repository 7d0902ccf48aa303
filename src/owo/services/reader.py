"""
Bounded concurrent file reader for owo.

Reads are dispatched to a dedicated thread pool from asyncio, and each read
holds one permit of an asyncio.Semaphore for its whole duration. At most
``max_concurrency`` reads are in flight at any instant, whatever the size of
the tree. Failures become per-file error results and never cancel siblings.
"""

import asyncio
import functools
import logging
from collections.abc import AsyncIterator, Callable, Iterable
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Optional

from owo.core.config import default_concurrency
from owo.core.errors import ConfigurationError, FileReadError
from owo.core.file_scanner import FileResult, FileTask

logger = logging.getLogger(__name__)

ReadFunction = Callable[[Path], bytes]


def read_file_bytes(path: Path, max_bytes: int = 0) -> bytes:
    """
    Read a file's raw bytes.

    Args:
        path: File to read; symlinks are read through to their target
        max_bytes: Size limit in bytes, 0 for none

    Raises:
        FileReadError: If the file exceeds ``max_bytes``
        OSError: If the file cannot be opened or read
    """
    if max_bytes > 0:
        size = path.stat().st_size
        if size > max_bytes:
            raise FileReadError(path, f"file too large ({size} bytes, limit {max_bytes})")

    with open(path, "rb") as fh:
        return fh.read()


def _describe_os_error(error: OSError) -> str:
    return error.strerror or str(error) or error.__class__.__name__


class ConcurrentReader:
    """
    Reads FileTasks with at most K reads in flight.

    Results are produced in completion order; callers that need traversal
    order must restore it by index (see Aggregator).
    """

    def __init__(
        self,
        max_concurrency: Optional[int] = None,
        read_timeout: Optional[float] = None,
        max_file_bytes: int = 0,
        read_fn: Optional[ReadFunction] = None,
    ):
        """
        Initialize the reader.

        Args:
            max_concurrency: Number of permits K (default: twice the CPU count)
            read_timeout: Per-file timeout in seconds, None to disable
            max_file_bytes: Files larger than this become error results (0 = no limit)
            read_fn: Replacement for the byte reader, mainly for tests

        Raises:
            ConfigurationError: If max_concurrency is below 1 or the timeout
                                is not positive
        """
        if max_concurrency is None:
            max_concurrency = default_concurrency()
        if max_concurrency < 1:
            raise ConfigurationError(
                f"max_concurrency must be at least 1, got {max_concurrency}"
            )
        if read_timeout is not None and read_timeout <= 0:
            raise ConfigurationError(f"read_timeout must be positive, got {read_timeout}")

        self._max_concurrency = max_concurrency
        self._read_timeout = read_timeout
        self._read_fn = read_fn or functools.partial(read_file_bytes, max_bytes=max_file_bytes)

    @property
    def max_concurrency(self) -> int:
        return self._max_concurrency

    async def stream(self, tasks: Iterable[FileTask]) -> AsyncIterator[FileResult]:
        """
        Read every task and yield results as they complete.

        Args:
            tasks: FileTasks to read

        Yields:
            Exactly one FileResult per task, in completion order
        """
        semaphore = asyncio.Semaphore(self._max_concurrency)
        executor = ThreadPoolExecutor(
            max_workers=self._max_concurrency, thread_name_prefix="owo-reader"
        )
        pending = [
            asyncio.ensure_future(self._read_one(task, semaphore, executor))
            for task in tasks
        ]
        try:
            for future in asyncio.as_completed(pending):
                yield await future
        finally:
            for future in pending:
                future.cancel()
            executor.shutdown(wait=False, cancel_futures=True)

    async def read_all(self, tasks: Iterable[FileTask]) -> list[FileResult]:
        """Read every task and return the results in completion order."""
        return [result async for result in self.stream(tasks)]

    async def _read_one(
        self,
        task: FileTask,
        semaphore: asyncio.Semaphore,
        executor: ThreadPoolExecutor,
    ) -> FileResult:
        loop = asyncio.get_running_loop()
        path = task.candidate.path

        async with semaphore:
            started = asyncio.Event()

            def read() -> bytes:
                loop.call_soon_threadsafe(started.set)
                return self._read_fn(path)

            try:
                future = loop.run_in_executor(executor, read)
                if self._read_timeout is None:
                    content = await future
                else:
                    # Timed from the moment a worker thread picks the read up;
                    # a thread may still be stuck in an earlier timed-out read.
                    await started.wait()
                    content = await asyncio.wait_for(future, self._read_timeout)
            except asyncio.TimeoutError:
                error = f"read timed out after {self._read_timeout}s"
            except FileReadError as e:
                error = e.reason
            except OSError as e:
                error = _describe_os_error(e)
            else:
                return FileResult(index=task.index, rel_path=task.rel_path, content=content)

        logger.warning(f"Failed to read {task.rel_path}: {error}")
        return FileResult(index=task.index, rel_path=task.rel_path, error=error)
