"""
Map Task Executor
Counts word occurrences inside one chunk of the shared token buffer
and reports a partial tally
"""

import time
import logging
from collections import Counter
from dataclasses import dataclass, field
from typing import Sequence

from mapred_wordcount.coordinator.job_manager import Chunk

logger = logging.getLogger(__name__)


@dataclass
class MapResult:
    """Partial tally emitted by exactly one map task"""
    task_id: int
    counts: Counter = field(default_factory=Counter)
    num_tokens: int = 0
    execution_time_ms: float = 0.0
    success: bool = True
    error_message: str = ''


def count_chunk(tokens: Sequence[str], chunk: Chunk) -> Counter:
    """
    Count words strictly inside [chunk.start, chunk.end)

    Example:
        >>> count_chunk(["a", "b", "a", "c"], Chunk(task_id=0, start=0, length=3))
        Counter({'a': 2, 'b': 1})
    """
    return Counter(tokens[chunk.start:chunk.end])


def count_tokens(task_id: int, tokens: Sequence[str]) -> MapResult:
    """
    Count an already-sliced chunk. Used by the process backend, where
    only the chunk's own tokens are shipped to the worker process.
    """
    start_time = time.perf_counter()
    counts = Counter(tokens)
    return MapResult(
        task_id=task_id,
        counts=counts,
        num_tokens=len(tokens),
        execution_time_ms=(time.perf_counter() - start_time) * 1000
    )


class MapExecutor:
    """Executes a single map task over a shared, read-only token buffer"""

    def __init__(self, tokens: Sequence[str], chunk: Chunk, job_id: str):
        """
        Initialize the map executor

        Args:
            tokens: Shared token buffer (never mutated)
            chunk: Range of the buffer this task is responsible for
            job_id: Unique job identifier
        """
        self.tokens = tokens
        self.chunk = chunk
        self.job_id = job_id

    def execute(self) -> MapResult:
        """
        Execute the map task

        Always returns exactly one MapResult; a failure is reported on the
        result so the reducer can account for it.
        """
        start_time = time.perf_counter()
        task_id = self.chunk.task_id

        try:
            counts = count_chunk(self.tokens, self.chunk)
            execution_time = (time.perf_counter() - start_time) * 1000
            logger.debug(
                f"Job {self.job_id}: map task {task_id} counted {self.chunk.length} tokens "
                f"[{self.chunk.start}, {self.chunk.end}) in {execution_time:.2f}ms"
            )
            return MapResult(
                task_id=task_id,
                counts=counts,
                num_tokens=self.chunk.length,
                execution_time_ms=execution_time
            )

        except Exception as e:
            execution_time = (time.perf_counter() - start_time) * 1000
            logger.error(f"Job {self.job_id}: map task {task_id} failed: {e}")
            return MapResult(
                task_id=task_id,
                execution_time_ms=execution_time,
                success=False,
                error_message=f"Map task {task_id} failed: {e}"
            )
