"""
Reduce Loop
Merges partial tallies into the final tally from a single thread and
signals the completion barrier once per merge
"""

import queue
import logging
import threading
from collections import Counter
from typing import List, Optional

from mapred_wordcount.coordinator.barrier import WaitGroup
from mapred_wordcount.worker.map_executor import MapResult

logger = logging.getLogger(__name__)

_STOP = object()


def merge_counts(final_counts: Counter, partial_counts) -> Counter:
    """Add every word count from a partial tally into the final tally."""
    for word, count in partial_counts.items():
        final_counts[word] += count
    return final_counts


class ReduceLoop:
    """
    Single writer of the final tally

    Map tasks put their MapResult on ``results``; this loop is the only
    code that mutates ``final_counts``.
    """

    def __init__(self, wait_group: WaitGroup, job_id: str):
        self.wait_group = wait_group
        self.job_id = job_id
        self.results: "queue.Queue" = queue.Queue()
        self.final_counts: Counter = Counter()
        self.merged_tasks = 0
        self.errors: List[str] = []
        self._thread: Optional[threading.Thread] = None

    def submit(self, result: MapResult):
        """Called by map tasks to hand off their partial tally."""
        self.results.put(result)

    def start(self):
        self._thread = threading.Thread(
            target=self._run, name=f"reducer-{self.job_id}", daemon=True
        )
        self._thread.start()

    def stop(self, timeout: Optional[float] = None):
        """Ask the loop to exit once every queued result has been merged."""
        self.results.put(_STOP)
        if self._thread is not None:
            self._thread.join(timeout)

    def _run(self):
        while True:
            result = self.results.get()
            if result is _STOP:
                logger.debug(f"Job {self.job_id}: reducer stopping after {self.merged_tasks} merges")
                return
            try:
                self._merge(result)
            finally:
                self.wait_group.done()

    def _merge(self, result: MapResult):
        if not result.success:
            logger.warning(f"Job {self.job_id}: {result.error_message}")
            self.errors.append(result.error_message)
        else:
            merge_counts(self.final_counts, result.counts)
        self.merged_tasks += 1
        logger.debug(
            f"Job {self.job_id}: merged task {result.task_id} "
            f"({len(result.counts)} distinct words)"
        )
