"""
Dispatch Loop
Receives chunks from a queue and launches one map task per chunk
"""

import os
import queue
import logging
import threading
from concurrent.futures import Executor, Future, ProcessPoolExecutor, ThreadPoolExecutor
from typing import Callable, Optional, Sequence

from mapred_wordcount.coordinator.barrier import WaitGroup
from mapred_wordcount.coordinator.job_manager import Chunk
from mapred_wordcount.worker.map_executor import MapExecutor, MapResult, count_tokens

logger = logging.getLogger(__name__)

_STOP = object()


class Dispatcher:
    """
    Long-lived loop that turns chunks into running map tasks.

    The outstanding-work counter is incremented before each task is
    launched, never after. While the loop is open it also holds one extra
    unit on the counter (the feed guard) so the counter cannot reach zero
    while chunks are still waiting in the queue; the guard is released when
    the stop sentinel is dequeued, which happens after every earlier chunk.
    """

    def __init__(self, tokens: Sequence[str], wait_group: WaitGroup,
                 emit: Callable[[MapResult], None], job_id: str,
                 max_workers: Optional[int] = None, backend: str = "thread"):
        """
        Args:
            tokens: Shared token buffer
            wait_group: Completion barrier shared with the reducer
            emit: Where each map task delivers its result (the reducer queue)
            job_id: Unique job identifier
            max_workers: None launches one thread per chunk; otherwise a bounded pool
            backend: "thread" or "process"
        """
        self.tokens = tokens
        self.wait_group = wait_group
        self.emit = emit
        self.job_id = job_id
        self.max_workers = max_workers
        self.backend = backend
        self.chunks: "queue.Queue" = queue.Queue()
        self.dispatched_tasks = 0
        self._executor: Optional[Executor] = None
        self._thread: Optional[threading.Thread] = None
        self._cancelled = threading.Event()

    def start(self):
        """Take the feed guard and start the dispatch thread."""
        self.wait_group.add(1)
        self._executor = self._create_executor()
        self._thread = threading.Thread(
            target=self._run, name=f"dispatcher-{self.job_id}", daemon=True
        )
        self._thread.start()

    def submit(self, chunk: Chunk):
        self.chunks.put(chunk)

    def close(self):
        """No more chunks will be submitted."""
        self.chunks.put(_STOP)

    def join(self, timeout: Optional[float] = None):
        if self._thread is not None:
            self._thread.join(timeout)

    def shutdown(self, wait: bool = True):
        """Release pool resources once the job is over.

        With wait=False queued tasks are cancelled and chunks still in the
        dispatch queue are dropped.
        """
        if not wait:
            self._cancelled.set()
        if self._executor is not None:
            self._executor.shutdown(wait=wait, cancel_futures=not wait)
            self._executor = None

    def _create_executor(self) -> Optional[Executor]:
        if self.backend == "process":
            workers = self.max_workers or os.cpu_count() or 1
            logger.info(f"Job {self.job_id}: using process pool with {workers} workers")
            return ProcessPoolExecutor(max_workers=workers)
        if self.max_workers is not None:
            logger.info(f"Job {self.job_id}: using thread pool with {self.max_workers} workers")
            return ThreadPoolExecutor(max_workers=self.max_workers,
                                      thread_name_prefix=f"map-{self.job_id[:8]}")
        logger.info(f"Job {self.job_id}: launching one thread per chunk")
        return None

    def _run(self):
        while True:
            chunk = self.chunks.get()
            if chunk is _STOP:
                logger.debug(f"Job {self.job_id}: dispatcher closed after {self.dispatched_tasks} tasks")
                self.wait_group.done()  # release the feed guard
                return
            if self._cancelled.is_set():
                logger.debug(f"Job {self.job_id}: dropping map task {chunk.task_id} after shutdown")
                continue
            self.wait_group.add(1)
            self.dispatched_tasks += 1
            try:
                self._launch(chunk)
            except Exception as e:
                # e.g. a broken process pool; the task still has to be accounted for
                logger.error(f"Job {self.job_id}: could not launch map task {chunk.task_id}: {e}")
                self.emit(MapResult(task_id=chunk.task_id, success=False,
                                    error_message=f"Map task {chunk.task_id} not launched: {e}"))

    def _launch(self, chunk: Chunk):
        executor = self._executor
        if executor is None and (self.backend == "process" or self.max_workers is not None):
            raise RuntimeError("executor is shut down")
        if self.backend == "process":
            future = executor.submit(count_tokens, chunk.task_id,
                                     list(self.tokens[chunk.start:chunk.end]))
            future.add_done_callback(lambda f, c=chunk: self._on_future_done(f, c))
        elif executor is not None:
            future = executor.submit(self._run_map_task, chunk)
            future.add_done_callback(lambda f, c=chunk: self._on_future_done(f, c, emitted=True))
        else:
            thread = threading.Thread(target=self._run_map_task, args=(chunk,),
                                      name=f"map-{chunk.task_id}", daemon=True)
            thread.start()

    def _run_map_task(self, chunk: Chunk):
        result = MapExecutor(self.tokens, chunk, self.job_id).execute()
        self.emit(result)
        return result

    def _on_future_done(self, future: Future, chunk: Chunk, emitted: bool = False):
        if future.cancelled():
            return
        error = future.exception()
        if error is None:
            if not emitted:
                self.emit(future.result())
            return
        # The task never produced a result; report one so the barrier is released
        logger.error(f"Job {self.job_id}: map task {chunk.task_id} raised {error!r}")
        self.emit(MapResult(task_id=chunk.task_id, success=False,
                            error_message=f"Map task {chunk.task_id} failed: {error}"))
