"""
Driver for a counting job.
Splits the token buffer, feeds the dispatcher, waits on the completion
barrier, and only then reads the final tally.
"""

import time
import logging
from collections import Counter
from dataclasses import dataclass
from typing import Optional, Sequence, Tuple

from mapred_wordcount.common.config import JobConfig
from mapred_wordcount.common.errors import JobFailedError, JobTimeoutError, MapReduceError
from mapred_wordcount.coordinator.barrier import WaitGroup
from mapred_wordcount.coordinator.dispatcher import Dispatcher
from mapred_wordcount.coordinator.job_manager import Job, JobManager, JobStatus
from mapred_wordcount.coordinator.metrics import JobMetrics, current_memory_bytes
from mapred_wordcount.worker.reduce_executor import ReduceLoop

logger = logging.getLogger(__name__)


@dataclass
class JobResult:
    """Final tally of a completed job"""
    job: Job
    counts: Counter
    parallel_seconds: float


def run_parallel(tokens: Sequence[str], config: Optional[JobConfig] = None,
                 job_manager: Optional[JobManager] = None,
                 job_id: Optional[str] = None) -> JobResult:
    """
    Count words in tokens with one map task per chunk and a single reducer

    Args:
        tokens: Token buffer; must not be mutated while the job runs
        config: Job settings (chunk size, pool size, backend, timeout)
        job_manager: Registry to record the job in
        job_id: Optional explicit job id

    Returns:
        JobResult with the final tally and the parallel wall-clock time

    Raises:
        InvalidChunkSizeError: Before anything is dispatched
        JobFailedError: If any map task reported a failure
        JobTimeoutError: If config.wait_timeout expired before completion
    """
    config = config or JobConfig()
    job_manager = job_manager or JobManager()
    job = job_manager.create_job(len(tokens), config, job_id=job_id)

    start_time = time.perf_counter()
    chunks = job_manager.generate_map_tasks(job)
    job.transition_to(JobStatus.RUNNING)

    if not chunks:
        job.transition_to(JobStatus.COMPLETED)
        logger.info(f"Job {job.job_id}: empty input, nothing to dispatch")
        return JobResult(job=job, counts=Counter(),
                         parallel_seconds=time.perf_counter() - start_time)

    wait_group = WaitGroup()
    reducer = ReduceLoop(wait_group, job.job_id)
    dispatcher = Dispatcher(tokens, wait_group, reducer.submit, job.job_id,
                            max_workers=config.max_workers, backend=config.backend)
    reducer.start()
    dispatcher.start()

    for chunk in chunks:
        dispatcher.submit(chunk)
    dispatcher.close()

    if not wait_group.wait(config.wait_timeout):
        outstanding = wait_group.count
        dispatcher.shutdown(wait=False)
        reducer.stop(timeout=0)
        job.transition_to(JobStatus.FAILED)
        logger.error(f"Job {job.job_id}: timed out with {outstanding} task(s) outstanding")
        raise JobTimeoutError(job.job_id, config.wait_timeout, outstanding)

    dispatcher.join()
    reducer.stop()
    dispatcher.shutdown()
    parallel_seconds = time.perf_counter() - start_time

    job.dispatched_tasks = dispatcher.dispatched_tasks
    job.merged_tasks = reducer.merged_tasks
    job.errors = list(reducer.errors)

    if job.merged_tasks != job.dispatched_tasks or job.dispatched_tasks != job.num_chunks:
        job.transition_to(JobStatus.FAILED)
        raise MapReduceError(
            f"Job {job.job_id}: {job.num_chunks} chunks, {job.dispatched_tasks} dispatched, "
            f"{job.merged_tasks} merged"
        )
    if job.errors:
        job.transition_to(JobStatus.FAILED)
        logger.error(f"Job {job.job_id}: {len(job.errors)} map task(s) failed")
        raise JobFailedError(job.job_id, job.errors)

    merged_words = sum(reducer.final_counts.values())
    if merged_words != job.num_tokens:
        job.transition_to(JobStatus.FAILED)
        raise MapReduceError(
            f"Job {job.job_id}: merged {merged_words} words from {job.num_tokens} tokens"
        )

    job.transition_to(JobStatus.COMPLETED)
    logger.info(
        f"Job {job.job_id}: merged {job.merged_tasks} partial tallies, "
        f"{len(reducer.final_counts)} distinct words in {parallel_seconds:.4f}s"
    )
    return JobResult(job=job, counts=reducer.final_counts, parallel_seconds=parallel_seconds)


def count_serial(tokens: Sequence[str]) -> Counter:
    """Single-threaded full scan over the buffer."""
    counts = Counter()
    for word in tokens:
        counts[word] += 1
    return counts


def timed_serial(tokens: Sequence[str]) -> Tuple[Counter, float]:
    start_time = time.perf_counter()
    counts = count_serial(tokens)
    return counts, time.perf_counter() - start_time


def compare(tokens: Sequence[str], config: Optional[JobConfig] = None,
            job_manager: Optional[JobManager] = None) -> Tuple[JobResult, JobMetrics]:
    """
    Run the parallel job and the serial baseline over the same buffer.

    Returns:
        The parallel JobResult and a JobMetrics record with both timings
    """
    config = config or JobConfig()
    result = run_parallel(tokens, config, job_manager=job_manager)
    serial_counts, serial_seconds = timed_serial(tokens)

    results_match = serial_counts == result.counts
    if not results_match:
        logger.error(f"Job {result.job.job_id}: parallel and serial tallies differ")

    metrics = JobMetrics(
        job_id=result.job.job_id,
        num_tokens=len(tokens),
        distinct_words=len(result.counts),
        chunk_size=config.chunk_size,
        num_chunks=result.job.num_chunks,
        parallelism=config.parallelism,
        backend=config.backend,
        max_workers=config.max_workers,
        parallel_seconds=result.parallel_seconds,
        serial_seconds=serial_seconds,
        memory_rss_bytes=current_memory_bytes(),
        results_match=results_match
    )
    return result, metrics
