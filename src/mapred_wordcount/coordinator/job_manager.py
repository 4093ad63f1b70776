"""
Job Manager for the map-reduce coordinator
Handles job state, chunk generation, and task bookkeeping
"""

import threading
import logging
import time
import uuid
from enum import Enum
from dataclasses import dataclass, field
from typing import List, Dict, Optional

from mapred_wordcount.common.config import JobConfig
from mapred_wordcount.common.errors import (
    ChunkBoundsError,
    InvalidChunkSizeError,
    JobStateError,
)

logger = logging.getLogger(__name__)


class JobStatus(Enum):
    """Status of a counting job"""
    IDLE = "idle"
    SPLITTING = "splitting"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"


# Allowed transitions; there is no way back to an earlier state
VALID_TRANSITIONS = {
    JobStatus.IDLE: {JobStatus.SPLITTING, JobStatus.FAILED},
    JobStatus.SPLITTING: {JobStatus.RUNNING, JobStatus.FAILED},
    JobStatus.RUNNING: {JobStatus.COMPLETED, JobStatus.FAILED},
    JobStatus.COMPLETED: set(),
    JobStatus.FAILED: set(),
}


@dataclass(frozen=True)
class Chunk:
    """Contiguous token range [start, start + length) handled by one map task"""
    task_id: int
    start: int
    length: int

    @property
    def end(self) -> int:
        return self.start + self.length


def split_chunks(num_tokens: int, chunk_size: int) -> List[Chunk]:
    """
    Partition a buffer of num_tokens into consecutive chunks of chunk_size

    The last chunk holds the remainder. An empty buffer yields no chunks.

    Args:
        num_tokens: Length of the token buffer
        chunk_size: Maximum tokens per chunk

    Returns:
        Ordered list of chunks covering [0, num_tokens) exactly once

    Raises:
        InvalidChunkSizeError: If chunk_size is not a positive integer
    """
    if isinstance(chunk_size, bool) or not isinstance(chunk_size, int) or chunk_size <= 0:
        raise InvalidChunkSizeError(chunk_size)
    if num_tokens < 0:
        raise ValueError(f"num_tokens must be non-negative, got {num_tokens}")

    chunks = []
    for task_id, start in enumerate(range(0, num_tokens, chunk_size)):
        chunk = Chunk(task_id=task_id, start=start, length=min(chunk_size, num_tokens - start))
        if chunk.end > num_tokens or chunk.length <= 0:
            raise ChunkBoundsError(chunk.start, chunk.end, num_tokens)
        chunks.append(chunk)
    return chunks


@dataclass
class Job:
    """Represents one parallel counting run"""
    job_id: str
    num_tokens: int
    config: JobConfig
    status: JobStatus = JobStatus.IDLE
    chunks: List[Chunk] = field(default_factory=list)
    dispatched_tasks: int = 0
    merged_tasks: int = 0
    errors: List[str] = field(default_factory=list)
    start_time: float = 0.0
    end_time: float = 0.0

    @property
    def num_chunks(self) -> int:
        return len(self.chunks)

    @property
    def elapsed_seconds(self) -> float:
        if not self.end_time:
            return 0.0
        return self.end_time - self.start_time

    def transition_to(self, status: JobStatus):
        """Move the job forward in its lifecycle."""
        if status not in VALID_TRANSITIONS[self.status]:
            raise JobStateError(
                f"Job {self.job_id}: cannot transition from {self.status.value} to {status.value}"
            )
        logger.info(f"Job {self.job_id}: {self.status.value} -> {status.value}")
        self.status = status
        if status in (JobStatus.COMPLETED, JobStatus.FAILED):
            self.end_time = time.perf_counter()


class JobManager:
    """Tracks all jobs created by this process"""

    def __init__(self):
        self.jobs: Dict[str, Job] = {}
        self.lock = threading.Lock()

    def create_job(self, num_tokens: int, config: JobConfig, job_id: Optional[str] = None) -> Job:
        """Create a new job; configuration errors are raised here, before any dispatch"""
        config.validate()
        with self.lock:
            job = Job(
                job_id=job_id or str(uuid.uuid4()),
                num_tokens=num_tokens,
                config=config,
                start_time=time.perf_counter()
            )
            self.jobs[job.job_id] = job
        logger.debug(f"Created job {job.job_id} for {num_tokens} tokens")
        return job

    def generate_map_tasks(self, job: Job) -> List[Chunk]:
        """Split the job's token buffer into chunks"""
        job.transition_to(JobStatus.SPLITTING)
        job.chunks = split_chunks(job.num_tokens, job.config.chunk_size)
        logger.info(
            f"Job {job.job_id}: split {job.num_tokens} tokens into {job.num_chunks} chunks "
            f"of up to {job.config.chunk_size}"
        )
        return job.chunks

    def get_job(self, job_id: str) -> Optional[Job]:
        with self.lock:
            return self.jobs.get(job_id)
