"""
Performance metrics collection for counting jobs.
"""

import json
import os
from dataclasses import dataclass, asdict
from typing import Dict, List, Optional

import psutil


@dataclass
class JobMetrics:
    """Timing of one parallel run and its serial baseline."""

    job_id: str
    num_tokens: int
    distinct_words: int
    chunk_size: int
    num_chunks: int
    parallelism: int
    backend: str
    max_workers: Optional[int]
    parallel_seconds: float
    serial_seconds: float = 0.0
    memory_rss_bytes: int = 0
    results_match: bool = True

    @property
    def speedup(self) -> float:
        """Serial time divided by parallel time."""
        if self.parallel_seconds <= 0:
            return float('inf')
        return self.serial_seconds / self.parallel_seconds

    @property
    def parallel_micros(self) -> int:
        return int(self.parallel_seconds * 1_000_000)

    @property
    def serial_micros(self) -> int:
        return int(self.serial_seconds * 1_000_000)

    def to_dict(self) -> dict:
        """Convert metrics to dictionary."""
        data = asdict(self)
        data['speedup'] = self.speedup
        return data

    def save_to_file(self, filepath: str):
        """Save metrics to JSON file."""
        directory = os.path.dirname(filepath)
        if directory:
            os.makedirs(directory, exist_ok=True)
        with open(filepath, 'w') as f:
            json.dump(self.to_dict(), f, indent=2)


def current_memory_bytes() -> int:
    """Resident set size of this process."""
    return psutil.Process().memory_info().rss


class MetricsCollector:
    """Collects metrics for several runs, e.g. during a benchmark sweep."""

    def __init__(self):
        self.job_metrics: Dict[str, JobMetrics] = {}

    def record(self, metrics: JobMetrics):
        self.job_metrics[metrics.job_id] = metrics

    def get_metrics(self, job_id: str) -> Optional[JobMetrics]:
        """Retrieve metrics for a specific job."""
        return self.job_metrics.get(job_id)

    def all_metrics(self) -> List[JobMetrics]:
        return list(self.job_metrics.values())

    def save_all(self, directory: str):
        """Write one JSON file per job into directory."""
        os.makedirs(directory, exist_ok=True)
        for job_id, metrics in self.job_metrics.items():
            metrics.save_to_file(os.path.join(directory, f"{job_id}.json"))
