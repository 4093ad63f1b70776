"""
Runtime configuration for map-reduce word counting jobs.
Defaults come from the environment and can be overridden from the CLI.
"""

import os
import logging
from dataclasses import dataclass, field
from typing import Optional

from mapred_wordcount.common.errors import InvalidChunkSizeError, InvalidConfigError

# Fallbacks when the MAPRED_* environment variables are unset
DEFAULT_CHUNK_SIZE = 200000
DEFAULT_BACKEND = 'thread'
DEFAULT_LOG_LEVEL = 'INFO'
METRICS_DIR = os.getenv('MAPRED_METRICS_DIR', 'metrics')

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

BACKENDS = ("thread", "process")


def configure_logging(level: Optional[str] = None):
    """Configure root logging for CLI and benchmark entry points."""
    level = level or os.getenv('MAPRED_LOG_LEVEL', DEFAULT_LOG_LEVEL)
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format=LOG_FORMAT
    )


@dataclass
class JobConfig:
    """Settings for a single parallel counting run"""
    chunk_size: int = DEFAULT_CHUNK_SIZE
    max_workers: Optional[int] = None  # None: one thread per chunk
    backend: str = DEFAULT_BACKEND
    wait_timeout: Optional[float] = None  # None: wait until every task is merged
    parallelism: int = field(default_factory=lambda: os.cpu_count() or 1)

    def validate(self):
        """Reject bad values before any task is launched."""
        if isinstance(self.chunk_size, bool) or not isinstance(self.chunk_size, int) \
                or self.chunk_size <= 0:
            raise InvalidChunkSizeError(self.chunk_size)
        if self.backend not in BACKENDS:
            raise InvalidConfigError(f"Unknown backend {self.backend!r}, expected one of {BACKENDS}")
        if self.max_workers is not None and self.max_workers <= 0:
            raise InvalidConfigError(f"max_workers must be positive, got {self.max_workers}")
        if self.wait_timeout is not None and self.wait_timeout <= 0:
            raise InvalidConfigError(f"wait_timeout must be positive, got {self.wait_timeout}")
        return self

    @classmethod
    def from_env(cls, **overrides) -> "JobConfig":
        """Build a config from MAPRED_* environment variables plus explicit overrides."""
        chunk_size = os.getenv('MAPRED_CHUNK_SIZE', '')
        max_workers = os.getenv('MAPRED_MAX_WORKERS', '')
        values = {'backend': os.getenv('MAPRED_BACKEND', DEFAULT_BACKEND)}
        if chunk_size:
            try:
                values['chunk_size'] = int(chunk_size)
            except ValueError:
                raise InvalidChunkSizeError(chunk_size) from None
        if max_workers:
            try:
                values['max_workers'] = int(max_workers)
            except ValueError:
                raise InvalidConfigError(
                    f"MAPRED_MAX_WORKERS must be an integer, got {max_workers!r}"
                ) from None
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)
