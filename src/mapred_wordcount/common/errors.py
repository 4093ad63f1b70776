"""
Exception types raised by the map-reduce core.
"""


class MapReduceError(Exception):
    """Base class for all map-reduce errors"""
    pass


class InvalidConfigError(MapReduceError, ValueError):
    """A configuration value is out of range or of the wrong type"""
    pass


class InvalidChunkSizeError(InvalidConfigError):
    """Chunk size is not a positive integer"""

    def __init__(self, chunk_size):
        super().__init__(f"Chunk size must be a positive integer, got {chunk_size!r}")
        self.chunk_size = chunk_size


class ChunkBoundsError(MapReduceError):
    """A chunk range falls outside the token buffer"""

    def __init__(self, start: int, end: int, num_tokens: int):
        super().__init__(f"Chunk [{start}, {end}) is outside buffer of {num_tokens} tokens")
        self.start = start
        self.end = end
        self.num_tokens = num_tokens


class JobStateError(MapReduceError):
    """Illegal job state transition"""
    pass


class JobFailedError(MapReduceError):
    """One or more map tasks reported a failure"""

    def __init__(self, job_id: str, errors: list):
        super().__init__(f"Job {job_id} failed: {len(errors)} map task(s) failed: {'; '.join(errors)}")
        self.job_id = job_id
        self.errors = errors


class JobTimeoutError(MapReduceError):
    """Completion barrier did not release within the configured timeout"""

    def __init__(self, job_id: str, timeout: float, outstanding: int):
        super().__init__(
            f"Job {job_id} timed out after {timeout}s with {outstanding} task(s) outstanding"
        )
        self.job_id = job_id
        self.timeout = timeout
        self.outstanding = outstanding
