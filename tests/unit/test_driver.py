"""
Unit tests for the job driver
Tests the parallel path against the serial baseline and the documented scenarios
"""

import logging
import random
import threading
import time
from collections import Counter
from unittest.mock import patch

import pytest

from mapred_wordcount.common.config import JobConfig
from mapred_wordcount.common.errors import (
    InvalidChunkSizeError,
    JobFailedError,
    JobTimeoutError,
    MapReduceError,
)
from mapred_wordcount.coordinator.dispatcher import Dispatcher
from mapred_wordcount.coordinator.driver import compare, count_serial, run_parallel
from mapred_wordcount.coordinator.job_manager import JobManager, JobStatus
from mapred_wordcount.worker import map_executor


class TestScenarios:
    """Known inputs with known tallies"""

    def test_six_tokens_chunk_size_two(self, scenario_tokens):
        result = run_parallel(scenario_tokens, JobConfig(chunk_size=2))

        assert result.counts == Counter({'a': 3, 'b': 2, 'c': 1})
        assert result.job.num_chunks == 3
        assert result.job.dispatched_tasks == 3
        assert result.job.merged_tasks == 3
        assert result.job.status == JobStatus.COMPLETED

    def test_empty_buffer(self):
        """No chunks, empty tally, no deadlock"""
        result = run_parallel([], JobConfig(chunk_size=10, wait_timeout=5))

        assert result.counts == Counter()
        assert result.job.num_chunks == 0
        assert result.job.dispatched_tasks == 0
        assert result.job.status == JobStatus.COMPLETED

    def test_chunk_larger_than_buffer(self):
        tokens = ["one", "two", "two", "three", "three"]
        result = run_parallel(tokens, JobConfig(chunk_size=10))

        assert result.job.num_chunks == 1
        assert result.job.chunks[0].end == 5
        assert result.counts == Counter(tokens)


class TestParallelMatchesSerial:
    """The parallel tally equals a sequential single pass"""

    @pytest.mark.parametrize("chunk_size", [1, 3, 7, 64, 1000, 200000])
    @pytest.mark.parametrize("max_workers", [None, 1, 4])
    def test_random_buffers(self, chunk_size, max_workers):
        rng = random.Random(chunk_size * 31 + (max_workers or 0))
        vocabulary = [f"w{i}" for i in range(50)]
        tokens = [rng.choice(vocabulary) for _ in range(rng.randint(0, 2000))]

        config = JobConfig(chunk_size=chunk_size, max_workers=max_workers)
        result = run_parallel(tokens, config)

        assert result.counts == count_serial(tokens)
        assert sum(result.counts.values()) == len(tokens)

    def test_sample_text(self, sample_tokens):
        result = run_parallel(sample_tokens, JobConfig(chunk_size=4))
        assert result.counts == count_serial(sample_tokens)
        assert result.counts['the'] == 4

    def test_repeated_runs_are_stable(self, sample_tokens):
        """Completion is only signalled once every tally is merged"""
        expected = count_serial(sample_tokens)
        for _ in range(25):
            assert run_parallel(sample_tokens, JobConfig(chunk_size=1)).counts == expected


class TestDriverErrors:
    """Tests for configuration and task failures"""

    def test_invalid_chunk_size_rejected_before_dispatch(self, scenario_tokens):
        manager = JobManager()
        with patch('mapred_wordcount.coordinator.driver.Dispatcher') as dispatcher_cls:
            with pytest.raises(InvalidChunkSizeError):
                run_parallel(scenario_tokens, JobConfig(chunk_size=0), job_manager=manager)
            dispatcher_cls.assert_not_called()
        assert manager.jobs == {}

    def test_failed_map_task_fails_job(self, scenario_tokens):
        manager = JobManager()
        with patch('mapred_wordcount.worker.map_executor.count_chunk',
                   side_effect=RuntimeError('boom')):
            with pytest.raises(JobFailedError) as exc_info:
                run_parallel(scenario_tokens, JobConfig(chunk_size=2),
                             job_manager=manager, job_id='failing-job')

        assert len(exc_info.value.errors) == 3
        assert manager.get_job('failing-job').status == JobStatus.FAILED

    def test_timeout(self, scenario_tokens):
        def slow_count(tokens, chunk):
            time.sleep(1.0)
            return Counter()

        with patch('mapred_wordcount.worker.map_executor.count_chunk', side_effect=slow_count):
            with pytest.raises(JobTimeoutError) as exc_info:
                run_parallel(scenario_tokens, JobConfig(chunk_size=2, wait_timeout=0.05))

        assert exc_info.value.outstanding >= 1

    def test_timeout_releases_reducer_and_cancels_quietly(self, scenario_tokens, caplog):
        def slow_count(tokens, chunk):
            time.sleep(0.5)
            return Counter()

        manager = JobManager()
        with patch('mapred_wordcount.worker.map_executor.count_chunk', side_effect=slow_count):
            with caplog.at_level(logging.ERROR, logger='concurrent.futures'):
                with pytest.raises(JobTimeoutError):
                    run_parallel(scenario_tokens,
                                 JobConfig(chunk_size=1, max_workers=1, wait_timeout=0.05),
                                 job_manager=manager, job_id='slow-job')
                time.sleep(1.0)

        reducers = [t.name for t in threading.enumerate() if t.name == 'reducer-slow-job']
        assert reducers == []
        assert manager.get_job('slow-job').status == JobStatus.FAILED
        callback_errors = [r for r in caplog.records
                           if 'exception calling callback' in r.getMessage()]
        assert callback_errors == []

    @pytest.mark.parametrize("error", [RuntimeError("pool broken"), ValueError("bad chunk")])
    def test_launch_error_fails_job_instead_of_hanging(self, scenario_tokens, error):
        with patch.object(Dispatcher, "_launch", side_effect=error):
            with pytest.raises(JobFailedError) as exc_info:
                run_parallel(scenario_tokens, JobConfig(chunk_size=2, wait_timeout=5))

        assert len(exc_info.value.errors) == 3
        assert all("not launched" in message for message in exc_info.value.errors)

    def test_lost_words_fail_the_job(self, scenario_tokens):
        real_count = map_executor.count_chunk

        def lossy_count(tokens, chunk):
            counts = real_count(tokens, chunk)
            if chunk.task_id == 0:
                counts[tokens[chunk.start]] -= 1
            return counts

        manager = JobManager()
        with patch('mapred_wordcount.worker.map_executor.count_chunk', side_effect=lossy_count):
            with pytest.raises(MapReduceError, match="merged 5 words from 6 tokens"):
                run_parallel(scenario_tokens, JobConfig(chunk_size=2),
                             job_manager=manager, job_id='lossy-job')

        assert manager.get_job('lossy-job').status == JobStatus.FAILED


class TestCompare:
    """Tests for the parallel vs serial comparison"""

    def test_compare_reports_both_timings(self, sample_tokens):
        config = JobConfig(chunk_size=5, parallelism=4)
        result, metrics = compare(sample_tokens, config)

        assert metrics.results_match is True
        assert metrics.job_id == result.job.job_id
        assert metrics.num_tokens == len(sample_tokens)
        assert metrics.num_chunks == result.job.num_chunks
        assert metrics.distinct_words == len(result.counts)
        assert metrics.parallelism == 4
        assert metrics.parallel_seconds > 0
        assert metrics.serial_seconds >= 0
        assert metrics.memory_rss_bytes > 0


class TestCountSerial:

    def test_counts_every_token(self, scenario_tokens):
        assert count_serial(scenario_tokens) == Counter({'a': 3, 'b': 2, 'c': 1})

    def test_empty(self):
        assert count_serial([]) == Counter()
