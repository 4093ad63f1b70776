"""
Unit tests for MapExecutor
"""

from collections import Counter
from unittest.mock import patch

from mapred_wordcount.coordinator.job_manager import Chunk
from mapred_wordcount.worker.map_executor import (
    MapExecutor,
    MapResult,
    count_chunk,
    count_tokens,
)


class TestCountChunk:
    """Tests for counting inside chunk bounds"""

    def test_counts_scenario_chunks(self, scenario_tokens):
        """Each two-token chunk produces its own partial tally"""
        partials = [count_chunk(scenario_tokens, Chunk(i, i * 2, 2)) for i in range(3)]
        assert partials == [
            Counter({'a': 1, 'b': 1}),
            Counter({'a': 1, 'c': 1}),
            Counter({'b': 1, 'a': 1}),
        ]

    def test_does_not_read_past_chunk_end(self):
        """The token right after the chunk is not counted"""
        tokens = ["x", "x", "boundary"]
        assert count_chunk(tokens, Chunk(0, 0, 2)) == Counter({'x': 2})

    def test_does_not_read_before_chunk_start(self):
        tokens = ["before", "y", "y"]
        assert count_chunk(tokens, Chunk(1, 1, 2)) == Counter({'y': 2})

    def test_does_not_mutate_buffer(self, sample_tokens):
        original = list(sample_tokens)
        count_chunk(sample_tokens, Chunk(0, 3, 10))
        assert sample_tokens == original

    def test_count_tokens_on_slice(self):
        result = count_tokens(7, ["a", "b", "a"])
        assert result.task_id == 7
        assert result.counts == Counter({'a': 2, 'b': 1})
        assert result.num_tokens == 3
        assert result.success is True


class TestMapExecutor:
    """Tests for MapExecutor.execute"""

    def test_successful_execution(self, sample_tokens):
        chunk = Chunk(task_id=2, start=0, length=5)
        result = MapExecutor(sample_tokens, chunk, 'test-job').execute()

        assert isinstance(result, MapResult)
        assert result.success is True
        assert result.task_id == 2
        assert result.num_tokens == 5
        assert sum(result.counts.values()) == 5
        assert result.execution_time_ms >= 0
        assert result.error_message == ''

    def test_failure_is_reported_on_result(self, sample_tokens):
        """A failing map task still emits exactly one result"""
        with patch('mapred_wordcount.worker.map_executor.count_chunk',
                   side_effect=RuntimeError('boom')):
            result = MapExecutor(sample_tokens, Chunk(0, 0, 3), 'test-job').execute()

        assert result.success is False
        assert 'boom' in result.error_message
        assert result.counts == Counter()
