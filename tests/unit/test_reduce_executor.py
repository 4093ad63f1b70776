"""
Unit tests for the reduce loop
"""

import itertools
import threading
from collections import Counter

from mapred_wordcount.coordinator.barrier import WaitGroup
from mapred_wordcount.worker.map_executor import MapResult
from mapred_wordcount.worker.reduce_executor import ReduceLoop, merge_counts


SCENARIO_PARTIALS = [
    Counter({'a': 1, 'b': 1}),
    Counter({'a': 1, 'c': 1}),
    Counter({'b': 1, 'a': 1}),
]


def run_reducer(results):
    """Feed results through a ReduceLoop and return it once everything is merged"""
    wg = WaitGroup()
    reducer = ReduceLoop(wg, 'test-job')
    reducer.start()
    for result in results:
        wg.add(1)
        reducer.submit(result)
    assert wg.wait(timeout=5)
    reducer.stop(timeout=5)
    return reducer, wg


class TestMergeCounts:
    """Tests for merging partial tallies"""

    def test_sums_per_word(self):
        final = Counter({'a': 2})
        merge_counts(final, {'a': 1, 'b': 4})
        assert final == Counter({'a': 3, 'b': 4})

    def test_merge_order_does_not_matter(self):
        """Every arrival order of the scenario partials gives the same tally"""
        for order in itertools.permutations(SCENARIO_PARTIALS):
            final = Counter()
            for partial in order:
                merge_counts(final, partial)
            assert final == Counter({'a': 3, 'b': 2, 'c': 1})


class TestReduceLoop:
    """Tests for the single-writer reduce loop"""

    def test_merges_scenario_partials(self):
        results = [MapResult(task_id=i, counts=c) for i, c in enumerate(SCENARIO_PARTIALS)]
        reducer, wg = run_reducer(results)

        assert reducer.final_counts == Counter({'a': 3, 'b': 2, 'c': 1})
        assert reducer.merged_tasks == 3
        assert reducer.errors == []
        assert wg.count == 0

    def test_decrements_once_per_result(self):
        wg = WaitGroup()
        reducer = ReduceLoop(wg, 'test-job')
        reducer.start()
        wg.add(2)
        reducer.submit(MapResult(task_id=0, counts=Counter({'x': 1})))

        assert wg.wait(timeout=0.2) is False
        assert wg.count == 1

        reducer.submit(MapResult(task_id=1, counts=Counter({'x': 1})))
        assert wg.wait(timeout=5) is True
        reducer.stop(timeout=5)
        assert reducer.final_counts == Counter({'x': 2})

    def test_failed_result_is_recorded_and_counted(self):
        results = [
            MapResult(task_id=0, counts=Counter({'a': 1})),
            MapResult(task_id=1, success=False, error_message='Map task 1 failed: boom'),
        ]
        reducer, wg = run_reducer(results)

        assert reducer.merged_tasks == 2
        assert reducer.errors == ['Map task 1 failed: boom']
        assert reducer.final_counts == Counter({'a': 1})
        assert wg.count == 0

    def test_concurrent_producers(self):
        """Many map threads submitting at once lose no updates"""
        wg = WaitGroup()
        reducer = ReduceLoop(wg, 'test-job')
        reducer.start()

        def producer(task_id):
            reducer.submit(MapResult(task_id=task_id, counts=Counter({'w': 10, f't{task_id}': 1})))

        threads = []
        for task_id in range(50):
            wg.add(1)
            threads.append(threading.Thread(target=producer, args=(task_id,)))
        for t in threads:
            t.start()

        assert wg.wait(timeout=5)
        reducer.stop(timeout=5)
        assert reducer.final_counts['w'] == 500
        assert len(reducer.final_counts) == 51

    def test_stop_with_nothing_queued(self):
        reducer, wg = run_reducer([])
        assert reducer.merged_tasks == 0
        assert reducer.final_counts == Counter()
