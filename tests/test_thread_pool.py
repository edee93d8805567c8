import os
import threading
from collections import Counter

import pytest

from pbtracer.thread_pool import ThreadPool, default_pool


@pytest.fixture
def pool():
    with ThreadPool(3) as workers:
        yield workers


@pytest.mark.parametrize("is_complex", [True, False])
@pytest.mark.parametrize("width,height", [(7, 5), (1, 1), (16, 9), (2, 40)])
def test_parallel_for_visits_every_cell_once(pool, width, height, is_complex):
    seen = Counter()
    lock = threading.Lock()

    def visit(x, y):
        with lock:
            seen[(x, y)] += 1

    pool.parallel_for(width, height, visit, is_complex)
    pool.wait()
    assert seen == Counter({(x, y): 1 for x in range(width) for y in range(height)})
    assert pool.pending == 0


def test_parallel_for_empty_grid_queues_nothing(pool):
    calls = []
    pool.parallel_for(0, 5, lambda x, y: calls.append((x, y)))
    pool.wait()
    assert calls == []
    assert pool.pending == 0


def test_parallel_for_rejects_negative_size(pool):
    with pytest.raises(ValueError):
        pool.parallel_for(-1, 3, lambda x, y: None)


def test_add_task_runs_task(pool):
    results = []
    pool.add_task(lambda: results.append("done"))
    pool.wait()
    assert results == ["done"]


def test_add_task_requires_callable(pool):
    with pytest.raises(TypeError):
        pool.add_task(42)


def test_wait_reraises_task_error_then_recovers(pool):
    def boom():
        raise KeyError("boom")

    pool.add_task(boom)
    with pytest.raises(KeyError):
        pool.wait()

    results = []
    pool.add_task(lambda: results.append(1))
    pool.wait()
    assert results == [1]


def test_get_task_on_empty_queue_returns_none(pool):
    pool.wait()
    assert pool.get_task() is None


def test_get_task_takes_queued_task_while_worker_busy():
    with ThreadPool(1) as single:
        gate = threading.Event()
        started = threading.Event()

        def blocker():
            started.set()
            gate.wait(5)

        single.add_task(blocker)
        assert started.wait(5)
        marker = []
        single.add_task(lambda: marker.append(1))
        task = single.get_task()
        gate.set()
        single.wait()
        assert marker == []
        assert single.pending == 0
        task()
        assert marker == [1]


def test_closed_pool_rejects_work():
    workers = ThreadPool(2)
    workers.close()
    assert workers.closed
    with pytest.raises(RuntimeError):
        workers.add_task(lambda: None)
    with pytest.raises(RuntimeError):
        workers.parallel_for(2, 2, lambda x, y: None)


def test_close_finishes_queued_work():
    results = []
    with ThreadPool(2) as workers:
        for i in range(20):
            workers.add_task(lambda i=i: results.append(i))
    assert workers.closed
    assert sorted(results) == list(range(20))


def test_zero_threads_means_one_per_cpu():
    with ThreadPool(0) as workers:
        assert workers.thread_count == (os.cpu_count() or 1)


def test_negative_thread_count_rejected():
    with pytest.raises(ValueError):
        ThreadPool(-2)


def test_default_pool_is_shared():
    first = default_pool()
    assert default_pool() is first
    assert first.thread_count == (os.cpu_count() or 1)