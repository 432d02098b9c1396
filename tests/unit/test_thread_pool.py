"""
Unit tests for the worker thread pool.
"""

import logging
import threading
import time

import pytest

from restkv.core.thread_pool import ThreadPool


@pytest.fixture
def pool():
    pool = ThreadPool(min_workers=2, max_workers=4, queue_size=10, idle_timeout=0.1)
    pool.start()
    yield pool
    pool.shutdown(wait=False)


class TestThreadPool:

    def test_submit_before_start(self):
        with pytest.raises(RuntimeError, match="not running"):
            ThreadPool().submit(print)

    def test_runs_tasks(self, pool: ThreadPool):
        done = threading.Event()
        results = []

        def task(value, scale):
            results.append(value * scale)
            done.set()

        assert pool.submit(task, 21, 2) is True
        assert done.wait(2.0)
        assert results == [42]

    def test_failing_task_does_not_kill_worker(self, caplog):
        caplog.set_level(logging.ERROR, logger="restkv.core.thread_pool")
        pool = ThreadPool(min_workers=1, max_workers=1, queue_size=10, idle_timeout=0.1)
        pool.start()
        done = threading.Event()

        def boom():
            raise ValueError("boom")

        try:
            pool.submit(boom)
            pool.submit(done.set)
            assert done.wait(2.0)
        finally:
            pool.shutdown(wait=True, timeout=5.0)

        failures = [r for r in caplog.records if "task failed" in r.getMessage()]
        assert len(failures) == 1
        assert failures[0].exc_info is not None

    def test_full_queue_rejects(self):
        pool = ThreadPool(min_workers=1, max_workers=1, queue_size=1, idle_timeout=0.1)
        pool.start()
        release = threading.Event()
        started = threading.Event()

        def blocker():
            started.set()
            release.wait(5.0)

        try:
            assert pool.submit(blocker)
            assert started.wait(2.0)
            assert pool.submit(blocker)        # waits in the queue
            assert pool.submit(blocker) is False
        finally:
            release.set()
            pool.shutdown(wait=True, timeout=5.0)

    def test_queued_task_runs_however_long_it_waited(self):
        pool = ThreadPool(min_workers=1, max_workers=1, queue_size=10, idle_timeout=0.1)
        pool.start()
        release = threading.Event()
        done = threading.Event()

        try:
            pool.submit(release.wait, 5.0)
            pool.submit(done.set)
            time.sleep(0.5)
            assert not done.is_set()

            release.set()
            assert done.wait(2.0)
        finally:
            release.set()
            pool.shutdown(wait=True, timeout=5.0)

    def test_scales_up_when_busy(self):
        pool = ThreadPool(min_workers=1, max_workers=3, queue_size=10, idle_timeout=0.1)
        pool.start()
        release = threading.Event()

        try:
            for _ in range(3):
                pool.submit(release.wait, 5.0)
                time.sleep(0.05)
            assert 1 < pool.size <= 3
        finally:
            release.set()
            pool.shutdown(wait=True, timeout=5.0)

    def test_shutdown_waits_for_queued_tasks(self):
        pool = ThreadPool(min_workers=1, max_workers=1, queue_size=10, idle_timeout=0.1)
        pool.start()
        results = []

        for i in range(5):
            pool.submit(results.append, i)
        pool.shutdown(wait=True, timeout=5.0)

        assert results == [0, 1, 2, 3, 4]
        assert pool.size == 0

    def test_submit_after_shutdown(self, pool: ThreadPool):
        pool.shutdown(wait=True, timeout=1.0)

        with pytest.raises(RuntimeError):
            pool.submit(print)
