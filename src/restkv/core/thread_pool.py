"""
=============================================================================
THREAD POOL
=============================================================================

Each accepted connection becomes one task; a worker thread serves it from
the first request to the last keep-alive request.

    accept loop ──submit()──►  ┌──────────────────────┐
                               │  queue.Queue(maxsize)│
                               └──────────┬───────────┘
                                          │ get()
                        ┌─────────────────┼─────────────────┐
                        ▼                 ▼                 ▼
                    Worker-0          Worker-1   ...    Worker-N

- min_workers start with the pool; more are added (up to max_workers)
  when every worker is busy and tasks are waiting.
- A queued task always runs, however long it waited. The only way to turn
  a connection away is a full queue: submit() returns False and the
  server answers 503 itself.
- shutdown() drains the queue (with a deadline) and then sends one
  poison pill (None) per worker.

=============================================================================
"""

import threading
import queue
import time
import logging
from typing import Callable, Optional, Any, NamedTuple

logger = logging.getLogger(__name__)


class Task(NamedTuple):
    """A deferred call: func(*args)."""
    func: Callable[..., Any]
    args: tuple = ()


class Worker(threading.Thread):
    """Daemon thread running Tasks from the shared queue until a poison pill."""

    def __init__(self, pool: "ThreadPool", worker_id: int):
        super().__init__(name=f"restkv-worker-{worker_id}", daemon=True)
        self.pool = pool
        self.worker_id = worker_id
        self.busy = False
        self._stop_requested = threading.Event()

    def run(self):
        logger.debug(f"{self.name} started")
        tasks = self.pool._tasks

        while not self._stop_requested.is_set():
            try:
                task = tasks.get(timeout=self.pool.idle_timeout)
            except queue.Empty:
                continue

            try:
                if task is None:
                    break
                self._run_task(task)
            finally:
                tasks.task_done()

        logger.debug(f"{self.name} stopped")

    def _run_task(self, task: Task):
        self.busy = True
        started = time.monotonic()
        try:
            task.func(*task.args)
        except Exception as e:
            # The worker outlives any single connection
            logger.exception(f"{self.name}: task failed after {time.monotonic() - started:.3f}s: {e}")
        finally:
            self.busy = False

    def stop(self):
        self._stop_requested.set()


class ThreadPool:
    """
    Bounded pool of worker threads.

        pool = ThreadPool(min_workers=2, max_workers=8, queue_size=50)
        pool.start()
        if not pool.submit(serve, conn):
            reject(conn)
        ...
        pool.shutdown(wait=True, timeout=30.0)
    """

    def __init__(
        self,
        min_workers: int = 4,
        max_workers: int = 16,
        queue_size: int = 100,
        idle_timeout: float = 1.0
    ):
        self.min_workers = min_workers
        self.max_workers = max_workers
        self.idle_timeout = idle_timeout

        self._tasks: "queue.Queue[Optional[Task]]" = queue.Queue(maxsize=queue_size)
        self._workers: list[Worker] = []
        self._lock = threading.Lock()  # Guards _workers and _next_id
        self._next_id = 0
        self._accepting = False

    @property
    def size(self) -> int:
        """Number of worker threads."""
        with self._lock:
            return len(self._workers)

    def start(self):
        """Spawn the minimum number of workers. No-op if already running."""
        if self._accepting:
            return

        logger.info(f"Starting thread pool ({self.min_workers}-{self.max_workers} workers)")
        with self._lock:
            for _ in range(self.min_workers):
                self._spawn()
        self._accepting = True

    def _spawn(self) -> Worker:
        # Caller holds self._lock
        worker = Worker(self, self._next_id)
        self._next_id += 1
        self._workers.append(worker)
        worker.start()
        return worker

    def submit(self, func: Callable[..., Any], *args: Any) -> bool:
        """
        Queue func(*args) without blocking.

        Returns:
            True if queued, False if the queue is full.

        Raises:
            RuntimeError: If the pool is not running.
        """
        if not self._accepting:
            raise RuntimeError("Thread pool is not running")

        try:
            self._tasks.put_nowait(Task(func, args))
        except queue.Full:
            return False

        self._grow_if_saturated()
        return True

    def _grow_if_saturated(self):
        with self._lock:
            if len(self._workers) >= self.max_workers:
                return
            if all(w.busy for w in self._workers) and not self._tasks.empty():
                logger.debug(f"All {len(self._workers)} workers busy, adding one")
                self._spawn()

    def shutdown(self, wait: bool = True, timeout: Optional[float] = None):
        """
        Stop accepting tasks and stop the workers.

        Args:
            wait: Let queued tasks finish first.
            timeout: Upper bound on that wait; None waits for the queue
                     to be fully processed.
        """
        if not self._accepting:
            return

        logger.info("Shutting down thread pool...")
        self._accepting = False

        if wait:
            if timeout is None:
                self._tasks.join()
            else:
                deadline = time.monotonic() + timeout
                while self._tasks.unfinished_tasks:
                    if time.monotonic() > deadline:
                        logger.warning("Thread pool did not drain in time, stopping anyway")
                        break
                    time.sleep(0.05)

        with self._lock:
            workers, self._workers = self._workers, []

        for worker in workers:
            worker.stop()
            try:
                self._tasks.put_nowait(None)
            except queue.Full:
                pass  # stop() ends it on its next idle poll

        for worker in workers:
            worker.join(timeout=2.0)

        logger.info("Thread pool stopped")
