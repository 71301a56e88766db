"""
Thread-based worker pool for benchmark workers with a join-all barrier.
"""

import logging
from concurrent.futures import Future, ThreadPoolExecutor, wait
from typing import Callable, List

logger = logging.getLogger(__name__)


class WorkerPool:
    """Fixed-size pool of OS threads.

    Workers run truly in parallel with respect to network I/O. ``run_workers``
    blocks until every worker has returned; ``submit`` hands out single tasks
    fire-and-forget and ``shutdown`` waits for all of them.
    """

    def __init__(self, max_workers: int, thread_name_prefix: str = "worker"):
        """Initialize the worker pool.

        Args:
            max_workers: Maximum number of threads running at once
            thread_name_prefix: Prefix for thread names, shown in logs
        """
        self._executor = ThreadPoolExecutor(
            max_workers=max_workers,
            thread_name_prefix=thread_name_prefix,
        )
        self._submitted = 0
        self.is_running = True

        logger.debug(f"Initialized WorkerPool with max {max_workers} workers")

    def run_workers(self, count: int, worker_fn: Callable[[int], None]) -> None:
        """Start ``count`` workers calling ``worker_fn(worker_id)`` and wait for all of them."""
        futures = [self.submit(worker_fn, worker_id) for worker_id in range(count)]
        logger.info(f"Started {count} workers")

        wait(futures)
        self._log_crashed(futures)

    def submit(self, fn: Callable, *args) -> Future:
        """Schedule one task; never blocks on the task itself."""
        self._submitted += 1
        return self._executor.submit(fn, *args)

    def shutdown(self) -> None:
        """Wait for every submitted task to finish and release the threads."""
        if not self.is_running:
            return
        self._executor.shutdown(wait=True)
        self.is_running = False
        logger.debug(f"Worker pool stopped after {self._submitted} tasks")

    @staticmethod
    def _log_crashed(futures: List[Future]) -> None:
        for worker_id, future in enumerate(futures):
            error = future.exception()
            if error is not None:
                logger.error(f"Worker {worker_id} fatal error: {error}", exc_info=error)
