"""
Closed-loop (fixed workload) load discipline.
"""

import logging
from typing import Optional

from algorithms.base import LoadScheduler
from common.worker_pool import WorkerPool
from configuration import PROGRESS_INTERVAL

logger = logging.getLogger(__name__)


class ClosedLoop(LoadScheduler):
    """Fixed number of workers, each issuing a fixed number of back-to-back requests.

    A worker sends its next request as soon as the previous one completes, so
    throughput follows from latency x concurrency rather than a target rate.
    """

    def __init__(self, run_config, target_system, sink=None, exporter=None):
        super().__init__(run_config, target_system, sink=sink, exporter=exporter)
        self.concurrency = run_config.concurrency
        self.workload_per_worker = run_config.workload_per_worker
        self.worker_pool: Optional[WorkerPool] = None

        logger.info(
            f"Initialized closed loop: {self.concurrency} workers x "
            f"{self.workload_per_worker} requests against {run_config.endpoint}"
        )

    def _run(self) -> None:
        self.worker_pool = WorkerPool(self.concurrency, thread_name_prefix="worker")
        self.worker_pool.run_workers(self.concurrency, self._worker_function)

    def _drain(self) -> None:
        if self.worker_pool is not None:
            self.worker_pool.shutdown()

    def _worker_function(self, worker_id: int) -> None:
        """Worker thread body: no pacing, failures do not abort the worker."""
        logger.debug(f"Worker {worker_id} started")

        for iteration in range(self.workload_per_worker):
            if self.stop_event.is_set():
                logger.info(f"Worker {worker_id} stopping after {iteration} requests")
                break

            self._run_iteration(f"Worker {worker_id}", iteration)

            if (iteration + 1) % PROGRESS_INTERVAL == 0:
                logger.debug(f"Worker {worker_id}: {iteration + 1} requests completed")

        logger.debug(f"Worker {worker_id} finished")
