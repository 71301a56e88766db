"""
Open-loop (fixed rate) load discipline.
"""

import time
import logging
from typing import Optional

from algorithms.base import LoadScheduler
from common.worker_pool import WorkerPool
from configuration import WINDOW_SECONDS

logger = logging.getLogger(__name__)


class OpenLoop(LoadScheduler):
    """Issues ``target_rate`` requests per second for ``duration_seconds``.

    Each one-second window holds one lane per unit of rate; lane ``i`` fires
    ``i / target_rate`` seconds into the window. A single ticker walks the
    lanes and hands each issuance to the worker pool without waiting for it,
    so slow responses raise in-flight concurrency instead of lowering the rate.

    An issuance is in flight from the moment it is submitted. Once more than
    ``max_in_flight`` are outstanding, new issuances wait in the pool queue
    for a free thread; the run is then marked saturated and the report says so.
    """

    def __init__(self, run_config, target_system, sink=None, exporter=None):
        super().__init__(run_config, target_system, sink=sink, exporter=exporter)
        self.target_rate = run_config.target_rate
        self.duration_seconds = run_config.duration_seconds
        self.max_in_flight = run_config.concurrency
        self.lane_interval = WINDOW_SECONDS / self.target_rate
        self.issued = 0
        self.queued_issuances = 0
        self.worker_pool: Optional[WorkerPool] = None

        logger.info(
            f"Initialized open loop: {self.target_rate} requests/second for "
            f"{self.duration_seconds:g}s against {run_config.endpoint} "
            f"(max in-flight {self.max_in_flight})"
        )

    def _run(self) -> None:
        self.worker_pool = WorkerPool(self.max_in_flight, thread_name_prefix="lane")
        start_time = time.perf_counter()

        while not self.stop_event.is_set():
            # Fire time of lane (issued % rate) in window (issued // rate)
            scheduled = self.issued * WINDOW_SECONDS / self.target_rate
            if scheduled >= self.duration_seconds:
                break

            delay = scheduled - (time.perf_counter() - start_time)
            if delay > 0 and self.stop_event.wait(delay):
                break
            if time.perf_counter() - start_time >= self.duration_seconds:
                break

            window, lane = divmod(self.issued, self.target_rate)
            outstanding = self._track_in_flight(1)
            if outstanding > self.max_in_flight:
                self._note_queued(window, lane, outstanding)
            self.worker_pool.submit(self._issue, window, lane)
            self.issued += 1

            if lane == self.target_rate - 1:
                self._report_progress(window, start_time)

        logger.info(
            f"Stopped issuing after {time.perf_counter() - start_time:.2f}s: "
            f"{self.issued} requests issued, {self.in_flight} in flight"
        )
        if self.saturated:
            logger.warning(
                f"{self.queued_issuances} of {self.issued} issuances waited for a free "
                f"worker; latencies exclude that wait and the offered rate was not sustained"
            )

    def _drain(self) -> None:
        # In-flight requests are never abandoned: wait for every issued one
        if self.worker_pool is not None:
            self.worker_pool.shutdown()

    def _issue(self, window: int, lane: int) -> None:
        try:
            self._run_iteration(f"Lane {lane}", window, track_in_flight=False)
        finally:
            self._track_in_flight(-1)

    def _note_queued(self, window: int, lane: int, outstanding: int) -> None:
        self.queued_issuances += 1
        if not self.saturated:
            self.saturated = True
            logger.warning(
                f"In-flight cap of {self.max_in_flight} reached at window {window} lane {lane} "
                f"({outstanding} outstanding): further issuances queue behind slow responses"
            )

    def _report_progress(self, window: int, start_time: float) -> None:
        elapsed = time.perf_counter() - start_time
        logger.info(
            f"Window {window + 1}: {self.issued} issued, {self.sink.get_total_records()} completed, "
            f"{self.in_flight} in flight ({elapsed:.1f}s elapsed)"
        )
