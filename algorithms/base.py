"""
Common lifecycle of the closed-loop and open-loop load schedulers.
"""

import time
import logging
import threading
from typing import Optional

from common.errors import InvalidParameters
from common.phase_manager import PhaseManager, RunPhase
from common.report import Report, generate_report
from common.run_config import RunConfig
from persistence.metrics_aggregator import MetricsSink
from persistence.record import Failure, RequestOutcome
from systems.base import HttpTargetSystem
from systems.endpoints import dispatch

logger = logging.getLogger(__name__)


class LoadScheduler:
    """Drives Dispatch -> Execute -> Record under a mode-specific discipline.

    Subclasses implement ``_run`` (return once the stopping condition is
    reached) and ``_drain`` (return once no worker can record any more).
    A scheduler runs exactly once.
    """

    def __init__(
        self,
        run_config: RunConfig,
        target_system: HttpTargetSystem,
        sink: Optional[MetricsSink] = None,
        exporter=None,
    ):
        # Fails with InvalidConfiguration before anything is spawned
        run_config.validate()

        self.run_config = run_config
        self.target_system = target_system
        self.exporter = exporter
        self.sink = sink if sink is not None else MetricsSink(exporter)
        self.phase_manager = PhaseManager(run_config.mode.value)
        self.stop_event = threading.Event()

        self.elapsed_seconds: Optional[float] = None
        self.in_flight = 0
        self.peak_in_flight = 0
        self.saturated = False
        self._in_flight_lock = threading.Lock()

    def execute(self) -> Report:
        """Run to completion and return the report.

        Raises:
            RuntimeError: if this scheduler has already been executed
        """
        if not self.phase_manager.is_phase(RunPhase.IDLE):
            raise RuntimeError(f"{type(self).__name__} instances cannot be reused")

        self.phase_manager.advance(RunPhase.RUNNING)
        start_time = time.perf_counter()
        try:
            self._run()
        except KeyboardInterrupt:
            logger.warning("Interrupted by user: stopping new requests and draining")
            self.stop()

        self.phase_manager.advance(RunPhase.DRAINING)
        self._drain()
        self.phase_manager.advance(RunPhase.FINISHED)
        self.elapsed_seconds = time.perf_counter() - start_time

        snapshot = self.sink.snapshot()
        logger.info(
            f"{self.run_config.mode.value} run finished in {self.elapsed_seconds:.2f}s: "
            f"{snapshot.total} requests, {snapshot.failure} failed "
            f"(running {self.phase_manager.phase_duration(RunPhase.RUNNING):.2f}s, "
            f"draining {self.phase_manager.phase_duration(RunPhase.DRAINING):.2f}s)"
        )
        logger.debug(f"Phase timeline: {self.phase_manager.get_phase_info()}")
        return generate_report(
            snapshot,
            self.elapsed_seconds,
            self.run_config,
            peak_in_flight=self.peak_in_flight,
            saturated=self.saturated,
        )

    def stop(self) -> None:
        """Ask the scheduler to stop issuing new requests."""
        self.stop_event.set()

    def _run(self) -> None:
        raise NotImplementedError

    def _drain(self) -> None:
        raise NotImplementedError

    def _run_iteration(
        self, worker_label: str, iteration: int, track_in_flight: bool = True
    ) -> RequestOutcome:
        """One Dispatch -> Execute -> Record step. Never raises for a per-request error.

        With ``track_in_flight=False`` the caller has already counted the
        request as in flight and releases it after this returns.
        """
        try:
            description = dispatch(self.run_config.endpoint, self.run_config.params)
            if track_in_flight:
                self._track_in_flight(1)
            try:
                outcome = self.target_system.execute(description)
            finally:
                if track_in_flight:
                    self._track_in_flight(-1)
        except InvalidParameters as e:
            outcome = Failure(f"Invalid parameters: {e}")
        except Exception as e:
            outcome = Failure(f"{type(e).__name__}: {e}")

        if not outcome.ok:
            logger.error(f"{worker_label} request {iteration} failed: {outcome.reason}")
        self.sink.record(outcome)
        return outcome

    def _track_in_flight(self, delta: int) -> int:
        """Adjust the in-flight count and return the new value."""
        with self._in_flight_lock:
            self.in_flight += delta
            if self.in_flight > self.peak_in_flight:
                self.peak_in_flight = self.in_flight
            current = self.in_flight
        if self.exporter is not None:
            self.exporter.update_in_flight(current)
        return current
