"""
Metrics sink shared by all benchmark workers of a run.
"""

import threading
import logging
from typing import List, NamedTuple, Optional, Tuple

from persistence.record import RequestOutcome

logger = logging.getLogger(__name__)


class MetricsSnapshot(NamedTuple):
    """Final, read-only view of a sink."""

    total: int
    success: int
    failure: int
    latencies_ms: Tuple[float, ...]


class MetricsSink:
    """Accumulates request outcomes from any number of concurrent workers.

    A single lock guards the counters and the latency list; it is held only
    for the duration of one update, never across a request.
    """

    def __init__(self, exporter=None):
        """Initialize an empty sink.

        Args:
            exporter: Optional live exporter notified of every recorded outcome
        """
        self.total = 0
        self.success = 0
        self.failure = 0
        self.latencies_ms: List[float] = []
        self.exporter = exporter
        self.lock = threading.Lock()
        self._sealed = False
        self._snapshot: Optional[MetricsSnapshot] = None

    def record(self, outcome: RequestOutcome) -> None:
        """Record one outcome. Latencies are kept for successes only.

        Raises:
            RuntimeError: if the sink has already been sealed by snapshot()
        """
        with self.lock:
            if self._sealed:
                raise RuntimeError("MetricsSink already sealed; record() after snapshot()")
            self.total += 1
            if outcome.ok:
                self.success += 1
                self.latencies_ms.append(outcome.latency_ms)
            else:
                self.failure += 1

        if self.exporter is not None:
            self.exporter.record_outcome(outcome)

    def snapshot(self) -> MetricsSnapshot:
        """Seal the sink and return its final state.

        Must only be called once every worker has been joined. Repeated calls
        return the same snapshot.
        """
        with self.lock:
            if self._snapshot is None:
                self._sealed = True
                self._snapshot = MetricsSnapshot(
                    total=self.total,
                    success=self.success,
                    failure=self.failure,
                    latencies_ms=tuple(self.latencies_ms),
                )
                logger.debug(
                    f"Sealed metrics sink: {self.total} total, "
                    f"{self.success} success, {self.failure} failure"
                )
            return self._snapshot

    def get_total_records(self) -> int:
        """Current number of recorded outcomes."""
        with self.lock:
            return self.total
