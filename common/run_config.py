"""
Run configuration for a single benchmark invocation.
"""

import math
from enum import Enum
from typing import NamedTuple, Optional, Sequence, Tuple

from common.errors import InvalidConfiguration
from configuration import (
    DEFAULT_CONCURRENCY,
    DEFAULT_ENDPOINT,
    DEFAULT_MAX_IN_FLIGHT,
    DEFAULT_WORKLOAD_PER_WORKER,
)


class LoadMode(Enum):
    """Concurrency discipline of a run."""

    CLOSED_LOOP = "closed-loop"
    OPEN_LOOP = "open-loop"


class RunConfig(NamedTuple):
    """Immutable description of one benchmark run.

    Closed-loop runs populate ``workload_per_worker``; open-loop runs populate
    ``target_rate`` and ``duration_seconds``. For open-loop runs ``concurrency``
    is the in-flight ceiling of the issuing pool, not a rate limiter.
    """

    mode: LoadMode
    concurrency: int
    endpoint: str
    params: Tuple[str, ...] = ()
    workload_per_worker: Optional[int] = None
    target_rate: Optional[int] = None
    duration_seconds: Optional[float] = None

    @classmethod
    def closed_loop(
        cls,
        concurrency: int = DEFAULT_CONCURRENCY,
        workload_per_worker: int = DEFAULT_WORKLOAD_PER_WORKER,
        endpoint: str = DEFAULT_ENDPOINT,
        params: Sequence[str] = (),
    ) -> "RunConfig":
        """Build and validate a fixed-workload configuration."""
        config = cls(
            mode=LoadMode.CLOSED_LOOP,
            concurrency=concurrency,
            endpoint=endpoint,
            params=tuple(params),
            workload_per_worker=workload_per_worker,
        )
        config.validate()
        return config

    @classmethod
    def open_loop(
        cls,
        target_rate: int,
        duration_seconds: float,
        endpoint: str = DEFAULT_ENDPOINT,
        params: Sequence[str] = (),
        max_in_flight: int = DEFAULT_MAX_IN_FLIGHT,
    ) -> "RunConfig":
        """Build and validate a fixed-rate configuration."""
        config = cls(
            mode=LoadMode.OPEN_LOOP,
            concurrency=max_in_flight,
            endpoint=endpoint,
            params=tuple(params),
            target_rate=target_rate,
            duration_seconds=duration_seconds,
        )
        config.validate()
        return config

    def validate(self) -> None:
        """Raise InvalidConfiguration unless the configuration is runnable."""
        if not isinstance(self.mode, LoadMode):
            raise InvalidConfiguration(f"Unknown mode: {self.mode!r}")
        if not _is_positive(self.concurrency):
            raise InvalidConfiguration(
                f"concurrency must be a positive integer, got {self.concurrency!r}"
            )
        if not self.endpoint:
            raise InvalidConfiguration("endpoint must not be empty")

        if self.mode is LoadMode.CLOSED_LOOP:
            if self.target_rate is not None or self.duration_seconds is not None:
                raise InvalidConfiguration(
                    "closed-loop runs take a workload per worker, not a rate and duration"
                )
            if not _is_positive(self.workload_per_worker):
                raise InvalidConfiguration(
                    f"workload per worker must be a positive integer, got {self.workload_per_worker!r}"
                )
        else:
            if self.workload_per_worker is not None:
                raise InvalidConfiguration(
                    "open-loop runs take a rate and duration, not a workload per worker"
                )
            if not _is_positive(self.target_rate):
                raise InvalidConfiguration(
                    f"target rate must be a positive integer, got {self.target_rate!r}"
                )
            if (
                isinstance(self.duration_seconds, bool)
                or not isinstance(self.duration_seconds, (int, float))
                or not self.duration_seconds > 0
                or not math.isfinite(self.duration_seconds)
            ):
                raise InvalidConfiguration(
                    f"duration must be a positive number of seconds, got {self.duration_seconds!r}"
                )

    @property
    def planned_requests(self) -> int:
        """Number of requests the run is expected to issue."""
        if self.mode is LoadMode.CLOSED_LOOP:
            return self.concurrency * self.workload_per_worker
        return math.ceil(self.target_rate * self.duration_seconds)

    def describe(self) -> str:
        """Human-readable configuration echo."""
        lines = [f"Mode: {self.mode.value}"]
        if self.mode is LoadMode.CLOSED_LOOP:
            lines.append(f"Concurrent workers: {self.concurrency}")
            lines.append(f"Requests per worker: {self.workload_per_worker}")
        else:
            lines.append(f"Target rate: {self.target_rate} requests/second")
            lines.append(f"Duration: {self.duration_seconds:g} s")
            lines.append(f"Max in-flight: {self.concurrency}")
        lines.append(f"Planned requests: {self.planned_requests}")
        lines.append(f"Endpoint: {self.endpoint}")
        lines.append(f"Parameters: {list(self.params)}")
        return "\n".join(lines)


def _is_positive(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and value > 0
