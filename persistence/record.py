"""
Per-request outcome records for the load benchmark.
"""

from typing import NamedTuple, Optional, Union


class Success(NamedTuple):
    """A request answered with a 2xx status."""

    latency_ms: float
    status_code: int = 200

    @property
    def ok(self) -> bool:
        return True


class Failure(NamedTuple):
    """A request that did not succeed.

    ``status_code`` is set when the service answered with a non-2xx status and
    is None for transport errors, timeouts and rejected dispatches.
    """

    reason: str
    status_code: Optional[int] = None

    @property
    def ok(self) -> bool:
        return False


RequestOutcome = Union[Success, Failure]
