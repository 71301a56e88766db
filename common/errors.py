"""
Error taxonomy for the load benchmark.
"""

from typing import Optional


class InvalidConfiguration(ValueError):
    """Run configuration rejected before any worker was started."""


class InvalidParameters(ValueError):
    """Endpoint parameters do not match the endpoint's arity or shape."""

    def __init__(self, endpoint: str, message: str):
        super().__init__(f"{endpoint}: {message}")
        self.endpoint = endpoint


class RequestFailure(Exception):
    """Non-2xx response or transport error for a single request."""

    def __init__(self, reason: str, status_code: Optional[int] = None):
        super().__init__(reason)
        self.reason = reason
        self.status_code = status_code
