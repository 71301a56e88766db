"""
HTTP target system: the request executor shared by every benchmark worker.
"""

import logging
import os
import time
from typing import Optional, Tuple

import psutil
import requests
from requests.adapters import HTTPAdapter

from common.errors import RequestFailure
from configuration import (
    HTTP_SUCCESS_MAX,
    HTTP_SUCCESS_MIN,
    MILLIS_PER_SECOND,
    MIN_POOL_CONNECTIONS,
    REQUEST_TIMEOUT_SECONDS,
)
from persistence.record import Failure, RequestOutcome, Success
from systems.endpoints import RequestDescription

logger = logging.getLogger(__name__)


class HttpTargetSystem:
    """Issues requests against the service under test through one shared session.

    The underlying ``requests.Session`` keeps a urllib3 connection pool that is
    safe to share between threads, so every worker reuses the same
    connections. The executor never retries: one call is one outcome.
    """

    def __init__(
        self,
        base_url: str,
        pool_size: int = MIN_POOL_CONNECTIONS,
        timeout: float = REQUEST_TIMEOUT_SECONDS,
        session: Optional[requests.Session] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.pool_size = max(pool_size, MIN_POOL_CONNECTIONS)
        self.session = session if session is not None else self._create_session()

        logger.info(
            f"Initialized HTTP target {self.base_url} "
            f"(pool_size={self.pool_size}, timeout={self.timeout}s)"
        )

    def _create_session(self) -> requests.Session:
        """Create a session whose pool can hold one connection per worker."""
        session = requests.Session()
        adapter = HTTPAdapter(
            pool_connections=self.pool_size,
            pool_maxsize=self.pool_size,
            max_retries=0,
        )
        session.mount("http://", adapter)
        session.mount("https://", adapter)
        return session

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    def close(self) -> None:
        """Release pooled connections."""
        self.session.close()

    def execute(self, description: RequestDescription) -> RequestOutcome:
        """Issue one request and classify the result.

        Returns:
            Success with the round-trip latency for a 2xx status, Failure with
            the status code or transport error description otherwise
        """
        try:
            latency_ms, status_code = self._round_trip(description)
        except RequestFailure as e:
            return Failure(e.reason, e.status_code)
        return Success(latency_ms, status_code)

    def _round_trip(self, description: RequestDescription) -> Tuple[float, int]:
        """Send the request; latency covers the request/response exchange only."""
        url = f"{self.base_url}{description.path}"

        start_time = time.perf_counter()
        try:
            response = self.session.request(
                description.method,
                url,
                headers=dict(description.headers),
                data=description.body,
                timeout=self.timeout,
            )
        except requests.Timeout as e:
            raise RequestFailure(f"Timeout after {self.timeout}s: {e}") from e
        except requests.RequestException as e:
            raise RequestFailure(f"{type(e).__name__}: {e}") from e
        latency_ms = (time.perf_counter() - start_time) * MILLIS_PER_SECOND

        try:
            status_code = response.status_code
        finally:
            response.close()

        if not HTTP_SUCCESS_MIN <= status_code <= HTTP_SUCCESS_MAX:
            raise RequestFailure(f"HTTP {status_code}", status_code)
        return latency_ms, status_code

    def get_connection_count(self) -> int:
        """Get number of established connections for this process, -1 if unknown."""
        try:
            process = psutil.Process(os.getpid())
            connections = process.net_connections(kind="inet")
            return sum(1 for c in connections if c.status == psutil.CONN_ESTABLISHED)
        except psutil.Error as e:
            logger.debug(f"Failed to get connection count: {e}")
            return -1
