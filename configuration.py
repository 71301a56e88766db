"""
Configuration constants for the HTTP load benchmark harness.

This module contains all configuration parameters including:
- Target service location and resource paths
- Transport settings (timeouts, connection pool sizing)
- Run defaults for the closed-loop and open-loop entry points
- Request encoding constants used by the endpoint dispatcher
- Report parameters
"""

import os
from typing import Tuple

# =============================================================================
# TARGET SERVICE CONFIGURATION
# =============================================================================

# Base URL of the service under test
BASE_URL: str = os.getenv("LOADBENCH_BASE_URL", "http://localhost:8080")

# Collection paths exposed by the service
RESOURCE_PATH: str = os.getenv("LOADBENCH_RESOURCE_PATH", "/coffee")
ORDER_PATH: str = os.getenv("LOADBENCH_ORDER_PATH", "/order")

# =============================================================================
# TRANSPORT CONFIGURATION
# =============================================================================

# Per-request timeout, shared by every worker
REQUEST_TIMEOUT_SECONDS: float = float(os.getenv("LOADBENCH_REQUEST_TIMEOUT_SECONDS", "30"))

# Lower bound for the urllib3 pool size (raised to the run's concurrency)
MIN_POOL_CONNECTIONS: int = 10

# =============================================================================
# CLOSED-LOOP DEFAULTS
# =============================================================================

DEFAULT_CONCURRENCY: int = 10
DEFAULT_WORKLOAD_PER_WORKER: int = 100
DEFAULT_ENDPOINT: str = "resource-get-all"

# =============================================================================
# OPEN-LOOP DEFAULTS
# =============================================================================

# Upper bound on simultaneously in-flight requests in fixed-rate mode.
# Must stay well above rate x expected latency or issuance gets queued.
DEFAULT_MAX_IN_FLIGHT: int = 1000

# Length of one scheduling window
WINDOW_SECONDS: float = 1.0

# =============================================================================
# REQUEST ENCODING
# =============================================================================

PRICE_CURRENCY: str = "CNY"
JSON_CONTENT_TYPE: str = "application/json; charset=utf-8"
FORM_CONTENT_TYPE: str = "application/x-www-form-urlencoded"
BATCH_FIELD_NAME: str = "file"
BATCH_FILENAME: str = "coffees.txt"
MULTIPART_BOUNDARY: str = "----LoadBenchBoundary7MA4YWxkTrZu0gW"

# =============================================================================
# HTTP STATUS CODES
# =============================================================================

HTTP_SUCCESS_MIN: int = 200
HTTP_SUCCESS_MAX: int = 299

# =============================================================================
# REPORTING
# =============================================================================

REPORT_PERCENTILES: Tuple[int, ...] = (50, 90, 95, 99)
PROGRESS_INTERVAL: int = 50  # Log worker progress every N iterations
MILLIS_PER_SECOND: float = 1000.0

# =============================================================================
# CLI DEFAULTS
# =============================================================================

DEFAULT_LOG_LEVEL: str = "INFO"
LOG_FORMAT: str = "%(asctime)s - %(levelname)s - %(message)s"
