"""
Factory module for creating the HTTP target system for a run.
"""

import logging
from typing import Optional

# Keep urllib3 pool chatter out of the benchmark log
logging.getLogger('urllib3').setLevel(logging.WARNING)
logging.getLogger('urllib3.connectionpool').setLevel(logging.ERROR)

from systems.base import HttpTargetSystem
from common.run_config import RunConfig
from configuration import BASE_URL, REQUEST_TIMEOUT_SECONDS

logger = logging.getLogger(__name__)


def create_target_system(
    run_config: RunConfig,
    base_url: Optional[str] = None,
    timeout: Optional[float] = None,
) -> HttpTargetSystem:
    """Create the shared target system sized for the run.

    Args:
        run_config: Validated run configuration; its concurrency sizes the pool
        base_url: Service base URL (default: from configuration)
        timeout: Per-request timeout in seconds (default: from configuration)

    Returns:
        HttpTargetSystem with a connection pool of ``run_config.concurrency``
    """
    return HttpTargetSystem(
        base_url=base_url or BASE_URL,
        pool_size=run_config.concurrency,
        timeout=timeout if timeout is not None else REQUEST_TIMEOUT_SECONDS,
    )
