"""
Shared utilities for benchmark metrics calculations: throughput, latency and percentiles.
"""

import logging
from typing import Dict, Iterable, Sequence

import numpy as np
import pandas as pd

from configuration import REPORT_PERCENTILES

logger = logging.getLogger(__name__)


def calculate_requests_per_second(request_count: int, duration_seconds: float) -> float:
    """
    Calculate requests per second (RPS) from request count and duration.

    Args:
        request_count: Number of requests
        duration_seconds: Duration in seconds

    Returns:
        Requests per second (RPS), 0 for a non-positive duration
    """
    if duration_seconds <= 0:
        return 0.0
    return request_count / duration_seconds


def calculate_percentage(part: int, total: int) -> float:
    """Share of ``part`` in ``total`` in percent, 0 when total is 0."""
    if total <= 0:
        return 0.0
    return part * 100.0 / total


def calculate_percentile(sorted_latencies: Sequence[float], percentile: int) -> float:
    """
    Pick a percentile from an ascending-sorted sample by floor index.

    The value is the element at 0-based index ``floor(count * percentile / 100)``;
    there is no interpolation between neighbours. Results stay comparable with
    earlier runs of the harness that used the same rule.

    Args:
        sorted_latencies: Latencies sorted ascending
        percentile: Integer percentile in [0, 100]

    Returns:
        The selected latency, 0 for an empty sample
    """
    count = len(sorted_latencies)
    if count == 0:
        return 0.0
    # Integer arithmetic keeps the floor exact
    index = min(count * percentile // 100, count - 1)
    return float(sorted_latencies[index])


def calculate_latency_stats(
    latencies_ms: Iterable[float],
    percentiles: Sequence[int] = REPORT_PERCENTILES,
) -> Dict[str, float]:
    """
    Calculate latency statistics (mean and floor-indexed percentiles).

    Args:
        latencies_ms: Latencies of successful requests, in any order
        percentiles: Percentiles to compute (default: from configuration)

    Returns:
        Dictionary with 'avg' and one 'p<K>' entry per percentile; every value
        is 0.0 when there are no latencies
    """
    latencies = pd.Series(list(latencies_ms), dtype="float64")

    if latencies.empty:
        stats = {'avg': 0.0}
        stats.update({f'p{p}': 0.0 for p in percentiles})
        return stats

    sorted_latencies = np.sort(latencies.to_numpy())
    stats = {'avg': float(latencies.mean())}
    for p in percentiles:
        stats[f'p{p}'] = calculate_percentile(sorted_latencies, p)
    return stats
