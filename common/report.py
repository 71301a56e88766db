"""
Report generation from a finalized metrics snapshot.
"""

import logging
from typing import Dict, NamedTuple, Optional

from common.metrics_utils import (
    calculate_latency_stats,
    calculate_percentage,
    calculate_requests_per_second,
)
from common.run_config import RunConfig
from configuration import MILLIS_PER_SECOND, REPORT_PERCENTILES
from persistence.metrics_aggregator import MetricsSnapshot

logger = logging.getLogger(__name__)


class Report(NamedTuple):
    """Immutable summary of one run."""

    mode: str
    endpoint: str
    elapsed_seconds: float
    total: int
    success: int
    failure: int
    success_percent: float
    failure_percent: float
    avg_latency_ms: float
    throughput_rps: float
    percentiles_ms: Dict[int, float]
    peak_in_flight: Optional[int] = None
    saturated: bool = False

    @property
    def p50(self) -> float:
        return self.percentiles_ms[50]

    @property
    def p90(self) -> float:
        return self.percentiles_ms[90]

    @property
    def p95(self) -> float:
        return self.percentiles_ms[95]

    @property
    def p99(self) -> float:
        return self.percentiles_ms[99]


def generate_report(
    snapshot: MetricsSnapshot,
    elapsed_seconds: float,
    run_config: RunConfig,
    peak_in_flight: Optional[int] = None,
    saturated: bool = False,
) -> Report:
    """Summarize a sealed snapshot. The snapshot is not modified."""
    latency_stats = calculate_latency_stats(snapshot.latencies_ms, REPORT_PERCENTILES)

    return Report(
        mode=run_config.mode.value,
        endpoint=run_config.endpoint,
        elapsed_seconds=elapsed_seconds,
        total=snapshot.total,
        success=snapshot.success,
        failure=snapshot.failure,
        success_percent=calculate_percentage(snapshot.success, snapshot.total),
        failure_percent=calculate_percentage(snapshot.failure, snapshot.total),
        avg_latency_ms=latency_stats['avg'],
        throughput_rps=calculate_requests_per_second(snapshot.total, elapsed_seconds),
        percentiles_ms={p: latency_stats[f'p{p}'] for p in REPORT_PERCENTILES},
        peak_in_flight=peak_in_flight,
        saturated=saturated,
    )


def render_report(report: Report) -> str:
    """Render the human-readable result summary."""
    avg_latency = f"{report.avg_latency_ms:.2f} ms" if report.success else "N/A"

    lines = [
        "=== Benchmark Results ===",
        f"Mode: {report.mode}",
        f"Endpoint: {report.endpoint}",
        f"Total time: {report.elapsed_seconds * MILLIS_PER_SECOND:.0f} ms",
        f"Total requests: {report.total}",
        f"Success: {report.success} ({report.success_percent:.2f}%)",
        f"Failure: {report.failure} ({report.failure_percent:.2f}%)",
        f"Average latency: {avg_latency}",
        f"Throughput: {report.throughput_rps:.2f} requests/second",
    ]
    if report.peak_in_flight is not None:
        lines.append(f"Peak in-flight requests: {report.peak_in_flight}")
    if report.saturated:
        lines.append("WARNING: in-flight cap reached; the target rate was not sustained")
    lines.append("Latency distribution:")
    for p, value in report.percentiles_ms.items():
        lines.append(f"  p{p}: {value:.2f} ms")
    lines.append("=========================")
    return "\n".join(lines)
