"""
Live Prometheus exposition of a running benchmark.
"""

import logging
from prometheus_client import CollectorRegistry, start_http_server, Counter, Histogram, Gauge

from configuration import MILLIS_PER_SECOND
from persistence.record import RequestOutcome

logger = logging.getLogger(__name__)


class SimplePrometheusExporter:
    """Exports outcome counters, latency and in-flight gauge for one run.

    Each exporter owns its registry so several can coexist in one process.
    """

    def __init__(self, port: int = 0):
        self.port = port
        self.server_started = False
        self.registry = CollectorRegistry()

        self.requests_total = Counter(
            'loadbench_requests_total', 'Total requests by outcome', ['outcome'],
            registry=self.registry,
        )
        self.request_duration = Histogram(
            'loadbench_request_duration_seconds', 'Round-trip time of successful requests',
            registry=self.registry,
        )
        self.in_flight = Gauge(
            'loadbench_in_flight_requests', 'Requests issued but not yet completed',
            registry=self.registry,
        )

    def start_server(self):
        """Start the Prometheus HTTP server."""
        if not self.server_started:
            try:
                start_http_server(self.port, registry=self.registry)
                self.server_started = True
                logger.info(f"Prometheus server started on port {self.port}")
            except OSError as e:
                logger.error(f"Failed to start Prometheus server: {e}")

    def record_outcome(self, outcome: RequestOutcome):
        """Record a request outcome."""
        if outcome.ok:
            self.requests_total.labels(outcome='success').inc()
            self.request_duration.observe(outcome.latency_ms / MILLIS_PER_SECOND)
        else:
            self.requests_total.labels(outcome='failure').inc()

    def update_in_flight(self, in_flight: int):
        """Update in-flight gauge."""
        self.in_flight.set(in_flight)
