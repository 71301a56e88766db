"""
Tests for the live Prometheus exporter.
"""

import unittest
import sys
import os

# Add the parent directory to Python path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from persistence.prom import SimplePrometheusExporter
from persistence.record import Failure, Success


class TestSimplePrometheusExporter(unittest.TestCase):
    """Test cases for SimplePrometheusExporter."""

    def setUp(self):
        self.exporter = SimplePrometheusExporter()

    def _value(self, name, labels=None):
        return self.exporter.registry.get_sample_value(name, labels or {})

    def test_record_outcomes(self):
        self.exporter.record_outcome(Success(250.0))
        self.exporter.record_outcome(Success(750.0))
        self.exporter.record_outcome(Failure("HTTP 500", 500))

        self.assertEqual(self._value('loadbench_requests_total', {'outcome': 'success'}), 2.0)
        self.assertEqual(self._value('loadbench_requests_total', {'outcome': 'failure'}), 1.0)
        self.assertEqual(self._value('loadbench_request_duration_seconds_count'), 2.0)
        self.assertAlmostEqual(self._value('loadbench_request_duration_seconds_sum'), 1.0)

    def test_in_flight_gauge(self):
        self.exporter.update_in_flight(7)

        self.assertEqual(self._value('loadbench_in_flight_requests'), 7.0)

    def test_exporters_do_not_share_registries(self):
        other = SimplePrometheusExporter()
        other.record_outcome(Success(1.0))

        self.assertIsNone(self._value('loadbench_requests_total', {'outcome': 'success'}))


if __name__ == '__main__':
    unittest.main()
