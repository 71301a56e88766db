"""
Tests for the HTTP request executor.
"""

import unittest
import sys
import os
import time
from unittest.mock import Mock

import requests

# Add the parent directory to Python path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from configuration import RESOURCE_PATH
from systems.base import HttpTargetSystem
from systems.endpoints import dispatch


def _response(status_code):
    response = Mock()
    response.status_code = status_code
    return response


class TestHttpTargetSystem(unittest.TestCase):
    """Test cases for HttpTargetSystem.execute."""

    def setUp(self):
        self.session = Mock(spec=requests.Session)
        self.target = HttpTargetSystem("http://svc:8080/", timeout=5.0, session=self.session)

    def test_success_returns_latency(self):
        def slow_ok(*args, **kwargs):
            time.sleep(0.02)
            return _response(200)

        self.session.request.side_effect = slow_ok

        outcome = self.target.execute(dispatch("resource-get-by-id", ["3"]))

        self.assertTrue(outcome.ok)
        self.assertEqual(outcome.status_code, 200)
        self.assertGreaterEqual(outcome.latency_ms, 20.0)

    def test_request_composition(self):
        self.session.request.return_value = _response(201)
        description = dispatch("resource-post-json", ["latte", "4"])

        self.target.execute(description)

        self.session.request.assert_called_once_with(
            "POST",
            f"http://svc:8080{RESOURCE_PATH}",
            headers=dict(description.headers),
            data=description.body,
            timeout=5.0,
        )

    def test_any_2xx_is_success(self):
        for status in (200, 201, 204, 299):
            with self.subTest(status=status):
                self.session.request.return_value = _response(status)
                self.assertTrue(self.target.execute(dispatch("resource-get-all", [])).ok)

    def test_non_2xx_is_failure_with_status(self):
        for status in (301, 404, 500):
            with self.subTest(status=status):
                self.session.request.return_value = _response(status)

                outcome = self.target.execute(dispatch("resource-get-all", []))

                self.assertFalse(outcome.ok)
                self.assertEqual(outcome.status_code, status)
                self.assertEqual(outcome.reason, f"HTTP {status}")

    def test_connection_error_is_failure(self):
        self.session.request.side_effect = requests.ConnectionError("connection refused")

        outcome = self.target.execute(dispatch("resource-get-all", []))

        self.assertFalse(outcome.ok)
        self.assertIsNone(outcome.status_code)
        self.assertIn("ConnectionError", outcome.reason)

    def test_timeout_is_failure(self):
        self.session.request.side_effect = requests.Timeout("read timed out")

        outcome = self.target.execute(dispatch("resource-get-all", []))

        self.assertFalse(outcome.ok)
        self.assertTrue(outcome.reason.startswith("Timeout"))

    def test_no_retry(self):
        self.session.request.side_effect = requests.ConnectionError("reset")

        self.target.execute(dispatch("resource-get-all", []))

        self.assertEqual(self.session.request.call_count, 1)

    def test_response_released(self):
        response = _response(500)
        self.session.request.return_value = response

        self.target.execute(dispatch("resource-get-all", []))

        response.close.assert_called_once()

    def test_pool_size_has_floor(self):
        target = HttpTargetSystem("http://svc", pool_size=2)
        try:
            self.assertEqual(target.pool_size, 10)
            adapter = target.session.get_adapter("http://svc")
            self.assertEqual(adapter.max_retries.total, 0)
        finally:
            target.close()

    def test_context_manager_closes_session(self):
        with HttpTargetSystem("http://svc", session=self.session):
            pass

        self.session.close.assert_called_once()

    def test_connection_count(self):
        self.assertGreaterEqual(self.target.get_connection_count(), -1)


if __name__ == '__main__':
    unittest.main()
