"""
Integration tests against a real HTTP server running in this process.
"""

import json
import threading
import unittest
import sys
import os
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer

# Add the parent directory to Python path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from algorithms.closed_loop import ClosedLoop
from algorithms.open_loop import OpenLoop
from common.run_config import RunConfig
from common.target_factory import create_target_system
from configuration import ORDER_PATH, RESOURCE_PATH


class _CoffeeShopHandler(BaseHTTPRequestHandler):
    protocol_version = "HTTP/1.1"
    received = []
    received_lock = threading.Lock()

    def _reply(self, status):
        self.send_response(status)
        self.send_header("Content-Length", "0")
        self.end_headers()

    def do_GET(self):
        if self.path.startswith(RESOURCE_PATH) or self.path.startswith(ORDER_PATH):
            self._reply(200)
        else:
            self._reply(404)

    def do_POST(self):
        length = int(self.headers.get("Content-Length", 0))
        body = self.rfile.read(length)
        with self.received_lock:
            self.received.append((self.path, self.headers.get("Content-Type"), body))
        self._reply(201)

    def log_message(self, format, *args):
        pass


class TestAgainstLocalServer(unittest.TestCase):
    """Closed and open loop against a ThreadingHTTPServer."""

    @classmethod
    def setUpClass(cls):
        cls.server = ThreadingHTTPServer(("127.0.0.1", 0), _CoffeeShopHandler)
        cls.server.daemon_threads = True
        cls.thread = threading.Thread(target=cls.server.serve_forever, daemon=True)
        cls.thread.start()
        cls.base_url = f"http://127.0.0.1:{cls.server.server_address[1]}"

    @classmethod
    def tearDownClass(cls):
        cls.server.shutdown()
        cls.server.server_close()

    def setUp(self):
        with _CoffeeShopHandler.received_lock:
            _CoffeeShopHandler.received.clear()

    def test_closed_loop_get(self):
        config = RunConfig.closed_loop(4, 10, "resource-get-by-id", ["1"])

        with create_target_system(config, self.base_url, timeout=5.0) as target:
            report = ClosedLoop(config, target).execute()

        self.assertEqual(report.total, 40)
        self.assertEqual(report.success, 40)
        self.assertGreater(report.avg_latency_ms, 0.0)
        self.assertLessEqual(report.p50, report.p99)

    def test_closed_loop_order_post_body(self):
        config = RunConfig.closed_loop(2, 3, "order-post", ["alice", "latte,mocha"])

        with create_target_system(config, self.base_url, timeout=5.0) as target:
            report = ClosedLoop(config, target).execute()

        self.assertEqual(report.success, 6)
        self.assertEqual(len(_CoffeeShopHandler.received), 6)
        path, content_type, body = _CoffeeShopHandler.received[0]
        self.assertEqual(path, ORDER_PATH)
        self.assertTrue(content_type.startswith("application/json"))
        self.assertEqual(json.loads(body), {"customer": "alice", "items": ["latte", "mocha"]})

    def test_closed_loop_not_found_is_failure(self):
        config = RunConfig.closed_loop(2, 5, "resource-get-all")

        with create_target_system(config, self.base_url + "/missing", timeout=5.0) as target:
            report = ClosedLoop(config, target).execute()

        self.assertEqual(report.failure, 10)

    def test_open_loop_batch_upload(self):
        config = RunConfig.open_loop(20, 1.0, "resource-post-batch", ["latte", "mocha"],
                                     max_in_flight=32)

        with create_target_system(config, self.base_url, timeout=5.0) as target:
            report = OpenLoop(config, target).execute()

        self.assertEqual(report.total, 20)
        self.assertEqual(report.success, 20)
        _, content_type, body = _CoffeeShopHandler.received[0]
        self.assertTrue(content_type.startswith("multipart/form-data"))
        self.assertIn(b"latte\nmocha\n", body)

    def test_unreachable_service(self):
        config = RunConfig.closed_loop(2, 2)

        # Port 9 on loopback: nothing listens there
        with create_target_system(config, "http://127.0.0.1:9", timeout=2.0) as target:
            report = ClosedLoop(config, target).execute()

        self.assertEqual(report.total, 4)
        self.assertEqual(report.failure, 4)


if __name__ == '__main__':
    unittest.main()
