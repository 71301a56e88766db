"""
Tests for the thread-based worker pool.
"""

import unittest
import sys
import os
import threading

# Add the parent directory to Python path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from common import WorkerPool


class TestWorkerPool(unittest.TestCase):
    """Test WorkerPool join-all and fire-and-forget behaviour."""

    def test_run_workers_joins_every_worker(self):
        pool = WorkerPool(4)
        seen = []
        lock = threading.Lock()

        def worker(worker_id):
            with lock:
                seen.append(worker_id)

        pool.run_workers(4, worker)
        pool.shutdown()

        self.assertEqual(sorted(seen), [0, 1, 2, 3])

    def test_crashed_worker_does_not_stop_the_others(self):
        pool = WorkerPool(3)
        finished = []

        def worker(worker_id):
            if worker_id == 1:
                raise RuntimeError("boom")
            finished.append(worker_id)

        with self.assertLogs('common.worker_pool', level='ERROR') as logs:
            pool.run_workers(3, worker)
        pool.shutdown()

        self.assertEqual(sorted(finished), [0, 2])
        self.assertTrue(any("Worker 1 fatal error" in line for line in logs.output))

    def test_shutdown_waits_for_submitted_tasks(self):
        pool = WorkerPool(2, thread_name_prefix="lane")
        done = threading.Event()
        futures = [pool.submit(done.wait, 1.0) for _ in range(3)]
        done.set()

        pool.shutdown()
        pool.shutdown()

        self.assertTrue(all(f.done() for f in futures))
        self.assertFalse(pool.is_running)


if __name__ == '__main__':
    unittest.main()
