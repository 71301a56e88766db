"""
Tests for the run lifecycle state machine.
"""

import unittest
import sys
import os

# Add the parent directory to Python path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from common import PhaseManager, RunPhase


class TestPhaseManager(unittest.TestCase):
    """Test PhaseManager transitions."""

    def test_full_lifecycle(self):
        manager = PhaseManager("closed-loop")
        self.assertTrue(manager.is_phase(RunPhase.IDLE))

        for phase in (RunPhase.RUNNING, RunPhase.DRAINING, RunPhase.FINISHED):
            manager.advance(phase)
            self.assertTrue(manager.is_phase(phase))

        info = manager.get_phase_info()
        self.assertEqual(info['phase'], 'finished')
        self.assertEqual(set(info['phase_start_ts']), {'idle', 'running', 'draining', 'finished'})

    def test_skipping_a_phase_is_rejected(self):
        manager = PhaseManager()

        with self.assertRaises(RuntimeError):
            manager.advance(RunPhase.DRAINING)
        self.assertTrue(manager.is_phase(RunPhase.IDLE))

    def test_finished_is_terminal(self):
        manager = PhaseManager()
        manager.advance(RunPhase.RUNNING)
        manager.advance(RunPhase.DRAINING)
        manager.advance(RunPhase.FINISHED)

        for phase in RunPhase:
            with self.subTest(phase=phase):
                with self.assertRaises(RuntimeError):
                    manager.advance(phase)

    def test_no_going_back(self):
        manager = PhaseManager()
        manager.advance(RunPhase.RUNNING)

        with self.assertRaises(RuntimeError):
            manager.advance(RunPhase.IDLE)
        with self.assertRaises(RuntimeError):
            manager.advance(RunPhase.RUNNING)

    def test_phase_duration(self):
        manager = PhaseManager()
        self.assertIsNone(manager.phase_duration(RunPhase.RUNNING))

        manager.advance(RunPhase.RUNNING)
        manager.advance(RunPhase.DRAINING)

        self.assertGreaterEqual(manager.phase_duration(RunPhase.RUNNING), 0.0)
        self.assertIn("phase=draining", repr(manager))


if __name__ == '__main__':
    unittest.main()
