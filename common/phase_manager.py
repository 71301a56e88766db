"""
Phase manager tracking the lifecycle of one scheduler run.
"""

import time
import logging
import threading
from enum import Enum
from typing import Optional, Dict, Any

logger = logging.getLogger(__name__)


class RunPhase(Enum):
    IDLE = "idle"
    RUNNING = "running"
    DRAINING = "draining"
    FINISHED = "finished"


# Each phase may only advance to the next one; FINISHED is terminal
_NEXT_PHASE = {
    RunPhase.IDLE: RunPhase.RUNNING,
    RunPhase.RUNNING: RunPhase.DRAINING,
    RunPhase.DRAINING: RunPhase.FINISHED,
}


class PhaseManager:
    """Enforces Idle -> Running -> Draining -> Finished and records when each began."""

    def __init__(self, name: str = "run"):
        """Initialize the phase manager in IDLE.

        Args:
            name: Label used in log lines (e.g. "closed-loop")
        """
        self.name = name
        self.phase: RunPhase = RunPhase.IDLE
        self.phase_start_ts: Dict[RunPhase, float] = {RunPhase.IDLE: time.time()}
        self._lock = threading.Lock()

    def advance(self, target: RunPhase) -> None:
        """Move to ``target``, which must be the phase directly after the current one.

        Raises:
            RuntimeError: if the transition would skip a phase or leave FINISHED
        """
        with self._lock:
            expected = _NEXT_PHASE.get(self.phase)
            if target is not expected:
                raise RuntimeError(
                    f"Illegal {self.name} transition: {self.phase.value} -> {target.value}"
                )
            self.phase = target
            self.phase_start_ts[target] = time.time()

        logger.debug(f"{self.name}: entered {target.value}")

    def is_phase(self, phase: RunPhase) -> bool:
        return self.phase is phase

    def phase_duration(self, phase: RunPhase) -> Optional[float]:
        """Seconds spent in ``phase``, None if it was never entered."""
        start = self.phase_start_ts.get(phase)
        if start is None:
            return None
        following = _NEXT_PHASE.get(phase)
        end = self.phase_start_ts.get(following) if following else None
        return (end or time.time()) - start

    def get_phase_info(self) -> Dict[str, Any]:
        """Get current phase information."""
        return {
            'name': self.name,
            'phase': self.phase.value,
            'phase_start_ts': {p.value: ts for p, ts in self.phase_start_ts.items()},
        }

    def __repr__(self) -> str:
        return f"PhaseManager(name='{self.name}', phase={self.phase.value})"
