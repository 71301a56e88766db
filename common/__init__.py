"""
Common utilities for the HTTP load benchmark.
"""

from .phase_manager import PhaseManager, RunPhase
from .worker_pool import WorkerPool

__all__ = ['PhaseManager', 'RunPhase', 'WorkerPool']
