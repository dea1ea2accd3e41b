"""
Scheduler Playground package.

Simulates FIFO and Round Robin CPU scheduling over a fixed set of
processes and reports per-process waiting and turnaround times.
"""

from .algorithms import run_algorithm, schedule_fifo, schedule_rr
from .metrics import compute_metrics
from .models import IDLE, Process, ScheduledSlice

__all__ = [
    "IDLE",
    "Process",
    "ScheduledSlice",
    "compute_metrics",
    "run_algorithm",
    "schedule_fifo",
    "schedule_rr",
]
