from __future__ import annotations

import logging
from collections import deque
from typing import Deque, Dict, Iterable, List, Optional

from .metrics import compute_metrics, compute_system_metrics
from .models import IDLE, Process, ScheduleResult, ScheduledSlice

logger = logging.getLogger(__name__)


def _arrival_order(processes: Iterable[Process]) -> List[Process]:
    # Ties on arrival are broken by pid so simultaneous arrivals have a fixed order.
    return sorted(processes, key=lambda p: (p.arrival_time, p.pid))


def schedule_fifo(processes: Iterable[Process]) -> List[ScheduledSlice]:
    """
    First-In First-Out (non-preemptive) scheduling.

    Processes run to completion in arrival order. Gaps between one process
    finishing and the next arriving are emitted as ``IDLE`` slices.
    """
    processes_sorted = _arrival_order(processes)
    timeline: List[ScheduledSlice] = []
    if not processes_sorted:
        return timeline

    time = processes_sorted[0].arrival_time

    for p in processes_sorted:
        if time < p.arrival_time:
            timeline.append(ScheduledSlice(pid=IDLE, start_time=time, end_time=p.arrival_time))
            time = p.arrival_time

        end_time = time + p.service_time
        timeline.append(ScheduledSlice(pid=p.pid, start_time=time, end_time=end_time))
        time = end_time

    logger.debug("FIFO scheduled %d processes into %d slices", len(processes_sorted), len(timeline))
    return timeline


def schedule_rr(processes: Iterable[Process], quantum: int) -> List[ScheduledSlice]:
    """
    Round Robin scheduling with a fixed time quantum.

    Processes that arrive while a slice runs (or exactly when it ends) are
    admitted to the ready queue before the preempted process is put back at
    its tail.
    """
    if quantum is None or quantum <= 0:
        raise ValueError(f"Round Robin requires a positive quantum, got {quantum!r}")

    processes_sorted = _arrival_order(processes)
    remaining: Dict[str, int] = {p.pid: p.service_time for p in processes_sorted}

    timeline: List[ScheduledSlice] = []
    ready: Deque[str] = deque()
    next_idx = 0
    time = processes_sorted[0].arrival_time if processes_sorted else 0

    def admit_arrivals(current_time: int) -> None:
        nonlocal next_idx
        while next_idx < len(processes_sorted) and processes_sorted[next_idx].arrival_time <= current_time:
            ready.append(processes_sorted[next_idx].pid)
            next_idx += 1

    admit_arrivals(time)

    while ready or next_idx < len(processes_sorted):
        if not ready:
            # CPU is idle until the next arrival
            next_arrival = processes_sorted[next_idx].arrival_time
            timeline.append(ScheduledSlice(pid=IDLE, start_time=time, end_time=next_arrival))
            time = next_arrival
            admit_arrivals(time)
            continue

        pid = ready.popleft()
        run_time = min(quantum, remaining[pid])
        timeline.append(ScheduledSlice(pid=pid, start_time=time, end_time=time + run_time))
        time += run_time

        admit_arrivals(time)

        remaining[pid] -= run_time
        if remaining[pid] > 0:
            ready.append(pid)

    logger.debug(
        "Round Robin (quantum=%d) scheduled %d processes into %d slices",
        quantum,
        len(processes_sorted),
        len(timeline),
    )
    return timeline


ALGORITHMS = {
    "fifo": schedule_fifo,
    "rr": schedule_rr,
}

ALIASES = {
    "fcfs": "fifo",
    "round-robin": "rr",
}

DISPLAY_NAMES = {
    "fifo": "FIFO",
    "rr": "Round Robin",
}


def resolve_algorithm(name: str) -> str:
    key = name.lower()
    key = ALIASES.get(key, key)
    if key not in ALGORITHMS:
        raise ValueError(f"Unknown algorithm '{name}' (choose from: {', '.join(ALGORITHMS)})")
    return key


def run_algorithm(name: str, processes: List[Process], quantum: Optional[int] = None) -> ScheduleResult:
    """
    Run one simulation: schedule ``processes`` with the named algorithm and
    derive metrics from the resulting timeline. The quantum is only passed
    to Round Robin.
    """
    key = resolve_algorithm(name)

    if key == "rr":
        timeline = schedule_rr(processes, quantum)
        used_quantum: Optional[int] = quantum
    else:
        timeline = schedule_fifo(processes)
        used_quantum = None

    return ScheduleResult(
        algorithm=DISPLAY_NAMES[key],
        quantum=used_quantum,
        timeline=timeline,
        report=compute_metrics(timeline, processes),
        system=compute_system_metrics(timeline),
    )
