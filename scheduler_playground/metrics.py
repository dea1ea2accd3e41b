from __future__ import annotations

from typing import Dict, Iterable, List

from .models import MetricsReport, Process, ProcessMetrics, ScheduledSlice, SystemMetrics


def compute_metrics(slices: List[ScheduledSlice], processes: Iterable[Process]) -> MetricsReport:
    """
    Derive per-process waiting/turnaround times and their averages from a
    timeline.

    The completion time of a process is the end of its last slice and its
    start time the start of its first one. No consistency check is made
    between ``slices`` and ``processes``: a process that owns no slice gets
    ``completion_time == 0`` and ``start_time == arrival_time``, which can
    produce a negative turnaround.
    """
    first_start: Dict[str, int] = {}
    last_end: Dict[str, int] = {}
    for sl in slices:
        if sl.is_idle:
            continue
        first_start.setdefault(sl.pid, sl.start_time)
        last_end[sl.pid] = sl.end_time

    rows: List[ProcessMetrics] = []
    for p in processes:
        completion_time = last_end.get(p.pid, 0)
        start_time = first_start.get(p.pid, p.arrival_time)
        turnaround_time = completion_time - p.arrival_time
        rows.append(
            ProcessMetrics(
                pid=p.pid,
                arrival_time=p.arrival_time,
                service_time=p.service_time,
                start_time=start_time,
                completion_time=completion_time,
                waiting_time=turnaround_time - p.service_time,
                turnaround_time=turnaround_time,
                response_time=start_time - p.arrival_time,
            )
        )

    if not rows:
        return MetricsReport(rows=[], avg_waiting=0.0, avg_turnaround=0.0, avg_response=0.0)

    n = len(rows)
    return MetricsReport(
        rows=rows,
        avg_waiting=sum(r.waiting_time for r in rows) / n,
        avg_turnaround=sum(r.turnaround_time for r in rows) / n,
        avg_response=sum(r.response_time for r in rows) / n,
    )


def compute_system_metrics(timeline: List[ScheduledSlice]) -> SystemMetrics:
    """
    Compute CPU busy/idle time, throughput and utilization for a timeline.
    """
    if not timeline:
        return SystemMetrics(cpu_busy_time=0, idle_time=0, makespan=0, throughput=0.0, cpu_utilization=0.0)

    makespan = timeline[-1].end_time - timeline[0].start_time
    cpu_busy_time = sum(sl.duration for sl in timeline if not sl.is_idle)
    idle_time = sum(sl.duration for sl in timeline if sl.is_idle)
    completed = len({sl.pid for sl in timeline if not sl.is_idle})

    throughput = completed / makespan if makespan > 0 else 0.0
    cpu_utilization = cpu_busy_time / makespan if makespan > 0 else 0.0

    return SystemMetrics(
        cpu_busy_time=cpu_busy_time,
        idle_time=idle_time,
        makespan=makespan,
        throughput=throughput,
        cpu_utilization=cpu_utilization,
    )
