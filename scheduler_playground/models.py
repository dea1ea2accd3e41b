from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional

# Reserved owner for slices where no process holds the CPU.
IDLE = "IDLE"


@dataclass(frozen=True)
class Process:
    pid: str
    arrival_time: int
    service_time: int


@dataclass(frozen=True)
class ScheduledSlice:
    """
    One contiguous slice of processor ownership in the Gantt chart.

    ``pid`` is either a process id or the ``IDLE`` sentinel.
    """

    pid: str
    start_time: int
    end_time: int

    @property
    def duration(self) -> int:
        return self.end_time - self.start_time

    @property
    def is_idle(self) -> bool:
        return self.pid == IDLE


@dataclass
class ProcessMetrics:
    pid: str
    arrival_time: int
    service_time: int
    start_time: int
    completion_time: int
    waiting_time: int
    turnaround_time: int
    response_time: int


@dataclass
class MetricsReport:
    rows: List[ProcessMetrics] = field(default_factory=list)
    avg_waiting: float = 0.0
    avg_turnaround: float = 0.0
    avg_response: float = 0.0


@dataclass
class SystemMetrics:
    cpu_busy_time: int
    idle_time: int
    makespan: int
    throughput: float
    cpu_utilization: float


@dataclass
class ScheduleResult:
    algorithm: str
    quantum: Optional[int]
    timeline: List[ScheduledSlice] = field(default_factory=list)
    report: MetricsReport = field(default_factory=MetricsReport)
    system: Optional[SystemMetrics] = None
