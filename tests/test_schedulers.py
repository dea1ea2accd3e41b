import pytest

from scheduler_playground.algorithms import run_algorithm, schedule_fifo, schedule_rr
from scheduler_playground.models import IDLE, Process
from scheduler_playground.workload_io import default_processes


def _procs():
    return [
        Process("P1", arrival_time=0, service_time=5),
        Process("P2", arrival_time=1, service_time=3),
        Process("P3", arrival_time=2, service_time=8),
    ]


def _as_tuples(timeline):
    return [(s.pid, s.start_time, s.end_time) for s in timeline]


def _assert_contiguous(processes, timeline):
    assert timeline[0].start_time == min(p.arrival_time for p in processes)
    for prev, nxt in zip(timeline, timeline[1:]):
        assert prev.end_time == nxt.start_time
    assert all(s.end_time > s.start_time for s in timeline)


def _assert_conserved(processes, timeline):
    for p in processes:
        assert sum(s.duration for s in timeline if s.pid == p.pid) == p.service_time


def test_fifo_single_process():
    assert _as_tuples(schedule_fifo([Process("P1", 0, 4)])) == [("P1", 0, 4)]


def test_fifo_order():
    timeline = schedule_fifo([Process("P1", 0, 5), Process("P2", 2, 3)])
    assert _as_tuples(timeline) == [("P1", 0, 5), ("P2", 5, 8)]


def test_fifo_idle_gap():
    timeline = schedule_fifo([Process("P2", 5, 2), Process("P1", 0, 2)])
    assert _as_tuples(timeline) == [("P1", 0, 2), (IDLE, 2, 5), ("P2", 5, 7)]


def test_fifo_starts_at_first_arrival():
    timeline = schedule_fifo([Process("P1", 3, 2), Process("P2", 4, 1)])
    assert _as_tuples(timeline) == [("P1", 3, 5), ("P2", 5, 6)]


def test_fifo_ties_broken_by_pid():
    timeline = schedule_fifo([Process("B", 0, 1), Process("C", 0, 1), Process("A", 0, 1)])
    assert [s.pid for s in timeline] == ["A", "B", "C"]


def test_fifo_is_deterministic():
    procs = default_processes()
    first = schedule_fifo(procs)
    assert schedule_fifo(list(reversed(procs))) == first
    assert schedule_fifo(procs) == first


def test_fifo_convoy_effect():
    res = run_algorithm("fifo", [Process("P1", 0, 10), Process("P2", 1, 1), Process("P3", 2, 1)])
    waits = {r.pid: r.waiting_time for r in res.report.rows}
    assert waits == {"P1": 0, "P2": 9, "P3": 9}

    rr = run_algorithm("rr", [Process("P1", 0, 10), Process("P2", 1, 1), Process("P3", 2, 1)], quantum=1)
    assert rr.report.avg_waiting < res.report.avg_waiting


def test_empty_process_set():
    assert schedule_fifo([]) == []
    assert schedule_rr([], quantum=2) == []


def test_rr_quantum_2():
    timeline = schedule_rr([Process("P1", 0, 5), Process("P2", 1, 3)], quantum=2)
    assert _as_tuples(timeline) == [
        ("P1", 0, 2),
        ("P2", 2, 4),
        ("P1", 4, 6),
        ("P2", 6, 7),
        ("P1", 7, 8),
    ]


def test_rr_arrival_admitted_before_preempted_process():
    # P2 arrives exactly when P1's quantum ends and runs before P1 resumes.
    timeline = schedule_rr([Process("P1", 0, 4), Process("P2", 2, 2)], quantum=2)
    assert _as_tuples(timeline) == [("P1", 0, 2), ("P2", 2, 4), ("P1", 4, 6)]


def test_rr_idle_gap():
    timeline = schedule_rr([Process("P1", 0, 2), Process("P2", 5, 3)], quantum=2)
    assert _as_tuples(timeline) == [("P1", 0, 2), (IDLE, 2, 5), ("P2", 5, 7), ("P2", 7, 8)]


def test_rr_initial_admission_uses_first_arrival():
    timeline = schedule_rr([Process("B", 4, 2), Process("A", 4, 2), Process("C", 6, 1)], quantum=1)
    assert _as_tuples(timeline) == [
        ("A", 4, 5),
        ("B", 5, 6),
        ("A", 6, 7),
        ("C", 7, 8),
        ("B", 8, 9),
    ]


def test_rr_rejects_non_positive_quantum():
    with pytest.raises(ValueError):
        schedule_rr(_procs(), quantum=0)
    with pytest.raises(ValueError):
        run_algorithm("rr", _procs(), quantum=None)


def test_rr_quantum_bound():
    procs = default_processes()
    for quantum in (1, 2, 3, 5):
        timeline = schedule_rr(procs, quantum=quantum)
        for idx, s in enumerate(timeline):
            if s.is_idle:
                continue
            later = [t for t in timeline[idx + 1:] if t.pid == s.pid]
            assert s.duration <= quantum
            if later:
                assert s.duration == quantum


def test_rr_large_quantum_matches_fifo():
    procs = [Process("P1", 0, 3), Process("P2", 5, 2), Process("P3", 10, 4)]
    assert schedule_rr(procs, quantum=10) == schedule_fifo(procs)


@pytest.mark.parametrize("quantum", [1, 2, 4, 7, 20])
def test_schedules_cover_and_conserve(quantum):
    procs = default_processes() + [Process("P6", 60, 3), Process("P7", 60, 1)]
    for timeline in (schedule_fifo(procs), schedule_rr(procs, quantum=quantum)):
        _assert_contiguous(procs, timeline)
        _assert_conserved(procs, timeline)


@pytest.mark.parametrize("name", ["fifo", "rr"])
def test_waiting_is_never_negative(name):
    res = run_algorithm(name, default_processes(), quantum=3)
    assert all(r.waiting_time >= 0 for r in res.report.rows)


def test_run_algorithm_dispatch():
    res = run_algorithm("FCFS", _procs(), quantum=4)
    assert res.algorithm == "FIFO"
    assert res.quantum is None

    res = run_algorithm("rr", _procs(), quantum=4)
    assert res.algorithm == "Round Robin"
    assert res.quantum == 4

    assert run_algorithm("Round-Robin", _procs(), quantum=4).algorithm == "Round Robin"
    assert res.system.cpu_busy_time == sum(p.service_time for p in _procs())

    with pytest.raises(ValueError):
        run_algorithm("sjf", _procs())
