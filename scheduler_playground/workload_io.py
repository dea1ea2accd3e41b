from __future__ import annotations

import csv
import json
from pathlib import Path
from typing import Iterable, List

from .models import IDLE, Process


def default_processes() -> List[Process]:
    """
    Demo workload used when no workload file is given.
    """
    return [
        Process("P1", arrival_time=1, service_time=7),
        Process("P2", arrival_time=3, service_time=12),
        Process("P3", arrival_time=5, service_time=6),
        Process("P4", arrival_time=8, service_time=9),
        Process("P5", arrival_time=10, service_time=5),
    ]


def load_workload(path: str | Path) -> List[Process]:
    """
    Load a workload from a JSON or CSV file into a validated list of
    Process objects.
    """
    path = Path(path)
    suffix = path.suffix.lower()

    if suffix == ".json":
        processes = _load_json(path)
    elif suffix == ".csv":
        processes = _load_csv(path)
    else:
        raise ValueError(f"Unsupported workload format: {suffix} (use .json or .csv)")

    validate_processes(processes)
    return processes


def validate_processes(processes: Iterable[Process]) -> None:
    """
    Check the invariants the schedulers rely on. Raises ValueError on the
    first offending process.
    """
    seen: set[str] = set()
    for p in processes:
        if not p.pid:
            raise ValueError("Process id must not be empty")
        if p.pid == IDLE:
            raise ValueError(f"Process id '{IDLE}' is reserved for idle time")
        if p.pid in seen:
            raise ValueError(f"Duplicate process id '{p.pid}'")
        if p.arrival_time < 0:
            raise ValueError(f"Process '{p.pid}' has negative arrival time {p.arrival_time}")
        if p.service_time <= 0:
            raise ValueError(f"Process '{p.pid}' must have a positive service time, got {p.service_time}")
        seen.add(p.pid)


def _load_json(path: Path) -> List[Process]:
    with path.open("r", encoding="utf-8") as f:
        try:
            raw = json.load(f)
        except json.JSONDecodeError as exc:
            raise ValueError(f"Invalid JSON workload {path}: {exc}") from exc

    if not isinstance(raw, list):
        raise ValueError("JSON workload must be a list of process objects")

    return [_process_from_mapping(entry) for entry in raw]


def _load_csv(path: Path) -> List[Process]:
    processes: List[Process] = []
    with path.open("r", encoding="utf-8", newline="") as f:
        reader = csv.DictReader(f)
        for row in reader:
            processes.append(_process_from_mapping(row))
    return processes


def _process_from_mapping(mapping) -> Process:
    try:
        pid = str(mapping["pid"]).strip()
        arrival_time = _as_int(mapping["arrival_time"])
        # burst_time is the common name in other simulators
        service_raw = mapping["service_time"] if "service_time" in mapping else mapping["burst_time"]
        service_time = _as_int(service_raw)
    except (KeyError, TypeError, ValueError) as exc:
        raise ValueError(f"Invalid process entry: {mapping!r}") from exc

    return Process(pid=pid, arrival_time=arrival_time, service_time=service_time)


def _as_int(value) -> int:
    # JSON gives numbers, CSV gives strings; both must hold a whole number.
    if isinstance(value, bool):
        raise TypeError(f"expected an integer, got {value!r}")
    if isinstance(value, float):
        if not value.is_integer():
            raise ValueError(f"expected an integer, got {value!r}")
        return int(value)
    if isinstance(value, (int, str)):
        return int(value)
    raise TypeError(f"expected an integer, got {value!r}")
