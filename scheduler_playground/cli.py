from __future__ import annotations

import argparse
import dataclasses
import logging
import time
from pathlib import Path
from typing import List, Optional

from rich import box
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from .algorithms import ALGORITHMS, DISPLAY_NAMES, resolve_algorithm, run_algorithm
from .gantt import build_rich_gantt, render_gantt
from .models import Process, ScheduleResult
from .workload_io import default_processes, load_workload, validate_processes

logger = logging.getLogger(__name__)

DEFAULT_QUANTUM = 5
DEFAULT_ALGORITHM = "fifo"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="scheduler-playground",
        description="CPU scheduling playground (FIFO and Round Robin).",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable debug logging.",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    run_parser = subparsers.add_parser("run", help="Run one scheduling algorithm on a workload.")
    run_parser.add_argument(
        "--algorithm",
        "-a",
        default=DEFAULT_ALGORITHM,
        help="Algorithm to use (fifo, rr). Default: fifo.",
    )
    _add_workload_args(run_parser)
    run_parser.add_argument(
        "--step",
        action="store_true",
        help="Show a simple time-stepped simulation in the terminal.",
    )
    run_parser.add_argument(
        "--step-delay",
        type=float,
        default=0.3,
        help="Seconds to wait between steps when --step is used (default: 0.3).",
    )
    run_parser.add_argument(
        "--plain",
        action="store_true",
        help="Print the Gantt chart as plain text instead of colored blocks.",
    )

    compare_parser = subparsers.add_parser(
        "compare",
        help="Run FIFO and Round Robin on the same workload and compare average metrics.",
    )
    _add_workload_args(compare_parser)

    playground_parser = subparsers.add_parser(
        "playground",
        help="Interactive loop: edit processes, switch algorithm and quantum, see results recomputed.",
    )
    _add_workload_args(playground_parser)

    return parser


def _add_workload_args(subparser: argparse.ArgumentParser) -> None:
    subparser.add_argument(
        "--workload",
        "-w",
        default=None,
        help="Path to JSON or CSV workload file (default: built-in demo workload).",
    )
    subparser.add_argument(
        "--quantum",
        "-q",
        type=int,
        default=DEFAULT_QUANTUM,
        help=f"Time quantum for Round Robin (default: {DEFAULT_QUANTUM}).",
    )


def configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), rich_tracebacks=True, show_path=False)],
        force=True,
    )


def _load_processes(workload: Optional[str]) -> List[Process]:
    if workload is None:
        logger.debug("No workload given, using the demo workload")
        return default_processes()
    return load_workload(Path(workload))


def _print_result(result: ScheduleResult, console: Console, plain: bool = False) -> None:
    console.print(f"[bold]Algorithm:[/bold] {result.algorithm}")
    if result.quantum is not None:
        console.print(f"[bold]Quantum:[/bold] {result.quantum}")

    console.print()

    if plain:
        console.print(render_gantt(result.timeline), markup=False, highlight=False)
    else:
        panel, time_marks = build_rich_gantt(result.timeline)
        console.print(panel)
        if time_marks:
            console.print(time_marks, highlight=False)

    console.print()

    headers = ["PID", "Arrive", "Service", "Start", "Complete", "Wait", "Turnaround", "Response"]

    proc_table = Table(title="Per-process metrics", box=box.SIMPLE_HEAVY)
    for h in headers:
        proc_table.add_column(h, justify="center" if h == "PID" else "right")

    for row in result.report.rows:
        proc_table.add_row(
            row.pid,
            str(row.arrival_time),
            str(row.service_time),
            str(row.start_time),
            str(row.completion_time),
            str(row.waiting_time),
            str(row.turnaround_time),
            str(row.response_time),
        )

    console.print(proc_table)
    console.print()

    sys_table = Table(title="System metrics", box=box.SIMPLE_HEAVY)
    sys_table.add_column("Metric")
    sys_table.add_column("Value", justify="right")

    sys_table.add_row("Avg waiting", _nice(result.report.avg_waiting))
    sys_table.add_row("Avg turnaround", _nice(result.report.avg_turnaround))
    sys_table.add_row("Avg response", _nice(result.report.avg_response))
    if result.system:
        sys_ = result.system
        sys_table.add_row("CPU busy time", str(sys_.cpu_busy_time))
        sys_table.add_row("Idle time", str(sys_.idle_time))
        sys_table.add_row("Throughput (proc/time)", f"{sys_.throughput:.3f}")
        sys_table.add_row("CPU utilization", f"{sys_.cpu_utilization*100:.1f}%")

    console.print(sys_table)


def _nice(value: float) -> str:
    # Whole numbers print without decimals.
    return str(int(value)) if float(value).is_integer() else f"{value:.2f}"


def _run_compare(processes: List[Process], quantum: int, console: Console) -> None:
    """
    Run every algorithm on the same workload and print the summary table.
    """
    summary_table = Table(title="Algorithm comparison", box=box.SIMPLE_HEAVY)
    summary_table.add_column("Algorithm")
    summary_table.add_column("Quantum", justify="right")
    summary_table.add_column("Avg waiting", justify="right")
    summary_table.add_column("Avg turnaround", justify="right")
    summary_table.add_column("Avg response", justify="right")
    summary_table.add_column("Slices", justify="right")

    for alg in ALGORITHMS:
        result = run_algorithm(alg, processes, quantum=quantum)
        summary_table.add_row(
            result.algorithm,
            "" if result.quantum is None else str(result.quantum),
            f"{result.report.avg_waiting:.2f}",
            f"{result.report.avg_turnaround:.2f}",
            f"{result.report.avg_response:.2f}",
            str(len(result.timeline)),
        )

    console.print(summary_table)


def _animate_result(result: ScheduleResult, delay: float, console: Console) -> None:
    """
    Simple time-stepped textual simulation using the computed schedule.
    """
    timeline = result.timeline
    if not timeline:
        console.print("[red]No execution to animate.[/red]")
        return

    begin = timeline[0].start_time
    end = timeline[-1].end_time
    console.print(f"[bold]Simulating {result.algorithm}[/bold] (t={begin} to t={end})")
    console.print("[dim]Press Ctrl+C to skip animation.[/dim]")

    for t in range(begin, end):
        current = next(sl for sl in timeline if sl.start_time <= t < sl.end_time)
        if current.is_idle:
            console.print(f"t={t:2d}: [dim][idle][/dim]")
        else:
            bar = "█" * (t - current.start_time + 1)
            console.print(f"t={t:2d}: {current.pid} [green]{bar}[/green]")
        time.sleep(delay)


def _prompt_int(prompt: str, default: Optional[int] = None) -> Optional[int]:
    suffix = f" [{default}]" if default is not None else ""
    raw = input(f"{prompt}{suffix}: ").strip()
    if not raw:
        return default
    return int(raw)


def _interactive_playground(processes: List[Process], quantum: int, console: Console) -> None:
    """
    Edit the process set, algorithm and quantum; every change recomputes
    the whole schedule from scratch.
    """
    processes = list(processes)
    algorithm = DEFAULT_ALGORITHM

    while True:
        try:
            result = run_algorithm(algorithm, processes, quantum=quantum)
            _print_result(result, console)
        except ValueError as exc:
            console.print(f"[red]Error: {exc}[/red]")

        console.print("\n[bold cyan]Scheduler Playground[/bold cyan] [dim](q to quit)[/dim]")
        other = "rr" if algorithm == "fifo" else "fifo"
        console.print(f"  [yellow]1[/yellow]. Switch algorithm to {DISPLAY_NAMES[other]}")
        console.print(f"  [yellow]2[/yellow]. Set quantum (current [green]{quantum}[/green])")
        console.print("  [yellow]3[/yellow]. Add process")
        console.print("  [yellow]4[/yellow]. Edit process")
        console.print("  [yellow]5[/yellow]. Remove process")
        console.print("  [yellow]6[/yellow]. Compare algorithms")

        choice = input("Choice [1-6 or q]: ").strip().lower()
        if choice in {"q", "quit", "exit"}:
            return

        try:
            if choice == "1":
                algorithm = other
            elif choice == "2":
                new_quantum = _prompt_int("Quantum", quantum)
                if new_quantum is None or new_quantum < 1:
                    raise ValueError("Quantum must be at least 1")
                quantum = new_quantum
            elif choice == "3":
                candidate = processes + [_prompt_process(_next_pid(processes))]
                validate_processes(candidate)
                processes = candidate
            elif choice == "4":
                idx = _pick_process(processes)
                old = processes[idx]
                updated = dataclasses.replace(
                    old,
                    arrival_time=_prompt_int(f"Arrival time for {old.pid}", old.arrival_time),
                    service_time=_prompt_int(f"Service time for {old.pid}", old.service_time),
                )
                candidate = processes[:idx] + [updated] + processes[idx + 1:]
                validate_processes(candidate)
                processes = candidate
            elif choice == "5":
                idx = _pick_process(processes)
                processes = processes[:idx] + processes[idx + 1:]
            elif choice == "6":
                _run_compare(processes, quantum, console)
                input("Press Enter to continue...")
            else:
                console.print("[red]Invalid selection.[/red]")
        except ValueError as exc:
            console.print(f"[red]Error: {exc}[/red]")


def _prompt_process(default_pid: str) -> Process:
    pid = input(f"Process id [{default_pid}]: ").strip() or default_pid
    arrival_time = _prompt_int("Arrival time", 0)
    service_time = _prompt_int("Service time", 1)
    return Process(pid=pid, arrival_time=arrival_time, service_time=service_time)


def _next_pid(processes: List[Process]) -> str:
    used = {p.pid for p in processes}
    n = 1
    while f"P{n}" in used:
        n += 1
    return f"P{n}"


def _pick_process(processes: List[Process]) -> int:
    if not processes:
        raise ValueError("No processes defined")
    pid = input(f"Process id ({', '.join(p.pid for p in processes)}): ").strip()
    for idx, p in enumerate(processes):
        if p.pid == pid:
            return idx
    raise ValueError(f"No process with id '{pid}'")


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.verbose)

    console = Console()

    try:
        processes = _load_processes(args.workload)

        if args.command == "run":
            algorithm = resolve_algorithm(args.algorithm)
            result = run_algorithm(algorithm, processes, quantum=args.quantum)
            if args.step:
                try:
                    _animate_result(result, delay=args.step_delay, console=console)
                except KeyboardInterrupt:
                    console.print("[yellow]Animation skipped.[/yellow]")
            _print_result(result, console, plain=args.plain)
            return 0

        if args.command == "compare":
            _run_compare(processes, args.quantum, console)
            return 0

        if args.command == "playground":
            if args.quantum < 1:
                raise ValueError("Quantum must be at least 1")
            try:
                _interactive_playground(processes, args.quantum, console)
            except (EOFError, KeyboardInterrupt):
                console.print()
            return 0
    except (ValueError, OSError) as exc:
        console.print(f"[red]Error: {exc}[/red]")
        return 1

    parser.error(f"Unknown command: {args.command}")
    return 1


if __name__ == "__main__":
    raise SystemExit(main())
