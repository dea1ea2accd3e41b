from __future__ import annotations

from typing import Dict, List

from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from .models import ScheduledSlice

IDLE_STYLE = "on grey50"
COLORS = ["blue", "green", "yellow", "magenta", "cyan", "bright_green", "red", "bright_blue"]


def render_gantt(slices: List[ScheduledSlice]) -> str:
    """
    Plain-text Gantt chart: '=' for process time, '.' for idle time.
    """
    if not slices:
        return "(no execution)"

    slices = sorted(slices, key=lambda s: (s.start_time, s.end_time))

    line = "|"
    labels = " "
    time_marks = str(slices[0].start_time)

    for sl in slices:
        width = max(1, sl.duration)
        line += ("." if sl.is_idle else "=") * width
        labels += sl.pid[:width].ljust(width)
        time_marks += f"{sl.end_time:>3}"

    line += "|"

    return "\n".join(
        [
            "Gantt Chart:",
            line,
            labels,
            time_marks,
        ]
    )


def build_rich_gantt(slices: List[ScheduledSlice]) -> tuple[Panel, str]:
    """
    Build a Rich Panel containing a colored Gantt chart and a string with time marks.
    """
    if not slices:
        panel = Panel("No execution", title="Gantt Chart")
        return panel, ""

    slices = sorted(slices, key=lambda s: (s.start_time, s.end_time))

    pid_to_color: Dict[str, str] = {}

    def pid_style(sl: ScheduledSlice) -> str:
        if sl.is_idle:
            return IDLE_STYLE
        if sl.pid not in pid_to_color:
            pid_to_color[sl.pid] = COLORS[len(pid_to_color) % len(COLORS)]
        return f"on {pid_to_color[sl.pid]}"

    timeline = Text()
    labels = Text()
    time_marks = str(slices[0].start_time)

    for sl in slices:
        width = max(1, sl.duration)
        timeline.append(" " * width, style=pid_style(sl))
        labels.append(sl.pid[:width].ljust(width), style="dim" if sl.is_idle else "bold")
        time_marks += f"{sl.end_time:>3}"

    table = Table.grid(padding=(0, 0))
    table.add_row(timeline)
    table.add_row(labels)

    panel = Panel.fit(table, title="Gantt Chart")
    return panel, time_marks
