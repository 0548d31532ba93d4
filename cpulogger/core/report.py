"""Text formatting for the usage table and log lines."""

import time
from datetime import datetime
from typing import Iterable, Optional

from cpulogger.models import ProcessSample

TABLE_WIDTH = 80
PID_WIDTH = 10
NAME_WIDTH = 50
USAGE_WIDTH = 10


def iso_timestamp(now_ns: Optional[int] = None) -> str:
    """Get local time as ISO 8601 with nanoseconds and UTC offset.

    Example: 2023-03-08T21:19:47.101382300+01:00
    """
    if now_ns is None:
        now_ns = time.time_ns()
    seconds, nanos = divmod(now_ns, 1_000_000_000)
    stamp = datetime.fromtimestamp(seconds).astimezone().isoformat()
    return f"{stamp[:19]}.{nanos:09d}{stamp[19:]}"


def format_usage(usage: float) -> str:
    """Format a percentage the way the table shows it."""
    return f"{usage:.2f} %"


def _row(pid: str, name: str, usage: str) -> str:
    return f"| {pid:<{PID_WIDTH}} | {name:<{NAME_WIDTH}} | {usage:<{USAGE_WIDTH}} |"


def format_stats(
    processes: Iterable[ProcessSample],
    total_usage: float,
    count: int,
    timestamp: Optional[str] = None,
) -> str:
    """Format the top `count` processes into a fixed-width table.

    Args:
        processes: Samples sorted by usage, highest first
        total_usage: System-wide usage shown above the table
        count: Number of process rows to show
        timestamp: Time shown in the table, defaults to now

    Returns:
        The table as a multi-line string without trailing newline
    """
    if timestamp is None:
        timestamp = iso_timestamp()

    inner = TABLE_WIDTH - 2
    divider = "-" * TABLE_WIDTH
    lines = [
        f"{'CPU usage':-^{TABLE_WIDTH}}",
        f"|{format_usage(total_usage):^{inner}}|",
        f"|{timestamp:^{inner}}|",
        divider,
        _row("PID", "Name", "Usage"),
        f"|{'':-<{PID_WIDTH + 2}}|{'':-<{NAME_WIDTH + 2}}|{'':-<{USAGE_WIDTH + 2}}|",
    ]
    for process in list(processes)[:count]:
        lines.append(_row(str(process.pid), process.name, format_usage(process.usage)))
    lines.append(divider)
    return "\n".join(lines)


def timestamp_lines(message: str, timestamp: Optional[str] = None) -> str:
    """Prefix every line of `message` with a timestamp, ending in a blank line.

    Returns:
        Text ready to append to the log file, newline terminated
    """
    if timestamp is None:
        timestamp = iso_timestamp()
    prefix = f"{timestamp} | "
    lines = [f"{prefix}{line}" for line in message.split("\n")]
    lines.append(prefix)
    return "\n".join(lines) + "\n"
