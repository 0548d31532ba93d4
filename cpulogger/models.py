"""Data models for the CPU usage logger."""

from dataclasses import dataclass


@dataclass(frozen=True)
class ProcessSample:
    """CPU usage of one process over one measurement window."""

    pid: int
    name: str
    usage: float  # percent, normalized by physical core count


@dataclass(frozen=True)
class SystemSample:
    """All process samples of one cycle, sorted by usage."""

    processes: tuple[ProcessSample, ...]
    total_usage: float

    def top(self, count: int) -> tuple[ProcessSample, ...]:
        """Get the `count` most CPU hungry processes."""
        return self.processes[:count]
