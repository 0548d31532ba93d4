"""Base process provider class."""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Optional


class ProcessGoneError(Exception):
    """Raised when a process can no longer be read."""

    def __init__(self, pid: int):
        super().__init__(f"Process {pid} is gone")
        self.pid = pid


class CoreCountUnavailableError(RuntimeError):
    """Raised when the physical core count cannot be determined."""


@dataclass(frozen=True)
class ProcessHandle:
    """Identity of a running process plus a backend specific reference."""

    pid: int
    name: str
    ref: Any = field(default=None, compare=False, repr=False)


class ProcessProvider(ABC):
    """Abstract view of the operating system process table."""

    @abstractmethod
    def list_processes(self) -> list[ProcessHandle]:
        """List the currently running processes.

        Returns:
            One handle per running process
        """
        pass

    @abstractmethod
    def cpu_time(self, handle: ProcessHandle) -> float:
        """Get the cumulative CPU time of a process.

        Args:
            handle: Handle returned by list_processes()

        Returns:
            User plus system CPU time in seconds

        Raises:
            ProcessGoneError: If the process exited or cannot be read
        """
        pass

    @abstractmethod
    def physical_core_count(self) -> Optional[int]:
        """Get the number of physical CPU cores, or None if unknown."""
        pass
