"""psutil backed process provider."""

from typing import Optional

import psutil
import structlog

from .base import ProcessGoneError, ProcessHandle, ProcessProvider

logger = structlog.get_logger()


class PsutilProcessProvider(ProcessProvider):
    """Read the process table through psutil."""

    def __init__(self):
        self.logger = logger.bind(component="PsutilProcessProvider")

    def list_processes(self) -> list[ProcessHandle]:
        """List running processes with their pid and name."""
        handles = []
        for proc in psutil.process_iter(attrs=["pid", "name"]):
            info = proc.info
            handles.append(
                ProcessHandle(pid=info["pid"], name=info.get("name") or "", ref=proc)
            )

        self.logger.debug("Processes listed", count=len(handles))
        return handles

    def cpu_time(self, handle: ProcessHandle) -> float:
        """Get user plus system CPU seconds of a process."""
        proc = handle.ref if handle.ref is not None else psutil.Process(handle.pid)
        try:
            times = proc.cpu_times()
        except (psutil.NoSuchProcess, psutil.AccessDenied, psutil.ZombieProcess) as e:
            # Processes that died mid-poll or that we may not inspect
            raise ProcessGoneError(handle.pid) from e
        return times.user + times.system

    def physical_core_count(self) -> Optional[int]:
        """Get the physical core count reported by psutil."""
        return psutil.cpu_count(logical=False)
