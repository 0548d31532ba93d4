"""Per-process CPU sampling over a measurement window."""

import time
from typing import Callable, Optional

import structlog

from cpulogger.models import ProcessSample
from cpulogger.providers.base import (
    CoreCountUnavailableError,
    ProcessGoneError,
    ProcessHandle,
    ProcessProvider,
)

logger = structlog.get_logger()


class Sampler:
    """Measure how much CPU each process used during a window.

    The first reading of a window is only a reference point. Usage is the CPU
    time consumed between begin_sample() and end_sample(), divided by the
    window length and by the physical core count.
    """

    def __init__(
        self,
        provider: ProcessProvider,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ):
        """Initialize the sampler.

        Args:
            provider: Source of the process table
            clock: Monotonic clock used to time the window
            sleep: Blocking sleep used by measure()

        Raises:
            CoreCountUnavailableError: If the physical core count is unknown
        """
        self.logger = logger.bind(component="Sampler")
        self.provider = provider
        self._clock = clock
        self._sleep = sleep

        core_count = provider.physical_core_count()
        if not core_count:
            raise CoreCountUnavailableError(
                "Could not determine the number of physical CPU cores"
            )
        self.core_count = core_count
        self._baseline: list[tuple[ProcessHandle, float]] = []
        self._started_at: Optional[float] = None

        self.logger.debug("Sampler initialized", core_count=core_count)

    def begin_sample(self) -> None:
        """Record baseline CPU times for all running processes."""
        baseline = []
        for handle in self.provider.list_processes():
            try:
                baseline.append((handle, self.provider.cpu_time(handle)))
            except ProcessGoneError:
                continue

        self._baseline = baseline
        self._started_at = self._clock()
        self.logger.debug("Sample started", processes=len(baseline))

    def end_sample(self) -> list[ProcessSample]:
        """Read CPU times again and compute per-process usage.

        Returns:
            One sample per process that survived the window, in listing order
        """
        if self._started_at is None:
            raise RuntimeError("end_sample() called before begin_sample()")

        elapsed = self._clock() - self._started_at
        if elapsed <= 0:
            raise ValueError(f"Measurement window must be positive, got {elapsed}")

        samples = []
        dropped = 0
        for handle, before in self._baseline:
            try:
                after = self.provider.cpu_time(handle)
            except ProcessGoneError:
                dropped += 1
                continue

            consumed = max(0.0, after - before)
            usage = consumed / elapsed / self.core_count * 100
            samples.append(ProcessSample(pid=handle.pid, name=handle.name, usage=usage))

        self._baseline = []
        self._started_at = None
        self.logger.debug(
            "Sample finished", processes=len(samples), dropped=dropped, elapsed=elapsed
        )
        return samples

    def measure(self, duration: float) -> list[ProcessSample]:
        """Sample all processes over a blocking window of `duration` seconds."""
        self.begin_sample()
        self._sleep(duration)
        return self.end_sample()
