"""Output sinks for cycle reports."""

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Optional

import structlog
from rich.console import Console

from cpulogger.core.alerts import CycleReport
from cpulogger.core.report import timestamp_lines

if TYPE_CHECKING:
    from cpulogger.config import Configuration

logger = structlog.get_logger()


class Sink(ABC):
    """Abstract base class for report outputs."""

    @abstractmethod
    def write(self, report: CycleReport) -> None:
        """Write a cycle report.

        Args:
            report: Report of the cycle that just finished
        """
        pass


class NullSink(Sink):
    """Sink for an output that is not configured."""

    def write(self, report: CycleReport) -> None:
        pass


class LogFileSink(Sink):
    """Append alert messages to a plain text log file."""

    def __init__(self, file_path: str):
        """Initialize the log file sink.

        Args:
            file_path: Path of the log file, created on first write
        """
        self.logger = logger.bind(component="LogFileSink")
        self.file_path = file_path

    def append(self, message: str) -> None:
        """Append `message` with every line prefixed by a timestamp."""
        with open(self.file_path, "a", encoding="utf-8") as f:
            f.write(timestamp_lines(message))
        self.logger.debug("Message logged", file_path=self.file_path)

    def write(self, report: CycleReport) -> None:
        for message in (report.system_alert_entry, report.process_alert):
            if message is not None:
                self.append(message)


class ConsoleSink(Sink):
    """Redraw the usage table and alerts on the terminal."""

    def __init__(self, console: Console):
        self.console = console

    def _out(self, text: str) -> None:
        # Raw output: process names may contain rich markup
        self.console.out(text, highlight=False)

    def write(self, report: CycleReport) -> None:
        self.console.clear()
        self._out(report.table)

        if report.system_alert is not None:
            self._out(f"\n{report.system_alert}")

        if report.process_alert is not None:
            self._out(f"\n{report.process_alert}")


def build_sinks(
    config: "Configuration", console: Optional[Console] = None
) -> list[Sink]:
    """Create the log file and console sinks for a configuration.

    Returns:
        [log file sink, console sink], unconfigured outputs as NullSink
    """
    sinks: list[Sink] = []

    if config.log_file:
        sinks.append(LogFileSink(config.log_file))
    else:
        sinks.append(NullSink())

    if config.cli:
        sinks.append(ConsoleSink(console or Console()))
    else:
        sinks.append(NullSink())

    return sinks
