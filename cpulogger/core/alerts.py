"""Threshold evaluation for CPU usage samples."""

from dataclasses import dataclass, field
from typing import Optional

import structlog

from cpulogger.core.report import format_stats
from cpulogger.models import SystemSample

logger = structlog.get_logger()


@dataclass
class CycleReport:
    """Everything one cycle reports: the sample and any alert messages."""

    sample: SystemSample
    number_of_processes_to_show: int
    system_alert: Optional[str] = None
    process_alert: Optional[str] = None
    _table: Optional[str] = field(default=None, repr=False)

    @property
    def table(self) -> str:
        """Usage table of the top processes, formatted once per cycle."""
        if self._table is None:
            self._table = format_stats(
                self.sample.top(self.number_of_processes_to_show),
                self.sample.total_usage,
                self.number_of_processes_to_show,
            )
        return self._table

    @property
    def system_alert_entry(self) -> Optional[str]:
        """System alert headline followed by the usage table, for the log."""
        if self.system_alert is None:
            return None
        return f"{self.system_alert}\n{self.table}"


class ThresholdEvaluator:
    """Compare a sample against the system-wide and per-process thresholds."""

    def __init__(
        self,
        total_log_threshold: float,
        process_log_threshold: float,
        number_of_processes_to_show: int,
    ):
        """Initialize the evaluator.

        Args:
            total_log_threshold: System-wide usage (%) that triggers an alert
            process_log_threshold: Single process usage (%) that triggers an alert
            number_of_processes_to_show: Rows in the usage table
        """
        self.logger = logger.bind(component="ThresholdEvaluator")
        self.total_log_threshold = total_log_threshold
        self.process_log_threshold = process_log_threshold
        self.number_of_processes_to_show = number_of_processes_to_show

    def check_total(self, sample: SystemSample) -> Optional[str]:
        """Build the system alert headline if the total reaches the threshold."""
        if sample.total_usage < self.total_log_threshold:
            return None

        self.logger.info(
            "Total threshold exceeded",
            value=sample.total_usage,
            threshold=self.total_log_threshold,
        )
        return (
            f"Total CPU usage threshold of {self.total_log_threshold:.2f}% "
            f"exceeded -> {sample.total_usage:.2f}%"
        )

    def check_processes(self, sample: SystemSample) -> Optional[str]:
        """Build one alert line per process at or above the threshold.

        Processes are sorted by usage, so the offending ones form a prefix
        and the walk stops at the first process below the threshold.
        """
        lines = []
        for process in sample.processes:
            if process.usage < self.process_log_threshold:
                break
            self.logger.info(
                "Process threshold exceeded",
                pid=process.pid,
                name=process.name,
                value=process.usage,
                threshold=self.process_log_threshold,
            )
            lines.append(
                f"Single process CPU usage threshold of "
                f"{self.process_log_threshold:.2f}% exceeded -> "
                f"[Pid: {process.pid}] Name: '{process.name}' "
                f"Usage: {process.usage:.2f}%"
            )

        return "\n".join(lines) if lines else None

    def evaluate(self, sample: SystemSample) -> CycleReport:
        """Run both checks and collect the results into a report."""
        return CycleReport(
            sample=sample,
            number_of_processes_to_show=self.number_of_processes_to_show,
            system_alert=self.check_total(sample),
            process_alert=self.check_processes(sample),
        )
