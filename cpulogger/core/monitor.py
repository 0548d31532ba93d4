"""Core monitoring loop for the CPU usage logger."""

import time
from typing import Callable, Optional

import structlog

from cpulogger.config import Configuration
from cpulogger.core.aggregator import aggregate
from cpulogger.core.alerts import CycleReport, ThresholdEvaluator
from cpulogger.core.sampler import Sampler
from cpulogger.core.sinks import Sink

logger = structlog.get_logger()


class CpuMonitor:
    """Measure, evaluate and report CPU usage in an endless loop."""

    def __init__(
        self,
        config: Configuration,
        sampler: Sampler,
        sinks: list[Sink],
        sleep: Callable[[float], None] = time.sleep,
    ):
        """Initialize the monitor.

        Args:
            config: Validated run configuration
            sampler: Sampler bound to a process provider
            sinks: Outputs written in order after every cycle
            sleep: Blocking sleep between cycles
        """
        self.config = config
        self.sampler = sampler
        self.sinks = sinks
        self.evaluator = ThresholdEvaluator(
            config.total_log_threshold,
            config.process_log_threshold,
            config.number_of_processes_to_show,
        )
        self._sleep = sleep
        self.logger = logger.bind(component="CpuMonitor")

    def run_cycle(self) -> CycleReport:
        """Run one measurement cycle and write the report to every sink."""
        samples = self.sampler.measure(self.config.measurement_time)
        sample = aggregate(samples)
        self.logger.debug(
            "Metric collected",
            value=sample.total_usage,
            processes=len(sample.processes),
        )

        report = self.evaluator.evaluate(sample)
        for sink in self.sinks:
            sink.write(report)
        return report

    def run(self, max_cycles: Optional[int] = None) -> None:
        """Run cycles until interrupted, or `max_cycles` times if given."""
        self.logger.info(
            "Starting monitoring loop",
            interval=self.config.time_between_measurements,
            measurement_time=self.config.measurement_time,
        )
        iteration = 0
        while max_cycles is None or iteration < max_cycles:
            iteration += 1
            self.logger.debug(f"Starting iteration {iteration} of monitoring loop")
            self.run_cycle()
            self._sleep(self.config.time_between_measurements)
