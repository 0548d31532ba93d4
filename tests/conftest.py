"""Shared pytest fixtures."""

import os
import tempfile
from typing import Generator, Optional

import pytest
import yaml

from cpulogger.config import setup_logging
from cpulogger.models import ProcessSample, SystemSample
from cpulogger.providers.base import ProcessGoneError, ProcessHandle, ProcessProvider


class FakeClock:
    """Monotonic clock that only moves when sleep() is called."""

    def __init__(self, start: float = 100.0):
        self.now = start
        self.sleeps = []

    def __call__(self) -> float:
        return self.now

    def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


class FakeProcessProvider(ProcessProvider):
    """Process table driven by scripted CPU time readings.

    `readings` maps pid -> list of successive cpu_time() results. A reading
    of None means the process is gone by then.
    """

    def __init__(
        self,
        processes: dict[int, str],
        readings: dict[int, list],
        core_count: Optional[int] = 2,
    ):
        self.processes = processes
        self.readings = {pid: list(values) for pid, values in readings.items()}
        self.core_count = core_count
        self.cpu_time_calls = 0

    def list_processes(self) -> list[ProcessHandle]:
        return [ProcessHandle(pid=pid, name=name) for pid, name in self.processes.items()]

    def cpu_time(self, handle: ProcessHandle) -> float:
        self.cpu_time_calls += 1
        value = self.readings[handle.pid].pop(0)
        if value is None:
            raise ProcessGoneError(handle.pid)
        return value

    def physical_core_count(self) -> Optional[int]:
        return self.core_count


@pytest.fixture
def fake_clock() -> FakeClock:
    """Create a fake monotonic clock."""
    return FakeClock()


@pytest.fixture
def provider() -> FakeProcessProvider:
    """Three processes on two cores, one of them busy."""
    return FakeProcessProvider(
        processes={1: "init", 42: "busy", 77: "idle"},
        readings={1: [10.0, 10.1], 42: [5.0, 5.8], 77: [3.0, 3.0]},
        core_count=2,
    )


@pytest.fixture
def make_sample():
    """Build a SystemSample from (pid, name, usage) tuples, already sorted."""

    def _make(*entries) -> SystemSample:
        processes = tuple(ProcessSample(pid, name, usage) for pid, name, usage in entries)
        return SystemSample(
            processes=processes, total_usage=sum(p.usage for p in processes)
        )

    return _make


@pytest.fixture
def temp_config_file() -> Generator[str, None, None]:
    """Create a temporary config file for testing."""
    config = {
        "time_between_measurements": 10,
        "total_log_threshold": 50.0,
        "number_of_processes_to_show": 3,
        "logging": {"level": "info"},
    }

    with tempfile.NamedTemporaryFile(mode="w", suffix=".yaml", delete=False) as f:
        yaml.dump(config, f)
        config_path = f.name

    yield config_path

    # Cleanup
    os.unlink(config_path)


@pytest.fixture
def make_provider():
    """Factory for fake process providers."""
    return FakeProcessProvider


@pytest.fixture(autouse=True)
def quiet_logging():
    """Point diagnostics at the current stderr for every test."""
    setup_logging("warning")
