"""Tests for the log file and console sinks."""

import io
import re

import pytest
from rich.console import Console

from cpulogger.config import Configuration
from cpulogger.core.alerts import CycleReport, ThresholdEvaluator
from cpulogger.core.sinks import ConsoleSink, LogFileSink, NullSink, build_sinks

LINE_PATTERN = re.compile(
    r"^\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}\.\d{9}[+-]\d{2}:\d{2} \| (.*)$"
)


@pytest.fixture
def alerting_report(make_sample) -> CycleReport:
    sample = make_sample((10, "hog", 25.0), (11, "calm", 6.0))
    return ThresholdEvaluator(30.0, 15.0, 2).evaluate(sample)


@pytest.fixture
def quiet_report(make_sample) -> CycleReport:
    sample = make_sample((10, "calm", 2.0))
    return ThresholdEvaluator(30.0, 15.0, 2).evaluate(sample)


def _console() -> tuple[Console, io.StringIO]:
    buffer = io.StringIO()
    return Console(file=buffer, force_terminal=False, width=200), buffer


def test_append_creates_file(tmp_path):
    log_file = tmp_path / "cpu.log"

    LogFileSink(str(log_file)).append("line one\nline two")

    lines = log_file.read_text(encoding="utf-8").split("\n")
    assert lines[-1] == ""
    lines = lines[:-1]
    assert len(lines) == 3
    assert [LINE_PATTERN.match(line).group(1) for line in lines] == [
        "line one",
        "line two",
        "",
    ]


def test_append_keeps_existing_content(tmp_path):
    log_file = tmp_path / "cpu.log"
    log_file.write_text("existing entry\n", encoding="utf-8")

    LogFileSink(str(log_file)).append("new")

    content = log_file.read_text(encoding="utf-8")
    assert content.startswith("existing entry\n")
    assert len(content.split("\n")) == 4


def test_log_file_writes_system_then_process_alert(tmp_path, alerting_report):
    log_file = tmp_path / "cpu.log"

    LogFileSink(str(log_file)).write(alerting_report)

    messages = [
        LINE_PATTERN.match(line).group(1)
        for line in log_file.read_text(encoding="utf-8").splitlines()
    ]
    assert messages[0].startswith("Total CPU usage threshold of 30.00%")
    assert messages[1] == alerting_report.table.split("\n")[0]
    process_index = messages.index(alerting_report.process_alert)
    assert messages[process_index - 1] == ""
    assert messages[-1] == ""


def test_log_file_untouched_without_alerts(tmp_path, quiet_report):
    log_file = tmp_path / "cpu.log"

    LogFileSink(str(log_file)).write(quiet_report)

    assert not log_file.exists()


def test_unwritable_log_file_raises(tmp_path, alerting_report):
    sink = LogFileSink(str(tmp_path / "missing" / "cpu.log"))

    with pytest.raises(OSError):
        sink.write(alerting_report)


def test_console_prints_table_and_alerts(alerting_report):
    console, buffer = _console()

    ConsoleSink(console).write(alerting_report)

    assert buffer.getvalue() == (
        f"{alerting_report.table}\n"
        f"\n{alerting_report.system_alert}\n"
        f"\n{alerting_report.process_alert}\n"
    )


def test_console_prints_plain_table_without_alerts(quiet_report):
    console, buffer = _console()

    ConsoleSink(console).write(quiet_report)

    assert buffer.getvalue() == f"{quiet_report.table}\n"


def test_console_does_not_render_markup(make_sample):
    report = ThresholdEvaluator(0.0, 0.0, 1).evaluate(make_sample((1, "[bold]x", 1.0)))
    console, buffer = _console()

    ConsoleSink(console).write(report)

    assert "[Pid: 1] Name: '[bold]x'" in buffer.getvalue()


def test_console_clears_screen(quiet_report, monkeypatch):
    console, _ = _console()
    cleared = []
    monkeypatch.setattr(console, "clear", lambda *args, **kwargs: cleared.append(True))

    ConsoleSink(console).write(quiet_report)

    assert cleared == [True]


def test_build_sinks_disabled():
    sinks = build_sinks(Configuration())

    assert [type(s) for s in sinks] == [NullSink, NullSink]


def test_build_sinks_enabled(tmp_path):
    console, _ = _console()
    config = Configuration(cli=True, log_file=str(tmp_path / "cpu.log"))

    file_sink, console_sink = build_sinks(config, console)

    assert isinstance(file_sink, LogFileSink)
    assert file_sink.file_path == str(tmp_path / "cpu.log")
    assert isinstance(console_sink, ConsoleSink)
    assert console_sink.console is console


def test_null_sink_does_no_io(alerting_report, monkeypatch):
    def fail(*args, **kwargs):
        raise AssertionError("unexpected file access")

    monkeypatch.setattr("builtins.open", fail)

    for sink in build_sinks(Configuration(log_file=None)):
        sink.write(alerting_report)
