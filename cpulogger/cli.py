"""Command-line interface for the CPU usage logger."""

import signal
import sys
import time
from typing import Optional

import click
import structlog
from click.core import ParameterSource
from rich.console import Console

from cpulogger import __version__
from cpulogger.config import LOG_LEVELS, ConfigError, ConfigManager, setup_logging
from cpulogger.core.monitor import CpuMonitor
from cpulogger.core.sampler import Sampler
from cpulogger.core.sinks import build_sinks
from cpulogger.providers import CoreCountUnavailableError, PsutilProcessProvider

console = Console()
logger = structlog.get_logger()

# Options that map one to one onto configuration keys
CONFIG_OPTIONS = [
    "time_between_measurements",
    "measurement_time",
    "total_log_threshold",
    "process_log_threshold",
    "number_of_processes_to_show",
    "cli",
    "log_file",
]


def _handle_sigterm(signum, frame):
    raise KeyboardInterrupt


def _fail(message: str) -> None:
    click.echo(f"Error: {message}", err=True)
    sys.exit(1)


@click.command(context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(__version__, prog_name="cpulogger")
@click.option(
    "--time-between-measurements",
    "-b",
    type=click.IntRange(min=0),
    default=5,
    show_default=True,
    help="How long to wait between measurements in seconds",
)
@click.option(
    "--measurement-time",
    "-m",
    type=click.IntRange(min=1),
    default=1,
    show_default=True,
    help="How long to measure for in seconds (CPU usage is an average over this time)",
)
@click.option(
    "--total-log-threshold",
    "-t",
    type=click.FloatRange(min=0),
    default=30.0,
    show_default=True,
    help="Threshold of total CPU usage to start logging at in percent",
)
@click.option(
    "--process-log-threshold",
    "-p",
    type=click.FloatRange(min=0),
    default=15.0,
    show_default=True,
    help="Threshold of single process CPU usage to start logging at in percent",
)
@click.option(
    "--number-of-processes-to-show",
    "-n",
    type=click.IntRange(min=0),
    default=5,
    show_default=True,
    help="Number of top CPU consuming processes to log when the total threshold "
    "is exceeded and to show in the CLI",
)
@click.option(
    "--cli",
    "-c",
    "cli_mode",
    is_flag=True,
    help="CLI mode, periodically write stats to stdout",
)
@click.option("--log-file", "-l", type=click.Path(dir_okay=False), help="Path to log file")
@click.option(
    "--config",
    "config_path",
    type=click.Path(exists=True, dir_okay=False),
    help="Path to a YAML configuration file",
)
@click.option(
    "--log-level",
    type=click.Choice(LOG_LEVELS, case_sensitive=False),
    help="Level of diagnostic messages on stderr  [default: warning]",
)
@click.pass_context
def cli(
    ctx: click.Context,
    config_path: Optional[str],
    log_level: Optional[str],
    cli_mode: bool,
    **options,
):
    """Simple utility to log high CPU usage."""
    setup_logging(log_level or "warning")

    options["cli"] = cli_mode
    source_names = {"cli": "cli_mode"}
    overrides = {
        key: options[key]
        for key in CONFIG_OPTIONS
        if ctx.get_parameter_source(source_names.get(key, key))
        == ParameterSource.COMMANDLINE
    }
    if log_level:
        overrides["logging"] = {"level": log_level.lower()}

    try:
        config_manager = ConfigManager(config_path, overrides)
        config = config_manager.build()
    except ConfigError as e:
        _fail(str(e))
        return

    if not log_level and config_manager.log_level != "warning":
        setup_logging(config_manager.log_level)
    logger.debug("Configuration", config=config)

    try:
        sampler = Sampler(PsutilProcessProvider(), sleep=time.sleep)
    except CoreCountUnavailableError as e:
        logger.error("Startup failed", error=str(e))
        _fail(str(e))
        return

    monitor = CpuMonitor(config, sampler, build_sinks(config, console), sleep=time.sleep)

    previous_handler = signal.signal(signal.SIGTERM, _handle_sigterm)
    try:
        monitor.run()
    except KeyboardInterrupt:
        logger.info("Monitoring stopped by user")
    except OSError as e:
        logger.error("Monitoring loop failed", error=str(e), exc_info=True)
        _fail(str(e))
    finally:
        signal.signal(signal.SIGTERM, previous_handler)


if __name__ == "__main__":
    cli()
