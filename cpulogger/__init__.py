"""CPU Usage Logger - log processes that push the CPU past a threshold."""

__version__ = "0.1.0"
