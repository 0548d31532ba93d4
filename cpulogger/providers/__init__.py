"""Process table providers package."""

from .base import (
    CoreCountUnavailableError,
    ProcessGoneError,
    ProcessHandle,
    ProcessProvider,
)
from .psutil_provider import PsutilProcessProvider

__all__ = [
    "CoreCountUnavailableError",
    "ProcessGoneError",
    "ProcessHandle",
    "ProcessProvider",
    "PsutilProcessProvider",
]
