"""Browser-driven UI, security and accessibility tests for a login page."""

from .config.harness_config import ConfigurationStore
from .context import HarnessContext
from .exceptions import (
    LoginProbeError,
    ConfigLoadError,
    SessionCreationError,
    WaitTimeoutError,
    InteractionError,
    NavigationError,
    ProbeError,
    ReportWriteError,
)

__version__ = "0.1.0"

__all__ = [
    "ConfigurationStore",
    "HarnessContext",
    "LoginProbeError",
    "ConfigLoadError",
    "SessionCreationError",
    "WaitTimeoutError",
    "InteractionError",
    "NavigationError",
    "ProbeError",
    "ReportWriteError",
]
