"""Exception taxonomy for the login page harness.

Setup failures (session creation) are fatal to the test that hit them,
interaction failures surface after their retry budget, and scanning or
reporting failures are recovered where they occur and only logged.
"""


class LoginProbeError(Exception):
    """Base class for all harness errors."""

    pass


class ConfigLoadError(LoginProbeError):
    """Raised when one configuration tier cannot be loaded.

    Never escapes the configuration store: the next tier is tried instead.
    """

    pass


class SessionCreationError(LoginProbeError):
    """Raised when a browser engine or driver cannot be provisioned."""

    pass


class WaitTimeoutError(LoginProbeError, TimeoutError):
    """Raised when an explicit wait condition does not hold in time."""

    pass


class InteractionError(LoginProbeError):
    """Raised when an interaction fails after every retry and fallback path."""

    pass


class ProbeError(LoginProbeError):
    """Raised for a single failed payload or audit check.

    Recovered by the scanners: logged, then the next payload runs.
    """

    pass


class ReportWriteError(LoginProbeError):
    """Raised when a report file cannot be written.

    Recovered by the aggregator so teardown never masks the test result.
    """

    pass


class NavigationError(LoginProbeError):
    """Raised when the browser cannot load a URL (DNS, connection, timeout)."""

    pass
