"""Models package for the login page harness."""

from .harness_models import (
    BrowserType,
    Viewport,
    DeviceProfile,
    TimeoutPolicy,
    FindingKind,
    Finding,
    AuditResult,
    TestStatus,
    TestOutcome,
)

__all__ = [
    "BrowserType",
    "Viewport",
    "DeviceProfile",
    "TimeoutPolicy",
    "FindingKind",
    "Finding",
    "AuditResult",
    "TestStatus",
    "TestOutcome",
]
