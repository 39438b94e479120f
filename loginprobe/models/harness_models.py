"""Data models for the login page harness.

This module defines the Pydantic models shared by the browser layer, the
scanners and the reporting layer: browser engine and device settings,
timeout policy, scanner findings, audit results and recorded test outcomes.
"""

from pydantic import BaseModel, Field
from typing import Dict, List, Optional
from enum import Enum
from datetime import datetime


class BrowserType(str, Enum):
    """Supported browser engines."""

    CHROMIUM = "chromium"
    CHROME = "chrome"
    FIREFOX = "firefox"
    EDGE = "edge"
    WEBKIT = "webkit"
    SAFARI = "safari"

    @property
    def launcher(self) -> str:
        """Name of the Playwright browser type used to launch this engine."""
        if self in (BrowserType.CHROMIUM, BrowserType.CHROME, BrowserType.EDGE):
            return "chromium"
        if self in (BrowserType.WEBKIT, BrowserType.SAFARI):
            return "webkit"
        return "firefox"

    @property
    def is_chromium_based(self) -> bool:
        return self.launcher == "chromium"


class Viewport(BaseModel):
    """Browser viewport configuration."""

    width: int = Field(default=1920, description="Viewport width")
    height: int = Field(default=1080, description="Viewport height")
    device_scale_factor: float = Field(default=1.0, description="Device pixel ratio")
    is_mobile: bool = Field(default=False, description="Mobile viewport")
    has_touch: bool = Field(default=False, description="Touch support")


class DeviceProfile(BaseModel):
    """Device emulation settings applied to a browser context."""

    name: str = Field(description="Device name")
    viewport: Viewport = Field(description="Emulated viewport")
    user_agent: str = Field(description="Emulated user agent string")


class TimeoutPolicy(BaseModel):
    """Timeouts applied to every session after construction (milliseconds)."""

    element_wait_ms: int = Field(default=10000, description="Element wait timeout")
    page_load_ms: int = Field(default=30000, description="Page load timeout")
    script_ms: int = Field(default=30000, description="Script execution timeout")


class FindingKind(str, Enum):
    """Classified conditions reported by the scanners."""

    XSS_REFLECTED = "xss-reflected"
    XSS_ALERT = "xss-alert"
    SQL_INJECTION_SUSPECTED = "sql-injection-suspected"
    CSRF_MISSING_TOKEN = "csrf-missing-token"
    MISSING_ALT_TEXT = "missing-alt-text"
    MISSING_LABEL = "missing-label"
    LOW_CONTRAST = "low-contrast"
    MISSING_LANG = "missing-lang"
    MISSING_TITLE = "missing-title"
    KEYBOARD_TRAP = "keyboard-trap"
    POSITIVE_TABINDEX = "positive-tabindex"

    @property
    def is_security(self) -> bool:
        return self in (
            FindingKind.XSS_REFLECTED,
            FindingKind.XSS_ALERT,
            FindingKind.SQL_INJECTION_SUSPECTED,
            FindingKind.CSRF_MISSING_TOKEN,
        )


class Finding(BaseModel):
    """One condition discovered by a scanner."""

    kind: FindingKind = Field(description="Finding classification")
    description: str = Field(description="Human readable description")
    payload: Optional[str] = Field(default=None, description="Triggering payload")
    locator: Optional[str] = Field(default=None, description="Element locator")

    class Config:
        """Pydantic configuration."""

        frozen = True


class AuditResult(BaseModel):
    """Summary of one accessibility audit."""

    findings: List[Finding] = Field(default_factory=list, description="Findings")
    total_issues: int = Field(default=0, description="Number of findings")
    passes_threshold: bool = Field(default=True, description="Within threshold")
    threshold: int = Field(default=0, description="Allowed number of findings")

    def by_kind(self) -> Dict[FindingKind, List[Finding]]:
        """Group findings by kind, preserving discovery order."""
        grouped: Dict[FindingKind, List[Finding]] = {}
        for finding in self.findings:
            grouped.setdefault(finding.kind, []).append(finding)
        return grouped


class TestStatus(str, Enum):
    """Final status of one test case."""

    __test__ = False

    PASS = "PASS"
    FAIL = "FAIL"
    SKIP = "SKIP"
    UNKNOWN = "UNKNOWN"

    @classmethod
    def parse(cls, value: object) -> "TestStatus":
        """Coerce a status name, falling back to UNKNOWN."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).upper())
        except ValueError:
            return cls.UNKNOWN


class TestOutcome(BaseModel):
    """Recorded result of one test case execution."""

    __test__ = False

    test_name: str = Field(description="Test name")
    status: TestStatus = Field(description="Final status")
    duration_ms: int = Field(default=0, description="Duration in milliseconds")
    timestamp: datetime = Field(default_factory=datetime.now)
    screenshot_path: Optional[str] = Field(default=None, description="Screenshot file")
    error_message: Optional[str] = Field(default=None, description="Error text")

    class Config:
        """Pydantic configuration."""

        frozen = True
