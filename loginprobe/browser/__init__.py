"""Browser subsystem for driving and probing the login page.

This package provides:
- Playwright browser session provisioning across engines and device modes
- Resilient interaction primitives (waits, retrying clicks, screenshots)
- Heuristic XSS, SQL injection and CSRF probing
- Heuristic accessibility auditing
"""

from loginprobe.browser.session_factory import BrowserSession, BrowserSessionFactory
from loginprobe.browser.interactions import (
    ClickPath,
    safe_click,
    take_screenshot,
    wait_clickable,
    wait_page_load,
    wait_visible,
    measure_page_load_time,
    check_performance_threshold,
)
from loginprobe.browser.vulnerability_probe import VulnerabilityProbe
from loginprobe.browser.accessibility_auditor import AccessibilityAuditor

__all__ = [
    "BrowserSession",
    "BrowserSessionFactory",
    "ClickPath",
    "safe_click",
    "take_screenshot",
    "wait_clickable",
    "wait_page_load",
    "wait_visible",
    "measure_page_load_time",
    "check_performance_threshold",
    "VulnerabilityProbe",
    "AccessibilityAuditor",
]
