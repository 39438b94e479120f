"""Shared fixtures: a BrowserSession wired to mocked Playwright objects."""

import pytest
from unittest.mock import MagicMock

from loginprobe.browser.session_factory import BrowserSession
from loginprobe.config.harness_config import ConfigurationStore
from loginprobe.models.harness_models import BrowserType, TimeoutPolicy

LOGIN_URL = "https://dashboard.example.com/login"


@pytest.fixture
def config():
    """Fully enabled configuration without touching the filesystem."""
    return ConfigurationStore.from_mapping(
        {
            "browser": "chrome",
            "baseUrl": LOGIN_URL,
            "timeout": 10,
            "headless": True,
            "screenshotOnFailure": True,
            "enableSecurityTests": True,
            "checkForXssVulnerabilities": True,
            "checkForSqlInjectionVulnerabilities": True,
            "checkForCsrfVulnerabilities": True,
            "enableAccessibilityTesting": True,
            "accessibilityViolationThreshold": 0,
            "performanceThreshold": 3000,
        }
    )


@pytest.fixture
def page():
    """Mock Playwright page whose locator() always returns the same locator."""
    page = MagicMock()
    page.url = LOGIN_URL
    page.locator.return_value = MagicMock(name="locator")
    return page


@pytest.fixture
def session(page, config):
    """Real BrowserSession over mocked driver, browser, context and page."""
    return BrowserSession(
        playwright=MagicMock(name="playwright"),
        browser=MagicMock(name="browser"),
        context=MagicMock(name="context"),
        page=page,
        config=config,
        browser_type=BrowserType.CHROME,
        timeouts=TimeoutPolicy(),
        headless=True,
    )
