"""pytest plugin running live browser tests against the login page.

Registered through the ``pytest11`` entry point. It builds one
HarnessContext per pytest process, gives every test that asks for it a fresh
browser session on the configured base URL, records each live test's outcome
(with a failure screenshot) and writes the HTML and CSV reports at the end of
the run.

Browser tests are skipped unless ``--live`` is given.
"""

import logging
from typing import Optional

import pytest

from .browser.interactions import wait_page_load
from .browser.session_factory import BrowserSession
from .context import HarnessContext
from .models.harness_models import TestOutcome, TestStatus
from .pages.login_page import LoginPage

logger = logging.getLogger(__name__)

HARNESS_KEY = pytest.StashKey[HarnessContext]()
SESSION_KEY = pytest.StashKey[BrowserSession]()

SESSION_FIXTURE = "browser_session"


def pytest_addoption(parser):
    group = parser.getgroup("loginprobe", "login page browser tests")
    group.addoption(
        "--live",
        action="store_true",
        default=False,
        help="Run browser tests against the configured base URL",
    )
    group.addoption(
        "--loginprobe-config",
        action="store",
        default=None,
        help="Harness configuration file (defaults to ./config.properties)",
    )


def pytest_configure(config):
    config.addinivalue_line(
        "markers", "live: test drives a real browser (needs --live)"
    )
    harness = HarnessContext.create(config.getoption("loginprobe_config"))
    harness.aggregator.init_run()
    config.stash[HARNESS_KEY] = harness


def pytest_collection_modifyitems(config, items):
    if config.getoption("live"):
        return
    skip_live = pytest.mark.skip(reason="browser test, run with --live")
    for item in items:
        if "live" in item.keywords:
            item.add_marker(skip_live)


def status_from_report(report) -> TestStatus:
    if report.passed:
        return TestStatus.PASS
    if report.failed:
        return TestStatus.FAIL
    if report.skipped:
        return TestStatus.SKIP
    return TestStatus.UNKNOWN


def record_report(
    harness: HarnessContext,
    test_name: str,
    report,
    session: Optional[BrowserSession] = None,
    error: Optional[BaseException] = None,
) -> Optional[TestOutcome]:
    """
    Record a test report phase as an outcome.

    The call phase is always recorded; the setup phase only when it did not
    pass (the call phase never runs then). Teardown is not recorded.

    Returns:
        The recorded outcome, or None when the phase is not recorded
    """
    if report.when == "call" or (report.when == "setup" and not report.passed):
        return harness.aggregator.record_result(
            test_name,
            status_from_report(report),
            int(report.duration * 1000),
            session=session,
            error=error,
        )
    return None


@pytest.hookimpl(hookwrapper=True)
def pytest_runtest_makereport(item, call):
    outcome = yield
    report = outcome.get_result()

    if not item.config.getoption("live") or SESSION_FIXTURE not in item.fixturenames:
        return

    error = call.excinfo.value if call.excinfo is not None else None
    record_report(
        item.config.stash[HARNESS_KEY],
        item.name,
        report,
        session=item.stash.get(SESSION_KEY, None),
        error=error,
    )


def pytest_sessionfinish(session, exitstatus):
    harness = session.config.stash.get(HARNESS_KEY, None)
    if harness is None or len(harness.aggregator) == 0:
        return
    harness.aggregator.generate_reports()


@pytest.fixture(scope="session")
def harness(pytestconfig) -> HarnessContext:
    """The process-wide harness context."""
    return pytestconfig.stash[HARNESS_KEY]


@pytest.fixture
def browser_session(request, harness):
    """A fresh browser session on the base URL, closed after the test."""
    if not request.config.getoption("live"):
        pytest.skip("browser test, run with --live")

    session = harness.new_session()
    request.node.stash[SESSION_KEY] = session
    try:
        session.navigate(harness.base_url)
        wait_page_load(session)
        yield session
    finally:
        session.close()


@pytest.fixture
def login_page(browser_session) -> LoginPage:
    return LoginPage(browser_session)
