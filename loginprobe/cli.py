"""Command line entry point.

Usage:
    loginprobe scan                  # XSS / SQL injection / CSRF probes
    loginprobe audit                 # Accessibility audit
    loginprobe perf                  # Page load time against the threshold
    loginprobe report                # All of the above, written as HTML and CSV
"""

import logging
import sys
import time
from contextlib import contextmanager
from typing import Iterator, List, Optional

import click
from playwright.sync_api import Error as PlaywrightError
from rich.console import Console
from rich.table import Table

from .browser.interactions import measure_page_load_time, wait_page_load
from .browser.session_factory import BrowserSession
from .config.harness_config import ConfigKey
from .context import HarnessContext
from .exceptions import LoginProbeError
from .models.harness_models import AuditResult, Finding, TestStatus
from .pages.login_page import LoginPage

logger = logging.getLogger(__name__)

console = Console()

url_option = click.option("--url", help="Login page URL (defaults to baseUrl)")
browser_option = click.option("--browser", help="Browser engine (defaults to browser)")
headless_option = click.option(
    "--headless/--headed", default=None, help="Override the headless setting"
)


@click.group()
@click.option(
    "--config", "config_path",
    type=click.Path(),
    help="Configuration file path",
)
@click.option(
    "--verbose", "-v",
    is_flag=True,
    help="Enable verbose logging",
)
@click.pass_context
def main(ctx: click.Context, config_path: Optional[str], verbose: bool) -> None:
    """Browser tests for the dashboard login page."""
    log_level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(
        level=log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    ctx.obj = HarnessContext.create(config_path)


@contextmanager
def _open_login_page(
    harness: HarnessContext,
    url: Optional[str],
    browser: Optional[str],
    headless: Optional[bool],
) -> Iterator[BrowserSession]:
    with harness.session(browser, headless) as session:
        session.navigate(url or harness.base_url)
        wait_page_load(session)
        yield session


def _fail(error: Exception) -> None:
    if logger.isEnabledFor(logging.DEBUG):
        logger.exception("Command failed")
    click.echo(f"Error: {error}", err=True)
    sys.exit(1)


def render_findings(findings: List[Finding], title: str) -> None:
    if not findings:
        console.print(f"[green]{title}: no findings[/green]")
        return

    table = Table(title=title, show_header=True)
    table.add_column("Kind", style="cyan")
    table.add_column("Description")
    table.add_column("Locator", style="dim")

    for finding in findings:
        table.add_row(finding.kind.value, finding.description, finding.locator or "")

    console.print(table)


def render_audit(result: AuditResult) -> None:
    render_findings(result.findings, "Accessibility Findings")
    style = "green" if result.passes_threshold else "red"
    console.print(
        f"[{style}]{result.total_issues} issue(s), threshold {result.threshold}: "
        f"{'PASS' if result.passes_threshold else 'FAIL'}[/{style}]"
    )


@main.command()
@url_option
@browser_option
@headless_option
@click.pass_obj
def scan(harness: HarnessContext, url, browser, headless) -> None:
    """Probe the login form for XSS, SQL injection and CSRF weaknesses."""
    try:
        with _open_login_page(harness, url, browser, headless) as session:
            findings = harness.vulnerability_probe.probe_all(session, LoginPage(session))
    except (LoginProbeError, PlaywrightError) as e:
        _fail(e)
        return

    render_findings(findings, "Security Findings")
    if findings:
        sys.exit(1)


@main.command()
@url_option
@browser_option
@headless_option
@click.pass_obj
def audit(harness: HarnessContext, url, browser, headless) -> None:
    """Run the accessibility audit on the login page."""
    try:
        with _open_login_page(harness, url, browser, headless) as session:
            result = harness.accessibility_auditor.audit(session)
    except (LoginProbeError, PlaywrightError) as e:
        _fail(e)
        return

    render_audit(result)
    if not result.passes_threshold:
        sys.exit(1)


@main.command()
@url_option
@browser_option
@headless_option
@click.option("--threshold", type=int, help="Maximum load time in ms")
@click.pass_obj
def perf(harness: HarnessContext, url, browser, headless, threshold) -> None:
    """Measure the login page load time."""
    target = url or harness.base_url
    if threshold is None:
        threshold = harness.config.get_int(ConfigKey.PERFORMANCE_THRESHOLD, 3000)

    try:
        with harness.session(browser, headless) as session:
            elapsed_ms = measure_page_load_time(session, target)
    except (LoginProbeError, PlaywrightError) as e:
        _fail(e)
        return

    passed = elapsed_ms <= threshold
    style = "green" if passed else "red"
    console.print(
        f"[{style}]Page load time for {target}: {elapsed_ms}ms "
        f"(threshold {threshold}ms)[/{style}]"
    )
    if not passed:
        sys.exit(1)


@main.command()
@url_option
@browser_option
@headless_option
@click.pass_obj
def report(harness: HarnessContext, url, browser, headless) -> None:
    """Run every check as a test case and write the HTML and CSV reports."""
    aggregator = harness.aggregator
    aggregator.init_run()
    target = url or harness.base_url
    threshold = harness.config.get_int(ConfigKey.PERFORMANCE_THRESHOLD, 3000)

    checks = [
        ("security_scan", lambda s: _check_security(harness, s)),
        ("accessibility_audit", lambda s: _check_accessibility(harness, s)),
        ("page_load_time", lambda s: _check_performance(s, target, threshold)),
    ]

    try:
        for name, check in checks:
            _run_check(aggregator, name, check, harness, target, browser, headless)
    finally:
        paths = aggregator.generate_reports()
    summary = aggregator.summary()

    table = Table(title="Test Run", show_header=True)
    table.add_column("Test", style="cyan")
    table.add_column("Status")
    table.add_column("Duration (ms)")
    table.add_column("Error", style="dim")
    for outcome in aggregator.outcomes():
        table.add_row(
            outcome.test_name,
            outcome.status.value,
            str(outcome.duration_ms),
            outcome.error_message or "",
        )
    console.print(table)

    for label, path in paths.items():
        if path is not None:
            console.print(f"{label.upper()} report: {path}")
        else:
            console.print(f"[red]{label.upper()} report could not be written[/red]")

    if summary[TestStatus.FAIL.value]:
        sys.exit(1)


def _run_check(aggregator, name, check, harness, target, browser, headless) -> None:
    """Run one report check in its own session and record its outcome."""
    start = time.perf_counter()
    try:
        with _open_login_page(harness, target, browser, headless) as session:
            failure = check(session)
            if failure:
                aggregator.record_result(
                    name,
                    TestStatus.FAIL,
                    _elapsed_ms(start),
                    session=session,
                    error=CheckFailure(failure),
                )
            else:
                aggregator.record_result(name, TestStatus.PASS, _elapsed_ms(start))
    except (LoginProbeError, PlaywrightError) as e:
        logger.warning(f"Check {name} failed: {e}")
        aggregator.record_result(name, TestStatus.FAIL, _elapsed_ms(start), error=e)


def _elapsed_ms(start: float) -> int:
    return int((time.perf_counter() - start) * 1000)


class CheckFailure(Exception):
    """A report check completed but its result is a failure."""


def _check_security(harness: HarnessContext, session: BrowserSession) -> Optional[str]:
    findings = harness.vulnerability_probe.probe_all(session, LoginPage(session))
    if findings:
        return "; ".join(f.description for f in findings)
    return None


def _check_accessibility(harness: HarnessContext, session: BrowserSession) -> Optional[str]:
    result = harness.accessibility_auditor.audit(session)
    if not result.passes_threshold:
        return f"{result.total_issues} accessibility issue(s) exceed threshold {result.threshold}"
    return None


def _check_performance(session: BrowserSession, url: str, threshold: int) -> Optional[str]:
    elapsed_ms = measure_page_load_time(session, url)
    if elapsed_ms > threshold:
        return f"Page load time {elapsed_ms}ms exceeds threshold {threshold}ms"
    return None


if __name__ == "__main__":
    main()
