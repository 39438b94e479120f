"""Tests for the loginprobe command line."""

import pytest
from unittest.mock import MagicMock, patch
from click.testing import CliRunner
from playwright.sync_api import Error as PlaywrightError

from loginprobe import cli as cli_module
from loginprobe.cli import main
from loginprobe.config.harness_config import ConfigurationStore
from loginprobe.exceptions import NavigationError, SessionCreationError
from loginprobe.models.harness_models import AuditResult, Finding, FindingKind, TestStatus
from loginprobe.reporting.aggregator import ResultAggregator


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def harness(tmp_path):
    """Harness with mocked browser services and a real aggregator."""
    harness = MagicMock(name="harness")
    harness.base_url = "https://dashboard.example.com/"
    harness.config = ConfigurationStore.from_mapping({"performanceThreshold": 3000})
    harness.aggregator = ResultAggregator(
        ConfigurationStore.from_mapping({"reportDir": str(tmp_path)})
    )
    harness.session.return_value.__enter__.return_value = MagicMock(name="session")
    harness.vulnerability_probe.probe_all.return_value = []
    harness.accessibility_auditor.audit.return_value = AuditResult()
    return harness


@pytest.fixture(autouse=True)
def patched(harness):
    with patch.object(cli_module.HarnessContext, "create", return_value=harness) as create, \
            patch.object(cli_module, "wait_page_load"), \
            patch.object(cli_module, "measure_page_load_time", return_value=1200):
        yield create


class TestScan:
    """Tests for the scan command."""

    def test_clean(self, runner, harness):
        result = runner.invoke(main, ["scan"])

        assert result.exit_code == 0
        assert "no findings" in result.output
        session = harness.session.return_value.__enter__.return_value
        session.navigate.assert_called_once_with("https://dashboard.example.com/")

    def test_findings_fail(self, runner, harness):
        harness.vulnerability_probe.probe_all.return_value = [
            Finding(kind=FindingKind.CSRF_MISSING_TOKEN, description="form without token", locator="form#login")
        ]

        result = runner.invoke(main, ["scan", "--url", "https://other.example.com/login"])

        assert result.exit_code == 1
        assert "csrf-missing-token" in result.output

    def test_session_error(self, runner, harness):
        harness.session.side_effect = SessionCreationError("Unsupported browser: lynx")

        result = runner.invoke(main, ["scan", "--browser", "lynx"])

        assert result.exit_code == 1
        assert "Unsupported browser: lynx" in result.output
        harness.session.assert_called_once_with("lynx", None)

    def test_browser_error(self, runner, harness):
        session = harness.session.return_value.__enter__.return_value
        session.navigate.side_effect = PlaywrightError("Target page, context or browser has been closed")

        result = runner.invoke(main, ["scan"])

        assert result.exit_code == 1
        assert "Error: Target page" in result.output

    def test_config_option(self, runner, patched, tmp_path):
        config_file = tmp_path / "config.properties"

        runner.invoke(main, ["--config", str(config_file), "scan", "--headless"])

        patched.assert_called_once_with(str(config_file))


class TestAudit:
    """Tests for the audit command."""

    def test_passing(self, runner):
        result = runner.invoke(main, ["audit"])

        assert result.exit_code == 0
        assert "PASS" in result.output

    def test_over_threshold(self, runner, harness):
        finding = Finding(kind=FindingKind.MISSING_LANG, description="no lang", locator="html")
        harness.accessibility_auditor.audit.return_value = AuditResult(
            findings=[finding], total_issues=1, passes_threshold=False, threshold=0
        )

        result = runner.invoke(main, ["audit"])

        assert result.exit_code == 1
        assert "missing-lang" in result.output


class TestPerf:
    """Tests for the perf command."""

    def test_within_configured_threshold(self, runner):
        result = runner.invoke(main, ["perf"])

        assert result.exit_code == 0
        assert "1200ms" in result.output

    def test_explicit_threshold(self, runner):
        result = runner.invoke(main, ["perf", "--threshold", "1000"])

        assert result.exit_code == 1


class TestReport:
    """Tests for the report command."""

    def test_writes_reports(self, runner, harness, tmp_path):
        result = runner.invoke(main, ["report"])

        assert result.exit_code == 0
        assert (tmp_path / "test-report.html").exists()
        assert (tmp_path / "test-report.csv").exists()
        assert [o.test_name for o in harness.aggregator.outcomes()] == [
            "security_scan",
            "accessibility_audit",
            "page_load_time",
        ]

    def test_failed_check_recorded(self, runner, harness, tmp_path):
        harness.vulnerability_probe.probe_all.return_value = [
            Finding(kind=FindingKind.XSS_ALERT, description="alert fired")
        ]

        with patch("loginprobe.reporting.aggregator.take_screenshot", return_value=None):
            result = runner.invoke(main, ["report"])

        assert result.exit_code == 1
        summary = harness.aggregator.summary()
        assert summary["FAIL"] == 1
        assert summary["PASS"] == 2
        assert "alert fired" in (tmp_path / "test-report.csv").read_text()

    @pytest.mark.parametrize(
        "error",
        [
            PlaywrightError("net::ERR_NAME_NOT_RESOLVED"),
            NavigationError("Failed to load https://dashboard.example.com/: net::ERR_NAME_NOT_RESOLVED"),
        ],
    )
    def test_unreachable_page_still_reported(self, runner, harness, tmp_path, error):
        session = harness.session.return_value.__enter__.return_value
        session.navigate.side_effect = error

        result = runner.invoke(main, ["report"])

        assert result.exit_code == 1
        assert not isinstance(result.exception, PlaywrightError)
        outcomes = harness.aggregator.outcomes()
        assert [o.status for o in outcomes] == [TestStatus.FAIL] * 3
        assert all("ERR_NAME_NOT_RESOLVED" in o.error_message for o in outcomes)
        assert (tmp_path / "test-report.html").exists()
        assert "ERR_NAME_NOT_RESOLVED" in (tmp_path / "test-report.csv").read_text()

    def test_reports_written_when_check_crashes(self, runner, harness, tmp_path):
        harness.accessibility_auditor.audit.side_effect = RuntimeError("auditor crashed")

        result = runner.invoke(main, ["report"])

        assert isinstance(result.exception, RuntimeError)
        assert [o.test_name for o in harness.aggregator.outcomes()] == ["security_scan"]
        assert (tmp_path / "test-report.html").exists()
