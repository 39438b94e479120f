"""Thread-safe collection of test outcomes and report output.

This module provides the ResultAggregator, the single outcome collector of a
test run. Test threads record outcomes concurrently; at the end of the run
the aggregator renders the ordered outcomes to HTML and CSV files.

CRITICAL: Outcomes are append-only within a run. Only init_run() clears
them, and rendering never mutates them.
"""

import logging
import threading
from collections import Counter
from datetime import datetime
from pathlib import Path
from typing import Dict, Optional, Tuple, Union

from ..browser.interactions import take_screenshot
from ..browser.session_factory import BrowserSession
from ..config.harness_config import ConfigKey, ConfigurationStore
from ..exceptions import ReportWriteError
from ..models.harness_models import TestOutcome, TestStatus
from .csv_reporter import CsvReporter
from .html_reporter import DEFAULT_TITLE, HtmlReporter

logger = logging.getLogger(__name__)

DEFAULT_REPORT_DIR = "test-reports"
DEFAULT_HTML_REPORT_FILE = "test-report.html"
DEFAULT_CSV_REPORT_FILE = "test-report.csv"


class ResultAggregator:
    """
    Collect outcomes from concurrent tests and write run reports.

    PATTERN: One instance per process, owned by HarnessContext
    GOTCHA: Report write failures are logged and reported as None
    """

    def __init__(self, config: ConfigurationStore):
        """
        Initialize result aggregator.

        Args:
            config: Harness configuration (report locations, screenshot policy)
        """
        self.config = config
        self._outcomes = []
        self._lock = threading.Lock()
        self.html_reporter = HtmlReporter(
            title=config.get_string(ConfigKey.REPORT_TITLE, DEFAULT_TITLE)
        )
        self.csv_reporter = CsvReporter()

    @property
    def report_dir(self) -> Path:
        return Path(self.config.get_string(ConfigKey.REPORT_DIR, DEFAULT_REPORT_DIR))

    @property
    def html_report_path(self) -> Path:
        return self.report_dir / self.config.get_string(
            ConfigKey.HTML_REPORT_FILE, DEFAULT_HTML_REPORT_FILE
        )

    @property
    def csv_report_path(self) -> Path:
        return self.report_dir / self.config.get_string(
            ConfigKey.CSV_REPORT_FILE, DEFAULT_CSV_REPORT_FILE
        )

    def init_run(self) -> None:
        """Start a new run by discarding all recorded outcomes."""
        with self._lock:
            cleared = len(self._outcomes)
            self._outcomes.clear()
        logger.info(f"Initialized test run ({cleared} previous outcome(s) cleared)")

    def record(
        self,
        test_name: str,
        status: Union[TestStatus, str],
        duration_ms: int,
        timestamp: Optional[datetime] = None,
        screenshot_path: Optional[str] = None,
        error_message: Optional[str] = None,
    ) -> TestOutcome:
        """
        Append one outcome.

        Args:
            test_name: Name of the test
            status: Final status; unrecognized values become UNKNOWN
            duration_ms: Test duration in milliseconds
            timestamp: Completion time (defaults to now)
            screenshot_path: Failure screenshot, if any
            error_message: Failure text, if any

        Returns:
            The recorded outcome
        """
        outcome = TestOutcome(
            test_name=test_name,
            status=TestStatus.parse(status),
            duration_ms=max(int(duration_ms), 0),
            timestamp=timestamp or datetime.now(),
            screenshot_path=screenshot_path or None,
            error_message=error_message or None,
        )
        with self._lock:
            self._outcomes.append(outcome)
        logger.debug(f"Recorded {outcome.status.value} for {test_name} ({outcome.duration_ms}ms)")
        return outcome

    def record_result(
        self,
        test_name: str,
        status: Union[TestStatus, str],
        duration_ms: int,
        session: Optional[BrowserSession] = None,
        error: Optional[BaseException] = None,
    ) -> TestOutcome:
        """
        Record a finished test, capturing a screenshot when it failed.

        The screenshot is best-effort and only taken when
        ``screenshotOnFailure`` is enabled and a live session is given.
        """
        status = TestStatus.parse(status)
        screenshot_path = None
        if (
            status is TestStatus.FAIL
            and session is not None
            and not session.closed
            and self.config.get_bool(ConfigKey.SCREENSHOT_ON_FAILURE, True)
        ):
            screenshot_path = take_screenshot(session, test_name)

        error_message = None
        if status is TestStatus.FAIL and error is not None:
            error_message = str(error) or type(error).__name__

        return self.record(
            test_name,
            status,
            duration_ms,
            screenshot_path=screenshot_path,
            error_message=error_message,
        )

    def outcomes(self) -> Tuple[TestOutcome, ...]:
        """Immutable snapshot of the outcomes in recording order."""
        with self._lock:
            return tuple(self._outcomes)

    def __len__(self) -> int:
        with self._lock:
            return len(self._outcomes)

    def summary(self) -> Dict[str, int]:
        """Outcome counts by status, plus ``total``."""
        outcomes = self.outcomes()
        counts = Counter(outcome.status for outcome in outcomes)
        result = {status.value: counts.get(status, 0) for status in TestStatus}
        result["total"] = len(outcomes)
        return result

    def render_html(self) -> Optional[Path]:
        """Write the HTML report, replacing any previous one."""
        content = self.html_reporter.generate_report(self.outcomes())
        return self._write(self.html_report_path, content, "HTML")

    def render_csv(self) -> Optional[Path]:
        """Write the CSV report, replacing any previous one."""
        content = self.csv_reporter.generate_report(self.outcomes())
        return self._write(self.csv_report_path, content, "CSV")

    def generate_reports(self) -> Dict[str, Optional[Path]]:
        """Write both reports; a failed write does not prevent the other."""
        return {"html": self.render_html(), "csv": self.render_csv()}

    def _write(self, path: Path, content: str, label: str) -> Optional[Path]:
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            with open(path, "w", encoding="utf-8", newline="") as f:
                f.write(content)
        except OSError as e:
            error = ReportWriteError(f"Failed to generate {label} report at {path}: {e}")
            logger.error(str(error))
            return None

        logger.info(f"{label} report generated at: {path}")
        return path
