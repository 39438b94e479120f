"""HTML report generator for test run outcomes.

This module renders the recorded outcomes of a run as a single HTML page:
a header with the generation time, summary counts and a results table.
"""

import logging
from datetime import datetime
from html import escape
from typing import Dict, Optional, Sequence

from ..models.harness_models import TestOutcome, TestStatus

logger = logging.getLogger(__name__)

TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"
DEFAULT_TITLE = "Login Page Test Report"
PLACEHOLDER = "N/A"


class HtmlReporter:
    """
    Generate HTML test run reports.

    PATTERN: Template-based HTML generation
    CRITICAL: Every value taken from an outcome is HTML-escaped
    GOTCHA: Missing screenshots and errors render as N/A
    """

    def __init__(self, title: str = DEFAULT_TITLE):
        """
        Initialize HTML reporter.

        Args:
            title: Page and heading title
        """
        self.title = title

    def generate_report(
        self,
        outcomes: Sequence[TestOutcome],
        generated_at: Optional[datetime] = None,
    ) -> str:
        """
        Generate HTML report from recorded outcomes.

        Args:
            outcomes: Outcomes in recording order
            generated_at: Generation time (defaults to now)

        Returns:
            HTML string
        """
        generated_at = generated_at or datetime.now()
        html = self._generate_html_structure(outcomes, generated_at)
        logger.debug(f"HTML report rendered ({len(html)} bytes, {len(outcomes)} outcomes)")
        return html

    def _generate_html_structure(
        self, outcomes: Sequence[TestOutcome], generated_at: datetime
    ) -> str:
        """Generate complete HTML document."""
        return f"""<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="UTF-8">
    <title>{escape(self.title)}</title>
    {self._generate_styles()}
</head>
<body>
    {self._generate_header(generated_at)}
    {self._generate_summary(outcomes)}
    {self._generate_results_table(outcomes)}
</body>
</html>
"""

    def _generate_styles(self) -> str:
        """Generate CSS styles."""
        return """<style>
        body { font-family: Arial, sans-serif; margin: 20px; }
        h1 { color: #333366; }
        table { border-collapse: collapse; width: 100%; }
        th, td { border: 1px solid #ddd; padding: 8px; text-align: left; }
        th { background-color: #f2f2f2; }
        .pass { color: green; }
        .fail { color: red; }
        .skip { color: orange; }
        .unknown { color: gray; }
    </style>"""

    def _generate_header(self, generated_at: datetime) -> str:
        return f"""<h1>{escape(self.title)}</h1>
    <p>Generated on: {generated_at.strftime(TIMESTAMP_FORMAT)}</p>"""

    @staticmethod
    def count_by_status(outcomes: Sequence[TestOutcome]) -> Dict[TestStatus, int]:
        counts = {status: 0 for status in TestStatus}
        for outcome in outcomes:
            counts[outcome.status] += 1
        return counts

    def _generate_summary(self, outcomes: Sequence[TestOutcome]) -> str:
        """Generate summary counts."""
        counts = self.count_by_status(outcomes)
        return f"""<h2>Summary</h2>
    <p>Total Tests: {len(outcomes)}</p>
    <p>Passed: {counts[TestStatus.PASS]}</p>
    <p>Failed: {counts[TestStatus.FAIL]}</p>
    <p>Skipped: {counts[TestStatus.SKIP]}</p>"""

    def _generate_results_table(self, outcomes: Sequence[TestOutcome]) -> str:
        """Generate the results table, one row per outcome."""
        html = """<h2>Test Results</h2>
    <table>
        <tr>
            <th>Test Name</th>
            <th>Status</th>
            <th>Duration (ms)</th>
            <th>Timestamp</th>
            <th>Screenshot</th>
            <th>Error Message</th>
        </tr>"""

        for outcome in outcomes:
            screenshot = (
                f'<a href="{escape(outcome.screenshot_path)}">Screenshot</a>'
                if outcome.screenshot_path
                else PLACEHOLDER
            )
            error = escape(outcome.error_message) if outcome.error_message else PLACEHOLDER
            html += f"""
        <tr>
            <td>{escape(outcome.test_name)}</td>
            <td class="{outcome.status.value.lower()}">{outcome.status.value}</td>
            <td>{outcome.duration_ms}</td>
            <td>{outcome.timestamp.strftime(TIMESTAMP_FORMAT)}</td>
            <td>{screenshot}</td>
            <td>{error}</td>
        </tr>"""

        html += "\n    </table>"
        return html
