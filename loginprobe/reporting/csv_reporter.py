"""CSV report generator for test run outcomes."""

import logging
from typing import Optional, Sequence

from ..models.harness_models import TestOutcome

logger = logging.getLogger(__name__)

HEADER = "Test Name,Status,Duration (ms),Timestamp,Screenshot,Error Message"
TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"

_NEEDS_QUOTING = (",", '"', "\n", "\r")


def quote(value: str) -> str:
    """Wrap a field in double quotes, doubling embedded quotes."""
    return '"' + value.replace('"', '""') + '"'


def quote_if_needed(value: Optional[str]) -> str:
    """Quote a field only when it contains a separator, quote or line break."""
    if not value:
        return ""
    if any(marker in value for marker in _NEEDS_QUOTING):
        return quote(value)
    return value


class CsvReporter:
    """
    Generate CSV test run reports.

    GOTCHA: The error column is always quoted, even when empty, so that
    multi-line stack messages stay in one cell.
    """

    def generate_report(self, outcomes: Sequence[TestOutcome]) -> str:
        """
        Generate CSV report from recorded outcomes.

        Args:
            outcomes: Outcomes in recording order

        Returns:
            CSV text with a header row and one row per outcome
        """
        lines = [HEADER]
        for outcome in outcomes:
            lines.append(
                ",".join(
                    [
                        quote_if_needed(outcome.test_name),
                        outcome.status.value,
                        str(outcome.duration_ms),
                        outcome.timestamp.strftime(TIMESTAMP_FORMAT),
                        quote_if_needed(outcome.screenshot_path),
                        quote(outcome.error_message or ""),
                    ]
                )
            )
        csv = "\n".join(lines) + "\n"
        logger.debug(f"CSV report rendered ({len(outcomes)} rows)")
        return csv
