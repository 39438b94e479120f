"""Test run reporting: outcome aggregation, HTML and CSV output."""

from .aggregator import ResultAggregator
from .csv_reporter import CsvReporter
from .html_reporter import HtmlReporter

__all__ = [
    "ResultAggregator",
    "CsvReporter",
    "HtmlReporter",
]
