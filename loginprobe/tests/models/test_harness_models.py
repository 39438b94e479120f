"""Tests for the shared data models."""

import pytest
from pydantic import ValidationError

from loginprobe.models.harness_models import (
    AuditResult,
    BrowserType,
    Finding,
    FindingKind,
    TestOutcome,
    TestStatus,
)


class TestEnums:
    @pytest.mark.parametrize(
        "engine,launcher",
        [
            (BrowserType.CHROME, "chromium"),
            (BrowserType.EDGE, "chromium"),
            (BrowserType.SAFARI, "webkit"),
            (BrowserType.FIREFOX, "firefox"),
        ],
    )
    def test_launcher(self, engine, launcher):
        assert engine.launcher == launcher

    def test_security_kinds(self):
        assert FindingKind.CSRF_MISSING_TOKEN.is_security
        assert not FindingKind.LOW_CONTRAST.is_security

    @pytest.mark.parametrize(
        "value,expected",
        [
            ("pass", TestStatus.PASS),
            ("FAIL", TestStatus.FAIL),
            (TestStatus.SKIP, TestStatus.SKIP),
            ("broken", TestStatus.UNKNOWN),
            (None, TestStatus.UNKNOWN),
        ],
    )
    def test_status_parse(self, value, expected):
        assert TestStatus.parse(value) is expected


class TestModels:
    def test_by_kind_keeps_order(self):
        first = Finding(kind=FindingKind.MISSING_LABEL, description="a", locator="input#a")
        second = Finding(kind=FindingKind.MISSING_ALT_TEXT, description="b")
        third = Finding(kind=FindingKind.MISSING_LABEL, description="c", locator="input#c")

        grouped = AuditResult(findings=[first, second, third], total_issues=3).by_kind()

        assert list(grouped) == [FindingKind.MISSING_LABEL, FindingKind.MISSING_ALT_TEXT]
        assert grouped[FindingKind.MISSING_LABEL] == [first, third]

    def test_outcome_is_frozen(self):
        outcome = TestOutcome(test_name="t", status=TestStatus.PASS)

        with pytest.raises((ValidationError, TypeError)):
            outcome.status = TestStatus.FAIL
