"""Tests for AccessibilityAuditor against canned DOM snapshots."""

import pytest

from loginprobe.browser.accessibility_auditor import (
    AccessibilityAuditor,
    CLICK_HANDLERS_SCRIPT,
    DOCUMENT_LANG_SCRIPT,
    FORM_FIELDS_SCRIPT,
    IMAGES_SCRIPT,
    TABINDEX_SCRIPT,
    TEXT_COLORS_SCRIPT,
)
from loginprobe.config.harness_config import ConfigurationStore
from loginprobe.models.harness_models import FindingKind


def clean_snapshots():
    """Snapshots of a login page with no issues."""
    return {
        IMAGES_SCRIPT: [{"src": "/logo.png", "alt": "Company logo"}],
        FORM_FIELDS_SCRIPT: [
            {"tag": "INPUT", "id": "userId", "hasLabelFor": True, "wrappedInLabel": False},
            {"tag": "INPUT", "id": "password", "hasLabelFor": False, "wrappedInLabel": True},
        ],
        TEXT_COLORS_SCRIPT: [
            {"tag": "H1", "className": "", "color": "rgb(0, 0, 0)", "backgroundColor": "rgba(0, 0, 0, 0)"},
        ],
        DOCUMENT_LANG_SCRIPT: "en",
        CLICK_HANDLERS_SCRIPT: [{"tag": "BUTTON", "className": "", "hasKeyHandler": False}],
        TABINDEX_SCRIPT: [{"tag": "INPUT", "className": "", "tabindex": "0"}],
    }


@pytest.fixture
def snapshots():
    return clean_snapshots()


@pytest.fixture
def audited_session(session, page, snapshots):
    page.evaluate.side_effect = lambda script, *args: snapshots[script]
    page.title.return_value = "Dashboard Login"
    return session


def make_auditor(threshold=0, enabled=True):
    return AccessibilityAuditor(
        ConfigurationStore.from_mapping(
            {
                "enableAccessibilityTesting": enabled,
                "accessibilityViolationThreshold": threshold,
            }
        )
    )


class TestAudit:
    """Tests for the combined audit result."""

    def test_clean_page_passes(self, audited_session):
        result = make_auditor().audit(audited_session)

        assert result.findings == []
        assert result.total_issues == 0
        assert result.passes_threshold

    def test_image_without_alt(self, audited_session, snapshots):
        snapshots[IMAGES_SCRIPT].append({"src": "/banner.png", "alt": None})

        result = make_auditor().audit(audited_session)

        assert [f.kind for f in result.findings] == [FindingKind.MISSING_ALT_TEXT]
        assert "/banner.png" in result.findings[0].description
        assert not result.passes_threshold

    def test_threshold_comparison(self, audited_session, snapshots):
        snapshots[IMAGES_SCRIPT].append({"src": "/a.png", "alt": ""})
        snapshots[DOCUMENT_LANG_SCRIPT] = None

        assert make_auditor(threshold=2).audit(audited_session).passes_threshold
        assert not make_auditor(threshold=1).audit(audited_session).passes_threshold

    def test_disabled(self, audited_session, page):
        result = make_auditor(enabled=False).audit(audited_session)

        assert result.total_issues == 0
        assert result.passes_threshold
        page.evaluate.assert_not_called()

    def test_failing_check_is_skipped(self, audited_session, snapshots):
        del snapshots[TEXT_COLORS_SCRIPT]
        snapshots[IMAGES_SCRIPT].append({"src": "/a.png"})

        result = make_auditor().audit(audited_session)

        assert [f.kind for f in result.findings] == [FindingKind.MISSING_ALT_TEXT]


class TestChecks:
    """Tests for the individual checks."""

    def test_unlabeled_field(self, audited_session, snapshots):
        snapshots[FORM_FIELDS_SCRIPT].append(
            {"tag": "INPUT", "id": None, "name": "otp", "hasLabelFor": False, "wrappedInLabel": False}
        )

        findings = make_auditor().check_form_labels(audited_session)

        assert len(findings) == 1
        assert findings[0].kind is FindingKind.MISSING_LABEL
        assert findings[0].locator == "[name='otp']"

    def test_low_contrast(self, audited_session, snapshots):
        snapshots[TEXT_COLORS_SCRIPT].append(
            {"tag": "SPAN", "className": "hint", "color": "rgb(250, 250, 250)", "backgroundColor": "rgb(255, 255, 255)"}
        )

        findings = make_auditor().check_color_contrast(audited_session)

        assert len(findings) == 1
        assert findings[0].locator == "SPAN.hint"
        assert findings[0].description.startswith("Light text on light background")

    def test_missing_lang(self, audited_session, snapshots):
        snapshots[DOCUMENT_LANG_SCRIPT] = "  "

        findings = make_auditor().check_document_language(audited_session)

        assert [f.kind for f in findings] == [FindingKind.MISSING_LANG]

    def test_missing_title(self, audited_session, page):
        page.title.return_value = ""

        findings = make_auditor().check_page_title(audited_session)

        assert [f.kind for f in findings] == [FindingKind.MISSING_TITLE]

    def test_keyboard_access(self, audited_session, snapshots):
        snapshots[CLICK_HANDLERS_SCRIPT].append({"tag": "DIV", "className": "card", "hasKeyHandler": False})
        snapshots[TABINDEX_SCRIPT].append({"tag": "A", "className": "", "tabindex": "3"})

        findings = make_auditor().check_keyboard_access(audited_session)

        assert [f.kind for f in findings] == [
            FindingKind.KEYBOARD_TRAP,
            FindingKind.POSITIVE_TABINDEX,
        ]
