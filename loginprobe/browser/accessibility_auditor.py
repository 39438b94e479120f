"""Heuristic accessibility audit for the login page.

This module provides the AccessibilityAuditor class which inspects a live
page for common accessibility problems: images without alt text, unlabeled
form fields, extreme low-contrast text, missing document language or title,
click-only handlers and positive tab indexes.

PATTERN: Collect DOM snapshots with evaluate(), classify them in Python with
the predicates in ``heuristics`` so each rule is testable without a browser.
"""

import logging
from typing import Any, Callable, List, Tuple

from ..config.harness_config import ConfigKey, ConfigurationStore
from ..exceptions import ProbeError
from ..models.harness_models import AuditResult, Finding, FindingKind
from . import heuristics
from .session_factory import BrowserSession

logger = logging.getLogger(__name__)

IMAGES_SCRIPT = """
() => Array.from(document.querySelectorAll('img')).map(img => ({
    src: img.getAttribute('src'),
    alt: img.getAttribute('alt'),
}))
"""

FORM_FIELDS_SCRIPT = """
() => Array.from(
    document.querySelectorAll("input:not([type='hidden']), select, textarea")
).map(el => {
    const id = el.getAttribute('id');
    return {
        tag: el.tagName,
        id: id,
        name: el.getAttribute('name'),
        hasLabelFor: !!(id && document.querySelector('label[for="' + CSS.escape(id) + '"]')),
        wrappedInLabel: !!el.closest('label'),
    };
})
"""

TEXT_COLORS_SCRIPT = """
() => Array.from(document.querySelectorAll('body *'))
    .filter(el => el.innerText && el.innerText.trim())
    .map(el => {
        const style = window.getComputedStyle(el);
        return {
            tag: el.tagName,
            className: typeof el.className === 'string' ? el.className : '',
            color: style.color,
            backgroundColor: style.backgroundColor,
        };
    })
"""

DOCUMENT_LANG_SCRIPT = "() => document.documentElement.getAttribute('lang')"

CLICK_HANDLERS_SCRIPT = """
() => Array.from(document.querySelectorAll('*'))
    .filter(el => el.onclick || el.hasAttribute('onclick'))
    .map(el => ({
        tag: el.tagName,
        className: typeof el.className === 'string' ? el.className : '',
        hasKeyHandler: !!(
            el.onkeydown || el.onkeyup || el.onkeypress ||
            el.hasAttribute('onkeydown') || el.hasAttribute('onkeyup') ||
            el.hasAttribute('onkeypress')
        ),
    }))
"""

TABINDEX_SCRIPT = """
() => Array.from(document.querySelectorAll('[tabindex]')).map(el => ({
    tag: el.tagName,
    className: typeof el.className === 'string' ? el.className : '',
    tabindex: el.getAttribute('tabindex'),
}))
"""


def _snapshot(session: BrowserSession, script: str) -> List[Any]:
    result = session.evaluate(script)
    return result if isinstance(result, list) else []


class AccessibilityAuditor:
    """Run the heuristic accessibility checks against a session's page.

    Each check is independent: a check that fails is logged and skipped and
    the rest still run. The audit passes when the number of findings is at
    most ``accessibilityViolationThreshold``.
    """

    def __init__(self, config: ConfigurationStore):
        """Initialize the auditor.

        Args:
            config: Harness configuration
        """
        self.config = config

    @property
    def enabled(self) -> bool:
        return self.config.get_bool(ConfigKey.ENABLE_ACCESSIBILITY, True)

    @property
    def threshold(self) -> int:
        return self.config.get_int(ConfigKey.ACCESSIBILITY_THRESHOLD, 0)

    def checks(self) -> List[Tuple[str, Callable[[BrowserSession], List[Finding]]]]:
        return [
            ("images", self.check_images),
            ("form labels", self.check_form_labels),
            ("color contrast", self.check_color_contrast),
            ("document language", self.check_document_language),
            ("page title", self.check_page_title),
            ("keyboard access", self.check_keyboard_access),
        ]

    def audit(self, session: BrowserSession) -> AuditResult:
        """Run every check and summarize against the configured threshold.

        Args:
            session: Browser session on the page to audit

        Returns:
            Audit result; empty and passing when auditing is disabled
        """
        threshold = self.threshold
        if not self.enabled:
            logger.info("Accessibility testing disabled in configuration")
            return AuditResult(threshold=threshold)

        findings: List[Finding] = []
        for name, check in self.checks():
            try:
                findings.extend(check(session))
            except Exception as e:
                error = ProbeError(f"Accessibility check '{name}' failed: {e}")
                logger.warning(str(error))

        total = len(findings)
        result = AuditResult(
            findings=findings,
            total_issues=total,
            passes_threshold=total <= threshold,
            threshold=threshold,
        )
        logger.info(
            f"Accessibility audit completed: {total} issues found "
            f"(threshold {threshold}, passed={result.passes_threshold})"
        )
        return result

    def check_images(self, session: BrowserSession) -> List[Finding]:
        findings = []
        for image in _snapshot(session, IMAGES_SCRIPT):
            if heuristics.is_blank(image.get("alt")):
                src = image.get("src")
                description = (
                    f"Image without alt text: {src}"
                    if not heuristics.is_blank(src)
                    else "Image without alt text and src"
                )
                findings.append(
                    Finding(
                        kind=FindingKind.MISSING_ALT_TEXT,
                        description=description,
                        locator=f"img[src='{src}']" if src else "img",
                    )
                )
        return findings

    def check_form_labels(self, session: BrowserSession) -> List[Finding]:
        findings = []
        for field in _snapshot(session, FORM_FIELDS_SCRIPT):
            if heuristics.field_has_label(field):
                continue
            name = field.get("name") or field.get("id") or "unknown"
            locator = f"#{field['id']}" if field.get("id") else f"[name='{name}']"
            findings.append(
                Finding(
                    kind=FindingKind.MISSING_LABEL,
                    description=f"Form field without label: {name}",
                    locator=locator,
                )
            )
        return findings

    def check_color_contrast(self, session: BrowserSession) -> List[Finding]:
        findings = []
        for element in _snapshot(session, TEXT_COLORS_SCRIPT):
            color = element.get("color")
            background = element.get("backgroundColor")
            if not heuristics.is_low_contrast(color, background):
                continue
            label = heuristics.describe_element(element.get("tag"), element.get("className"))
            parsed = heuristics.parse_css_color(color)
            tone = "Light" if parsed and heuristics.is_light(parsed) else "Dark"
            findings.append(
                Finding(
                    kind=FindingKind.LOW_CONTRAST,
                    description=(
                        f"{tone} text on {tone.lower()} background: {label} "
                        f"(color {color}, background {background})"
                    ),
                    locator=label,
                )
            )
        return findings

    def check_document_language(self, session: BrowserSession) -> List[Finding]:
        lang = session.evaluate(DOCUMENT_LANG_SCRIPT)
        if heuristics.is_blank(lang):
            return [
                Finding(
                    kind=FindingKind.MISSING_LANG,
                    description="Document language not specified (missing lang attribute on html element)",
                    locator="html",
                )
            ]
        return []

    def check_page_title(self, session: BrowserSession) -> List[Finding]:
        if heuristics.is_blank(session.title()):
            return [
                Finding(
                    kind=FindingKind.MISSING_TITLE,
                    description="Page title is missing or empty",
                    locator="title",
                )
            ]
        return []

    def check_keyboard_access(self, session: BrowserSession) -> List[Finding]:
        findings = []

        for element in _snapshot(session, CLICK_HANDLERS_SCRIPT):
            tag = element.get("tag") or ""
            if heuristics.is_keyboard_trap(tag, True, bool(element.get("hasKeyHandler"))):
                label = heuristics.describe_element(tag, element.get("className"))
                findings.append(
                    Finding(
                        kind=FindingKind.KEYBOARD_TRAP,
                        description=f"Element with click handler but no keyboard handler: {label}",
                        locator=label,
                    )
                )

        for element in _snapshot(session, TABINDEX_SCRIPT):
            if heuristics.has_positive_tabindex(element.get("tabindex")):
                label = heuristics.describe_element(element.get("tag"), element.get("className"))
                findings.append(
                    Finding(
                        kind=FindingKind.POSITIVE_TABINDEX,
                        description=f"Element with tabindex > 0 (disrupts natural tab order): {label}",
                        locator=label,
                    )
                )

        return findings
