"""Heuristic XSS, SQL injection and CSRF probes for the login form.

This module provides the VulnerabilityProbe class, which drives a session
through fixed payload lists and classifies the page's reaction. It is a
best-effort probe, not a vulnerability scanner: reflected payloads and
missing error messages are signals, not proof.

GOTCHA: A failing payload never aborts the batch; the error is logged, the
original URL is restored and the next payload runs.
"""

import logging
from typing import Any, List, Mapping, Optional

from playwright.sync_api import TimeoutError as PlaywrightTimeoutError

from ..config.harness_config import ConfigKey, ConfigurationStore
from ..exceptions import ProbeError
from ..models.harness_models import Finding, FindingKind
from . import heuristics
from .interactions import describe_target, safe_click, wait_page_load
from .session_factory import BrowserSession, ElementTarget

logger = logging.getLogger(__name__)

FORMS_SCRIPT = """
() => Array.from(document.querySelectorAll('form')).map((form, index) => ({
    index: index,
    id: form.getAttribute('id'),
    name: form.getAttribute('name'),
    action: form.getAttribute('action'),
    hiddenInputs: Array.from(form.querySelectorAll("input[type='hidden']"))
        .map(input => input.getAttribute('name')),
}))
"""


class VulnerabilityProbe:
    """Probe login form fields with XSS and SQL injection payloads.

    Each probe returns a fresh list of findings and is disabled (returns an
    empty list) when ``enableSecurityTests`` or its own flag is false.
    """

    XSS_PAYLOADS = [
        "<script>alert('XSS')</script>",
        "<img src=x onerror=alert('XSS')>",
        "javascript:alert('XSS')",
        "<svg/onload=alert('XSS')>",
        "'\"><script>alert('XSS')</script>",
    ]

    SQL_INJECTION_PAYLOADS = [
        "' OR '1'='1",
        "' OR '1'='1' --",
        "admin' --",
        "1' OR '1' = '1",
        "1'; DROP TABLE users; --",
    ]

    LOGIN_ERROR_SELECTOR = (
        "xpath=//*[contains(text(), 'Invalid credentials') "
        "or contains(text(), 'Login failed')]"
    )
    PROBE_PASSWORD = "password"

    def __init__(
        self,
        config: ConfigurationStore,
        login_error_selector: Optional[str] = None,
        login_error_wait_ms: int = 2000,
    ):
        """Initialize the probe.

        Args:
            config: Harness configuration
            login_error_selector: Selector of the failed-login message
            login_error_wait_ms: How long to wait for that message after submit
        """
        self.config = config
        self.login_error_selector = login_error_selector or self.LOGIN_ERROR_SELECTOR
        self.login_error_wait_ms = login_error_wait_ms

    def is_enabled(self, flag: str) -> bool:
        return self.config.get_bool(
            ConfigKey.ENABLE_SECURITY_TESTS, True
        ) and self.config.get_bool(flag, True)

    def probe_xss(self, session: BrowserSession, field: ElementTarget) -> List[Finding]:
        """Type each XSS payload into a field and look for a dialog or reflection.

        Args:
            session: Browser session on the login page
            field: Selector or Locator of the input to probe

        Returns:
            xss-alert and xss-reflected findings
        """
        if not self.is_enabled(ConfigKey.CHECK_XSS):
            logger.info("XSS probing disabled in configuration")
            return []

        findings: List[Finding] = []
        original_url = session.url
        session.pop_dialogs()

        for payload in self.XSS_PAYLOADS:
            try:
                findings.extend(self._try_xss_payload(session, field, payload))
                self._return_to(session, original_url)
            except Exception as e:
                self._recover(
                    session,
                    original_url,
                    ProbeError(f"Error testing XSS payload {payload!r}: {e}"),
                )

        logger.info(
            f"XSS probe on {describe_target(field)}: {len(findings)} finding(s)"
        )
        return findings

    def _try_xss_payload(
        self, session: BrowserSession, field: ElementTarget, payload: str
    ) -> List[Finding]:
        locator = session.locator(field)
        locator.clear()
        locator.press_sequentially(payload)

        page_source = session.content()
        findings = []

        if session.pop_dialogs():
            findings.append(
                Finding(
                    kind=FindingKind.XSS_ALERT,
                    description=f"XSS vulnerability detected with payload: {payload}",
                    payload=payload,
                    locator=describe_target(field),
                )
            )
        if heuristics.is_payload_reflected(payload, page_source):
            findings.append(
                Finding(
                    kind=FindingKind.XSS_REFLECTED,
                    description=f"Potential XSS vulnerability: payload reflected in page source: {payload}",
                    payload=payload,
                    locator=describe_target(field),
                )
            )

        logger.debug(f"XSS payload {payload!r}: {len(findings)} finding(s)")
        return findings

    def probe_sql_injection(
        self,
        session: BrowserSession,
        user_field: ElementTarget,
        password_field: ElementTarget,
        submit: ElementTarget,
    ) -> List[Finding]:
        """Submit each SQL injection payload as the user id.

        A payload is flagged when the page leaves the login URL, or stays on
        it without showing the failed-login message.

        Returns:
            sql-injection-suspected findings
        """
        if not self.is_enabled(ConfigKey.CHECK_SQL_INJECTION):
            logger.info("SQL injection probing disabled in configuration")
            return []

        findings: List[Finding] = []
        original_url = session.url

        for payload in self.SQL_INJECTION_PAYLOADS:
            try:
                user = session.locator(user_field)
                user.clear()
                user.fill(payload)
                password = session.locator(password_field)
                password.clear()
                password.fill(self.PROBE_PASSWORD)

                safe_click(session, submit)
                wait_page_load(session)

                if heuristics.suggests_auth_bypass(
                    original_url, session.url, self._login_error_shown(session)
                ):
                    findings.append(
                        Finding(
                            kind=FindingKind.SQL_INJECTION_SUSPECTED,
                            description=f"Potential SQL injection vulnerability with payload: {payload}",
                            payload=payload,
                            locator=describe_target(user_field),
                        )
                    )
                self._return_to(session, original_url)
            except Exception as e:
                self._recover(
                    session,
                    original_url,
                    ProbeError(f"Error testing SQL injection payload {payload!r}: {e}"),
                )

        logger.info(f"SQL injection probe: {len(findings)} finding(s)")
        return findings

    def _login_error_shown(self, session: BrowserSession) -> bool:
        try:
            session.locator(self.login_error_selector).first.wait_for(
                state="visible", timeout=self.login_error_wait_ms
            )
            return True
        except PlaywrightTimeoutError:
            return False

    def probe_csrf(self, session: BrowserSession) -> List[Finding]:
        """Flag every form without a hidden token/csrf/nonce input.

        Returns:
            csrf-missing-token findings, one per form
        """
        if not self.is_enabled(ConfigKey.CHECK_CSRF):
            logger.info("CSRF probing disabled in configuration")
            return []

        try:
            forms = session.evaluate(FORMS_SCRIPT)
        except Exception as e:
            logger.warning(str(ProbeError(f"Error collecting forms for CSRF check: {e}")))
            return []

        findings = []
        for form in forms if isinstance(forms, list) else []:
            if heuristics.has_csrf_token(form.get("hiddenInputs") or []):
                continue
            findings.append(
                Finding(
                    kind=FindingKind.CSRF_MISSING_TOKEN,
                    description="Potential CSRF vulnerability: form without CSRF token",
                    locator=self._describe_form(form),
                )
            )

        logger.info(f"CSRF probe: {len(findings)} finding(s)")
        return findings

    @staticmethod
    def _describe_form(form: Mapping[str, Any]) -> str:
        if form.get("id"):
            return f"form#{form['id']}"
        if form.get("name"):
            return f"form[name='{form['name']}']"
        return f"form:nth-of-type({int(form.get('index', 0)) + 1})"

    def probe_all(self, session: BrowserSession, login_page) -> List[Finding]:
        """Run every probe against the login page's fixed element set."""
        findings = []
        findings.extend(self.probe_xss(session, login_page.USER_ID_INPUT))
        findings.extend(self.probe_xss(session, login_page.PASSWORD_INPUT))
        findings.extend(
            self.probe_sql_injection(
                session,
                login_page.USER_ID_INPUT,
                login_page.PASSWORD_INPUT,
                login_page.LOGIN_BUTTON,
            )
        )
        findings.extend(self.probe_csrf(session))
        return findings

    def _return_to(self, session: BrowserSession, original_url: str) -> None:
        if session.url != original_url:
            logger.debug(f"Returning to {original_url}")
            session.navigate(original_url)
            wait_page_load(session)

    def _recover(
        self, session: BrowserSession, original_url: str, error: ProbeError
    ) -> None:
        logger.warning(str(error))
        try:
            self._return_to(session, original_url)
        except Exception as e:
            logger.debug(f"Could not return to {original_url}: {e}")
