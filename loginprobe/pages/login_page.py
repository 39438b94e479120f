"""Page object for the dashboard login form.

This module provides the LoginPage class which holds the fixed selector set
of the login page and declarative helpers over it. Presence checks return
False instead of raising; actions raise WaitTimeoutError when their element
never shows up.
"""

import logging
import time
from typing import Dict, Optional

from playwright.sync_api import Error as PlaywrightError

from ..browser.interactions import (
    is_element_present,
    safe_click,
    wait_clickable,
    wait_visible,
)
from ..browser.session_factory import BrowserSession
from ..exceptions import InteractionError, WaitTimeoutError

logger = logging.getLogger(__name__)


class LoginPage:
    """Login page object bound to one browser session.

    PATTERN: Selectors as class constants, so scanners can target the same
    fields the page object drives
    """

    USER_ID_INPUT = "#userId"
    PASSWORD_INPUT = "#password"
    LOGIN_BUTTON = "xpath=//button[contains(text(), 'Login')]"
    PASSWORD_VISIBILITY_TOGGLE = (
        "xpath=//button[contains(@class, 'password-toggle') or contains(@class, 'eye-icon')]"
    )
    ERROR_MESSAGE = (
        "xpath=//div[contains(@class, 'error-message') or contains(@class, 'alert')]"
    )
    PAGE_TITLE = "xpath=//h1[contains(text(), 'Janitri') or contains(text(), 'Login')]"
    FORGOT_PASSWORD_LINK = (
        "xpath=//a[contains(text(), 'Forgot') and contains(text(), 'Password')]"
    )
    REMEMBER_ME_CHECKBOX = (
        "xpath=//input[@type='checkbox']"
        "[contains(@id, 'remember') or contains(@name, 'remember')]"
    )
    SIGN_UP_LINK = (
        "xpath=//a[contains(text(), 'Sign up') or contains(text(), 'Register') "
        "or contains(text(), 'Create account')]"
    )
    LOGIN_FORM = "xpath=//form[.//input[@id='userId'] or .//input[@id='password']]"

    FORM_ATTRIBUTES = ("method", "action", "enctype", "autocomplete")

    def __init__(self, session: BrowserSession, timeout: Optional[float] = None):
        """Initialize the page object.

        Args:
            session: Browser session on the login page
            timeout: Element wait in seconds (defaults to the session policy)
        """
        self.session = session
        self.timeout = timeout

    def open(self, url: str) -> "LoginPage":
        self.session.navigate(url)
        return self

    def enter_user_id(self, user_id: str) -> "LoginPage":
        wait_visible(self.session, self.USER_ID_INPUT, self.timeout).fill(user_id)
        return self

    def enter_password(self, password: str) -> "LoginPage":
        wait_visible(self.session, self.PASSWORD_INPUT, self.timeout).fill(password)
        return self

    def clear_user_id(self) -> "LoginPage":
        wait_visible(self.session, self.USER_ID_INPUT, self.timeout).clear()
        return self

    def clear_password(self) -> "LoginPage":
        wait_visible(self.session, self.PASSWORD_INPUT, self.timeout).clear()
        return self

    def click_login_button(self) -> None:
        safe_click(self.session, self.LOGIN_BUTTON)

    def toggle_password_visibility(self) -> None:
        wait_clickable(self.session, self.PASSWORD_VISIBILITY_TOGGLE, self.timeout).click()

    def login(self, user_id: str, password: str) -> None:
        """Fill both fields and submit."""
        logger.debug(f"Logging in as {user_id!r}")
        self.enter_user_id(user_id)
        self.enter_password(password)
        self.click_login_button()

    def is_login_button_enabled(self) -> bool:
        return wait_visible(self.session, self.LOGIN_BUTTON, self.timeout).is_enabled()

    def is_password_masked(self) -> bool:
        field = wait_visible(self.session, self.PASSWORD_INPUT, self.timeout)
        return field.get_attribute("type") == "password"

    def get_error_message(self) -> str:
        """Text of the visible error banner, or an empty string."""
        try:
            return wait_visible(self.session, self.ERROR_MESSAGE, self.timeout).inner_text()
        except (WaitTimeoutError, PlaywrightError):
            return ""

    def _is_visible(self, selector: str) -> bool:
        try:
            wait_visible(self.session, selector, self.timeout)
            return True
        except (WaitTimeoutError, PlaywrightError):
            return False

    def is_page_title_present(self) -> bool:
        return self._is_visible(self.PAGE_TITLE)

    def is_user_id_input_present(self) -> bool:
        return self._is_visible(self.USER_ID_INPUT)

    def is_password_input_present(self) -> bool:
        return self._is_visible(self.PASSWORD_INPUT)

    def is_password_visibility_toggle_present(self) -> bool:
        return self._is_visible(self.PASSWORD_VISIBILITY_TOGGLE)

    def _is_displayed_now(self, selector: str) -> bool:
        if not is_element_present(self.session, selector):
            return False
        try:
            return self.session.locator(selector).first.is_visible()
        except PlaywrightError:
            return False

    def _click_if_present(self, selector: str) -> bool:
        if not is_element_present(self.session, selector):
            return False
        try:
            safe_click(self.session, self.session.locator(selector).first)
            return True
        except InteractionError as e:
            logger.debug(f"Could not click {selector}: {e}")
            return False

    def is_forgot_password_link_present(self) -> bool:
        return self._is_displayed_now(self.FORGOT_PASSWORD_LINK)

    def click_forgot_password_link(self) -> bool:
        return self._click_if_present(self.FORGOT_PASSWORD_LINK)

    def is_remember_me_checkbox_present(self) -> bool:
        return self._is_displayed_now(self.REMEMBER_ME_CHECKBOX)

    def toggle_remember_me_checkbox(self) -> bool:
        return self._click_if_present(self.REMEMBER_ME_CHECKBOX)

    def is_sign_up_link_present(self) -> bool:
        return self._is_displayed_now(self.SIGN_UP_LINK)

    def click_sign_up_link(self) -> bool:
        return self._click_if_present(self.SIGN_UP_LINK)

    def user_id_field(self):
        return wait_visible(self.session, self.USER_ID_INPUT, self.timeout)

    def password_field(self):
        return wait_visible(self.session, self.PASSWORD_INPUT, self.timeout)

    def login_button(self):
        return wait_visible(self.session, self.LOGIN_BUTTON, self.timeout)

    def get_form_attributes(self) -> Dict[str, Optional[str]]:
        """Submission attributes of the login form; empty when the form is absent."""
        if not is_element_present(self.session, self.LOGIN_FORM):
            return {}
        form = self.session.locator(self.LOGIN_FORM).first
        try:
            return {name: form.get_attribute(name) for name in self.FORM_ATTRIBUTES}
        except PlaywrightError as e:
            logger.debug(f"Could not read login form attributes: {e}")
            return {}

    def measure_form_render_time(self) -> int:
        """Milliseconds until the login form is visible."""
        start = time.perf_counter()
        wait_visible(self.session, self.LOGIN_FORM, self.timeout)
        return int((time.perf_counter() - start) * 1000)

    def has_html_lang_attribute(self) -> bool:
        lang = self.session.evaluate("() => document.documentElement.lang")
        return bool(lang)
