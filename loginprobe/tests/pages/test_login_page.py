"""Tests for the LoginPage page object."""

import pytest
from unittest.mock import patch
from playwright.sync_api import TimeoutError as PlaywrightTimeoutError

from loginprobe.pages import login_page as login_page_module
from loginprobe.pages.login_page import LoginPage


@pytest.fixture
def login_page(session):
    return LoginPage(session)


@pytest.fixture
def field(page):
    """Element returned by every visible-wait."""
    return page.locator.return_value.first


class TestActions:
    """Tests for form actions."""

    def test_enter_credentials(self, login_page, page, field):
        login_page.enter_user_id("nurse@example.com").enter_password("s3cret")

        page.locator.assert_any_call(LoginPage.USER_ID_INPUT)
        page.locator.assert_any_call(LoginPage.PASSWORD_INPUT)
        assert [c.args[0] for c in field.fill.call_args_list] == ["nurse@example.com", "s3cret"]

    def test_login_submits_with_safe_click(self, login_page, session):
        with patch.object(login_page_module, "safe_click") as click:
            login_page.login("user", "pass")

        click.assert_called_once_with(session, LoginPage.LOGIN_BUTTON)

    def test_clear_fields(self, login_page, field):
        login_page.clear_user_id().clear_password()

        assert field.clear.call_count == 2


class TestState:
    """Tests for state queries."""

    def test_password_masked(self, login_page, field):
        field.get_attribute.return_value = "password"
        assert login_page.is_password_masked()

        field.get_attribute.return_value = "text"
        assert not login_page.is_password_masked()

    def test_error_message(self, login_page, field):
        field.inner_text.return_value = "Invalid credentials"

        assert login_page.get_error_message() == "Invalid credentials"

    def test_error_message_absent(self, login_page, field):
        field.wait_for.side_effect = PlaywrightTimeoutError("Timeout")

        assert login_page.get_error_message() == ""
        assert not login_page.is_page_title_present()

    def test_optional_links_absent(self, login_page, page):
        page.locator.return_value.count.return_value = 0

        assert not login_page.is_forgot_password_link_present()
        assert not login_page.click_sign_up_link()

    def test_optional_link_present(self, login_page, page, field):
        page.locator.return_value.count.return_value = 1
        field.is_visible.return_value = True

        assert login_page.is_remember_me_checkbox_present()

    def test_form_attributes(self, login_page, page, field):
        page.locator.return_value.count.return_value = 1
        field.get_attribute.side_effect = lambda name: {"method": "post", "action": "/auth"}.get(name)

        assert login_page.get_form_attributes() == {
            "method": "post",
            "action": "/auth",
            "enctype": None,
            "autocomplete": None,
        }

    def test_form_attributes_without_form(self, login_page, page):
        page.locator.return_value.count.return_value = 0

        assert login_page.get_form_attributes() == {}

    def test_html_lang(self, login_page, page):
        page.evaluate.return_value = "en"
        assert login_page.has_html_lang_attribute()

        page.evaluate.return_value = ""
        assert not login_page.has_html_lang_attribute()
