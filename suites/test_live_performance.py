"""Live load and interaction timing of the login page."""

import time

import pytest

from loginprobe.browser.interactions import check_performance_threshold

pytestmark = pytest.mark.live


class TestPerformance:
    def test_page_load_within_threshold(self, harness, browser_session):
        assert check_performance_threshold(browser_session, harness.base_url)

    def test_form_renders_quickly(self, login_page):
        assert login_page.measure_form_render_time() <= 1000

    def test_credential_input_time(self, login_page):
        start = time.perf_counter()
        login_page.enter_user_id("test@example.com")
        login_page.enter_password("password123")
        input_ms = (time.perf_counter() - start) * 1000
        assert input_ms <= 1000, f"Credential input time {input_ms:.0f}ms exceeds 1000ms"
