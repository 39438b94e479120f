"""Tests for waits, safe_click, screenshots and timing helpers."""

import re

import pytest
from unittest.mock import patch
from playwright.sync_api import (
    Error as PlaywrightError,
    TimeoutError as PlaywrightTimeoutError,
)

from loginprobe.browser import interactions
from loginprobe.browser.interactions import (
    ClickPath,
    SCRIPT_CLICK,
    check_performance_threshold,
    highlight_element,
    is_element_present,
    is_transient_click_error,
    measure_page_load_time,
    safe_click,
    scroll_to_element,
    take_screenshot,
    wait_clickable,
    wait_page_load,
    wait_visible,
)
from loginprobe.exceptions import InteractionError, WaitTimeoutError


@pytest.fixture
def locator(page):
    return page.locator.return_value


class TestWaits:
    """Tests for explicit waits."""

    def test_wait_visible_returns_first_match(self, session, locator):
        result = wait_visible(session, "#userId")

        assert result is locator.first
        locator.first.wait_for.assert_called_once_with(state="visible", timeout=10000)

    def test_wait_visible_timeout(self, session, locator):
        locator.first.wait_for.side_effect = PlaywrightTimeoutError("Timeout 500ms exceeded")

        with pytest.raises(WaitTimeoutError, match="not visible"):
            wait_visible(session, "#userId", timeout=0.5)

    def test_wait_timeout_is_builtin_timeout(self, session, locator):
        locator.first.wait_for.side_effect = PlaywrightTimeoutError("Timeout")

        with pytest.raises(TimeoutError):
            wait_visible(session, "#userId")

    def test_wait_clickable_disabled_element(self, session, locator):
        locator.first.is_enabled.return_value = False

        with patch.object(interactions, "POLL_INTERVAL_SECONDS", 0.01):
            with pytest.raises(WaitTimeoutError, match="not clickable"):
                wait_clickable(session, "#login", timeout=0.05)

    def test_wait_page_load_uses_page_load_policy(self, session, page):
        wait_page_load(session)

        args, kwargs = page.wait_for_function.call_args
        assert args[0] == interactions.READY_STATE_COMPLETE
        assert kwargs["timeout"] == 30000

    def test_wait_page_load_timeout(self, session, page):
        page.wait_for_function.side_effect = PlaywrightTimeoutError("Timeout")

        with pytest.raises(WaitTimeoutError):
            wait_page_load(session, timeout=1)


class TestTransientErrors:
    """Tests for click error classification."""

    @pytest.mark.parametrize(
        "message",
        [
            "Element is not attached to the DOM",
            "<div> intercepts pointer events",
            "element is not stable",
        ],
    )
    def test_transient(self, message):
        assert is_transient_click_error(PlaywrightError(message))

    def test_attempt_timeout_is_transient(self):
        assert is_transient_click_error(PlaywrightTimeoutError("Timeout 10000ms exceeded"))

    def test_wait_timeout_is_not_transient(self):
        assert not is_transient_click_error(WaitTimeoutError("not visible"))

    def test_other_errors_are_not_transient(self):
        assert not is_transient_click_error(PlaywrightError("Target page has been closed"))


class TestSafeClick:
    """Tests for the retrying click state machine."""

    def test_direct_click(self, session, locator):
        assert safe_click(session, "#login") is ClickPath.DIRECT
        locator.click.assert_called_once()

    def test_two_transient_failures_then_success(self, session, locator):
        locator.click.side_effect = [
            PlaywrightError("Element is not attached to the DOM"),
            PlaywrightError("element is not stable"),
            None,
        ]

        assert safe_click(session, "#login") is ClickPath.DIRECT
        assert locator.click.call_count == 3
        locator.evaluate.assert_not_called()

    def test_falls_back_after_attempt_budget(self, session, locator):
        locator.click.side_effect = PlaywrightError("element is not stable")

        assert safe_click(session, "#login") is ClickPath.SCRIPT
        assert locator.click.call_count == 3
        locator.evaluate.assert_called_once_with(SCRIPT_CLICK)

    def test_non_transient_error_falls_back_immediately(self, session, locator):
        locator.click.side_effect = PlaywrightError("Unexpected failure")

        assert safe_click(session, "#login") is ClickPath.SCRIPT
        assert locator.click.call_count == 1

    def test_all_paths_fail(self, session, locator):
        locator.click.side_effect = PlaywrightError("element is not stable")
        locator.evaluate.side_effect = PlaywrightError("Element is detached")

        with pytest.raises(InteractionError, match="script fallback"):
            safe_click(session, "#login")


class TestScreenshots:
    """Tests for screenshot capture."""

    def test_named_by_label_and_timestamp(self, session, page, tmp_path):
        path = take_screenshot(session, "test login/failure", directory=tmp_path)

        assert re.search(r"test_login_failure_\d{8}_\d{6}\.png$", path)
        page.screenshot.assert_called_once_with(path=path)

    def test_directory_created(self, session, tmp_path):
        target = tmp_path / "nested" / "shots"

        take_screenshot(session, "case", directory=target)

        assert target.is_dir()

    def test_collision_gets_suffix(self, tmp_path):
        (tmp_path / "case_20250101_120000.png").write_bytes(b"")

        path = interactions._unique_path(tmp_path, "case_20250101_120000")

        assert path.name == "case_20250101_120000_1.png"

    def test_failure_returns_none(self, session, page, tmp_path):
        page.screenshot.side_effect = PlaywrightError("Target closed")

        assert take_screenshot(session, "case", directory=tmp_path) is None

    def test_default_directory_from_config(self, session, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)

        path = take_screenshot(session, "case")

        assert path.startswith("screenshots")


class TestMeasurements:
    """Tests for page load timing."""

    def test_measure_page_load_time(self, session, page):
        with patch.object(interactions, "wait_page_load") as mock_wait:
            elapsed = measure_page_load_time(session, "https://dashboard.example.com/")

        page.goto.assert_called_once()
        assert page.goto.call_args.args[0] == "https://dashboard.example.com/"
        mock_wait.assert_called_once_with(session)
        assert elapsed >= 0

    def test_threshold_from_configuration(self, session):
        with patch.object(interactions, "measure_page_load_time", return_value=2500):
            assert check_performance_threshold(session, "https://x/")

    def test_explicit_threshold(self, session):
        with patch.object(interactions, "measure_page_load_time", return_value=2500):
            assert not check_performance_threshold(session, "https://x/", threshold_ms=2000)


class TestElementHelpers:
    """Tests for presence, scrolling and highlight helpers."""

    def test_is_element_present(self, session, locator):
        locator.count.return_value = 0
        assert not is_element_present(session, ".missing")

        locator.count.return_value = 2
        assert is_element_present(session, ".present")

    def test_highlight_swallows_errors(self, session, locator):
        locator.first.get_attribute.side_effect = PlaywrightError("detached")

        highlight_element(session, "#login", duration=0)

    def test_scroll_to_element(self, session, page, locator):
        with patch.object(interactions.time, "sleep") as sleep:
            scroll_to_element(session, "#login", pause=0.5)

        page.locator.assert_called_once_with("#login")
        locator.first.scroll_into_view_if_needed.assert_called_once_with()
        sleep.assert_called_once_with(0.5)
