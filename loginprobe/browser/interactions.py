"""Resilient interaction primitives for browser sessions.

Explicit waits, a retrying click, screenshot capture and page-load timing.
Every function takes the session it acts on; timeouts default to the
session's timeout policy. Waits block the calling thread, never the page.
"""

import logging
import re
import time
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Optional, Union

from playwright.sync_api import (
    Error as PlaywrightError,
    TimeoutError as PlaywrightTimeoutError,
)

from ..config.harness_config import ConfigKey
from ..exceptions import InteractionError, WaitTimeoutError
from .session_factory import BrowserSession, ElementTarget

logger = logging.getLogger(__name__)

POLL_INTERVAL_SECONDS = 0.25
MAX_CLICK_ATTEMPTS = 3
SCREENSHOT_DIR = "screenshots"
SCREENSHOT_TIMESTAMP_FORMAT = "%Y%m%d_%H%M%S"
DEFAULT_PERFORMANCE_THRESHOLD_MS = 3000

READY_STATE_COMPLETE = "() => document.readyState === 'complete'"
SCRIPT_CLICK = "el => el.click()"

# Error fragments Playwright reports for elements that may recover on retry
TRANSIENT_CLICK_MARKERS = (
    "not attached to the dom",
    "element is detached",
    "stale",
    "intercepts pointer events",
    "element is not stable",
    "element is outside of the viewport",
)


def _timeout_ms(session: BrowserSession, timeout: Optional[float]) -> int:
    if timeout is None:
        return session.timeouts.element_wait_ms
    return int(timeout * 1000)


def describe_target(target: ElementTarget) -> str:
    return target if isinstance(target, str) else repr(target)


def wait_visible(
    session: BrowserSession, target: ElementTarget, timeout: Optional[float] = None
):
    """
    Wait for an element to become visible.

    Args:
        session: Browser session
        target: Selector or Locator
        timeout: Timeout in seconds (defaults to the element-wait policy)

    Returns:
        Locator for the first matching element

    Raises:
        WaitTimeoutError: If the element is not visible in time
    """
    timeout_ms = _timeout_ms(session, timeout)
    locator = session.locator(target).first
    try:
        locator.wait_for(state="visible", timeout=timeout_ms)
    except PlaywrightTimeoutError as e:
        raise WaitTimeoutError(
            f"Element {describe_target(target)} not visible after {timeout_ms}ms"
        ) from e
    return locator


def wait_clickable(
    session: BrowserSession, target: ElementTarget, timeout: Optional[float] = None
):
    """
    Wait for an element to be visible and enabled.

    Raises:
        WaitTimeoutError: If the element is not clickable in time
    """
    timeout_ms = _timeout_ms(session, timeout)
    deadline = time.monotonic() + timeout_ms / 1000
    locator = wait_visible(session, target, timeout_ms / 1000)

    while True:
        try:
            if locator.is_enabled():
                return locator
        except PlaywrightError as e:
            logger.debug(f"Enabled check failed for {describe_target(target)}: {e}")

        if time.monotonic() >= deadline:
            raise WaitTimeoutError(
                f"Element {describe_target(target)} not clickable after {timeout_ms}ms"
            )
        time.sleep(POLL_INTERVAL_SECONDS)


def wait_for_script(
    session: BrowserSession,
    expression: str,
    timeout: Optional[float] = None,
    arg=None,
) -> None:
    """
    Poll a JavaScript condition until it is truthy.

    Bounded by the script-execution policy unless a timeout is given.

    Raises:
        WaitTimeoutError: If the condition does not hold in time
    """
    timeout_ms = session.timeouts.script_ms if timeout is None else int(timeout * 1000)
    try:
        session.page.wait_for_function(
            expression,
            arg=arg,
            polling=int(POLL_INTERVAL_SECONDS * 1000),
            timeout=timeout_ms,
        )
    except PlaywrightTimeoutError as e:
        raise WaitTimeoutError(
            f"Condition not met after {timeout_ms}ms: {expression}"
        ) from e


def wait_page_load(session: BrowserSession, timeout: Optional[float] = None) -> None:
    """
    Wait until ``document.readyState`` is ``complete``.

    Bounded by the page-load policy unless a timeout is given.

    Raises:
        WaitTimeoutError: If the page does not finish loading in time
    """
    if timeout is None:
        timeout = session.timeouts.page_load_ms / 1000
    wait_for_script(session, READY_STATE_COMPLETE, timeout)


class ClickPath(str, Enum):
    """Path taken by safe_click."""

    DIRECT = "direct"
    SCRIPT = "script"


class _ClickState(Enum):
    DIRECT = "direct"
    FALLBACK = "fallback"


def is_transient_click_error(error: BaseException) -> bool:
    """Whether a click failure may succeed on retry."""
    if isinstance(error, WaitTimeoutError):
        return False
    if isinstance(error, PlaywrightTimeoutError):
        return True
    if isinstance(error, PlaywrightError):
        message = str(error).lower()
        return any(marker in message for marker in TRANSIENT_CLICK_MARKERS)
    return False


def safe_click(
    session: BrowserSession,
    target: ElementTarget,
    max_attempts: int = MAX_CLICK_ATTEMPTS,
    highlight: bool = False,
) -> ClickPath:
    """
    Click an element, retrying transient failures, then falling back to a script click.

    States: DIRECT (up to ``max_attempts`` clicks, retried only on transient
    errors) then FALLBACK (one script-driven click). A non-transient error
    ends the DIRECT state early.

    Args:
        session: Browser session
        target: Selector or Locator
        max_attempts: Direct click budget
        highlight: Briefly highlight the element before clicking

    Returns:
        The path that succeeded

    Raises:
        InteractionError: If both the direct and script paths fail
    """
    locator = session.locator(target)
    state = _ClickState.DIRECT
    attempts = 0
    last_error: Optional[BaseException] = None

    while True:
        if state is _ClickState.DIRECT:
            attempts += 1
            try:
                wait_clickable(session, locator)
                if highlight:
                    highlight_element(session, locator)
                locator.click(timeout=session.timeouts.element_wait_ms)
                return ClickPath.DIRECT
            except (PlaywrightError, WaitTimeoutError) as e:
                last_error = e
                if is_transient_click_error(e) and attempts < max_attempts:
                    logger.debug(
                        f"Click attempt {attempts}/{max_attempts} on "
                        f"{describe_target(target)} failed: {e}"
                    )
                    continue
                logger.warning(
                    f"Direct click on {describe_target(target)} failed after "
                    f"{attempts} attempt(s), trying script click: {e}"
                )
                state = _ClickState.FALLBACK
        else:
            try:
                locator.evaluate(SCRIPT_CLICK)
                return ClickPath.SCRIPT
            except PlaywrightError as e:
                raise InteractionError(
                    f"Failed to click {describe_target(target)} after "
                    f"{attempts} attempt(s) and script fallback: {last_error}; {e}"
                ) from e


def _safe_label(label: str) -> str:
    return re.sub(r"[^\w.-]+", "_", label).strip("_") or "screenshot"


def _unique_path(directory: Path, stem: str) -> Path:
    path = directory / f"{stem}.png"
    counter = 1
    while path.exists():
        path = directory / f"{stem}_{counter}.png"
        counter += 1
    return path


def take_screenshot(
    session: BrowserSession,
    label: str,
    directory: Optional[Union[str, Path]] = None,
) -> Optional[str]:
    """
    Capture the viewport to ``<label>_<yyyyMMdd_HHmmss>.png``.

    Best-effort: failures are logged and None is returned.

    Args:
        session: Browser session
        label: Usually the test name
        directory: Target directory (defaults to the ``screenshotDir`` setting)

    Returns:
        Path of the stored file, or None
    """
    try:
        target_dir = Path(
            directory or session.config.get_string(ConfigKey.SCREENSHOT_DIR, SCREENSHOT_DIR)
        )
        target_dir.mkdir(parents=True, exist_ok=True)
        timestamp = datetime.now().strftime(SCREENSHOT_TIMESTAMP_FORMAT)
        path = _unique_path(target_dir, f"{_safe_label(label)}_{timestamp}")
        session.page.screenshot(path=str(path))
        logger.info(f"Captured screenshot to {path}")
        return str(path)
    except Exception as e:
        logger.warning(f"Screenshot capture failed for {label}: {e}")
        return None


def measure_page_load_time(session: BrowserSession, url: str) -> int:
    """
    Navigate to a URL and time it until the page reports complete.

    Returns:
        Elapsed wall-clock milliseconds
    """
    start = time.perf_counter()
    session.navigate(url)
    wait_page_load(session)
    elapsed_ms = int((time.perf_counter() - start) * 1000)
    logger.info(f"Page load time for {url}: {elapsed_ms}ms")
    return elapsed_ms


def check_performance_threshold(
    session: BrowserSession, url: str, threshold_ms: Optional[int] = None
) -> bool:
    """Whether the page loads within ``performanceThreshold`` milliseconds."""
    if threshold_ms is None:
        threshold_ms = session.config.get_int(
            ConfigKey.PERFORMANCE_THRESHOLD, DEFAULT_PERFORMANCE_THRESHOLD_MS
        )
    return measure_page_load_time(session, url) <= threshold_ms


def is_element_present(session: BrowserSession, target: ElementTarget) -> bool:
    try:
        return session.locator(target).count() > 0
    except PlaywrightError as e:
        logger.debug(f"Presence check failed for {describe_target(target)}: {e}")
        return False


def scroll_to_element(
    session: BrowserSession, target: ElementTarget, pause: float = 0.5
) -> None:
    session.locator(target).first.scroll_into_view_if_needed()
    if pause:
        time.sleep(pause)


def highlight_element(
    session: BrowserSession, target: ElementTarget, duration: float = 0.5
) -> None:
    """Outline an element briefly. Fire-and-forget: errors are only logged."""
    try:
        locator = session.locator(target).first
        original_style = locator.get_attribute("style")
        locator.evaluate(
            "el => el.setAttribute('style', 'background: yellow; border: 2px solid red;')"
        )
        time.sleep(duration)
        if original_style is None:
            locator.evaluate("el => el.removeAttribute('style')")
        else:
            locator.evaluate("(el, style) => el.setAttribute('style', style)", original_style)
    except Exception as e:
        logger.debug(f"Highlight failed for {describe_target(target)}: {e}")
