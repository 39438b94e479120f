"""Playwright browser session construction.

This module provides the BrowserSession handle and the BrowserSessionFactory
that provisions one. A session bundles the Playwright driver, browser,
context and page started for a single test case, with its timeout policy
applied.

CRITICAL: Every session must be closed by the test that created it. The
Playwright sync API binds a driver to the thread that started it, so a
session is never shared across threads.
"""

import logging
import threading
from typing import Any, Callable, Dict, List, Optional, Union

from playwright.sync_api import (
    sync_playwright,
    Browser,
    BrowserContext,
    Dialog,
    Locator,
    Page,
    Playwright,
    Error as PlaywrightError,
)

from ..config.harness_config import ConfigKey, ConfigurationStore
from ..exceptions import InteractionError, NavigationError, SessionCreationError
from ..models.harness_models import BrowserType, DeviceProfile, TimeoutPolicy, Viewport

logger = logging.getLogger(__name__)

ElementTarget = Union[str, Locator]


class BrowserSession:
    """Handle over one running browser page and the resources behind it.

    Native dialogs (alert, confirm, prompt) are recorded and accepted as soon
    as they open, so scanners can inspect them without blocking the page.
    """

    def __init__(
        self,
        playwright: Playwright,
        browser: Browser,
        context: BrowserContext,
        page: Page,
        config: ConfigurationStore,
        browser_type: BrowserType = BrowserType.CHROMIUM,
        timeouts: Optional[TimeoutPolicy] = None,
        headless: bool = True,
        device: Optional[DeviceProfile] = None,
    ):
        """Initialize the session handle.

        Args:
            playwright: Started Playwright driver
            browser: Launched browser
            context: Browser context owned by this session
            page: Page driven by this session
            config: Harness configuration
            browser_type: Engine the browser was launched with
            timeouts: Timeout policy applied to the context
            headless: Whether the browser runs headless
            device: Emulated device, if any
        """
        self.playwright = playwright
        self.browser = browser
        self.context = context
        self.page = page
        self.config = config
        self.browser_type = browser_type
        self.timeouts = timeouts or TimeoutPolicy()
        self.headless = headless
        self.device = device
        self.dialogs: List[str] = []
        self._closed = False
        self._owner = threading.get_ident()

        self.page.on("dialog", self._on_dialog)

    def __enter__(self) -> "BrowserSession":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def _on_dialog(self, dialog: Dialog) -> None:
        self.dialogs.append(dialog.message)
        logger.debug(f"Dialog opened ({dialog.type}): {dialog.message}")
        try:
            dialog.accept()
        except PlaywrightError as e:
            logger.debug(f"Dialog already dismissed: {e}")

    def pop_dialogs(self) -> List[str]:
        """Return and forget the messages of dialogs seen so far."""
        messages = list(self.dialogs)
        self.dialogs.clear()
        return messages

    @property
    def closed(self) -> bool:
        return self._closed

    def _ensure_usable(self) -> None:
        if self._closed:
            raise InteractionError("Browser session is already closed")
        if threading.get_ident() != self._owner:
            raise InteractionError("Browser session used outside its owning thread")

    @property
    def url(self) -> str:
        return self.page.url

    def locator(self, target: ElementTarget) -> Locator:
        """Resolve a selector string to a Locator; Locators pass through."""
        self._ensure_usable()
        if isinstance(target, str):
            return self.page.locator(target)
        return target

    def navigate(self, url: str, wait_until: str = "load") -> None:
        """Navigate within the page-load timeout policy.

        Raises:
            NavigationError: If the page cannot be loaded
        """
        self._ensure_usable()
        try:
            self.page.goto(url, wait_until=wait_until, timeout=self.timeouts.page_load_ms)
        except PlaywrightError as e:
            raise NavigationError(f"Failed to load {url}: {e}") from e
        logger.debug(f"Navigated to {url}")

    def content(self) -> str:
        self._ensure_usable()
        return self.page.content()

    def title(self) -> str:
        self._ensure_usable()
        return self.page.title()

    def evaluate(self, expression: str, arg: Any = None) -> Any:
        """Evaluate a JavaScript expression in the page."""
        self._ensure_usable()
        if arg is not None:
            return self.page.evaluate(expression, arg)
        return self.page.evaluate(expression)

    def close(self) -> None:
        """Release the page, context, browser and driver.

        Only the first call has an effect. Errors from individual resources
        are logged so the remaining ones are still released.
        """
        if self._closed:
            logger.debug("Browser session already closed")
            return
        self._closed = True

        for name, resource in (
            ("context", self.context),
            ("browser", self.browser),
        ):
            try:
                resource.close()
            except PlaywrightError as e:
                logger.warning(f"Failed to close {name}: {e}")

        try:
            self.playwright.stop()
        except PlaywrightError as e:
            logger.warning(f"Failed to stop Playwright: {e}")

        logger.info(f"Closed {self.browser_type.value} browser session")


class BrowserSessionFactory:
    """Provision configured browser sessions.

    The factory reads engine, mode and timeout settings from the
    configuration and holds no state between calls: every call to create()
    starts its own Playwright driver and returns an independent session.
    """

    HARDENING_ARGS = [
        "--disable-notifications",
        "--disable-popup-blocking",
        "--disable-infobars",
        "--disable-extensions",
    ]
    HEADLESS_ARGS = ["--disable-gpu"]
    FIREFOX_PREFS = {
        "dom.webnotifications.enabled": False,
        "dom.push.enabled": False,
        "dom.disable_open_during_load": False,
    }

    DEFAULT_VIEWPORT = Viewport(width=1920, height=1080)
    DEFAULT_DEVICE_NAME = "iPhone X"
    MOBILE_USER_AGENT = (
        "Mozilla/5.0 (iPhone; CPU iPhone OS 13_2_3 like Mac OS X) "
        "AppleWebKit/605.1.15 (KHTML, like Gecko) Version/13.0.3 "
        "Mobile/15E148 Safari/604.1"
    )
    MOBILE_VIEWPORT = Viewport(
        width=375, height=812, device_scale_factor=3.0, is_mobile=True, has_touch=True
    )

    def __init__(
        self,
        config: ConfigurationStore,
        playwright_factory: Callable[[], Any] = sync_playwright,
    ):
        """Initialize the session factory.

        Args:
            config: Harness configuration
            playwright_factory: Callable returning a Playwright context manager
        """
        self.config = config
        self._playwright_factory = playwright_factory

    def create(
        self, engine_name: Optional[str] = None, headless: Optional[bool] = None
    ) -> BrowserSession:
        """Launch a new browser session.

        Args:
            engine_name: Browser engine (defaults to the ``browser`` setting)
            headless: Headless mode (defaults to the ``headless`` setting)

        Returns:
            Ready session with timeouts applied and viewport maximized

        Raises:
            SessionCreationError: If the engine is unknown or fails to start
        """
        browser_type = self.resolve_engine(
            engine_name or self.config.get_string(ConfigKey.BROWSER, "chrome")
        )
        if headless is None:
            headless = self.config.get_bool(ConfigKey.HEADLESS, False)

        playwright = None
        browser = None
        context = None
        try:
            playwright = self._playwright_factory().start()
            browser = self._launch(playwright, browser_type, headless)

            device = None
            if self.config.get_bool(ConfigKey.EMULATE_DEVICE, False):
                device = self.resolve_device(playwright)

            context = browser.new_context(
                **self.build_context_options(browser_type, device)
            )
            page = context.new_page()

            session = BrowserSession(
                playwright=playwright,
                browser=browser,
                context=context,
                page=page,
                config=self.config,
                browser_type=browser_type,
                timeouts=self.timeout_policy(),
                headless=headless,
                device=device,
            )
            self.apply_timeouts(session)
            if device is None:
                self.maximize(session)
        except Exception as e:
            logger.error(f"Failed to launch {browser_type.value} browser: {e}")
            self._release(context, browser, playwright)
            raise SessionCreationError(
                f"Browser launch failed for {browser_type.value}: {e}"
            ) from e

        logger.info(
            f"Launched {browser_type.value} browser (headless={headless}, "
            f"device={device.name if device else 'desktop'})"
        )
        return session

    @staticmethod
    def resolve_engine(engine_name: str) -> BrowserType:
        try:
            return BrowserType(engine_name.strip().lower())
        except ValueError:
            raise SessionCreationError(f"Unsupported browser: {engine_name}")

    def _launch(
        self, playwright: Playwright, browser_type: BrowserType, headless: bool
    ) -> Browser:
        launcher = getattr(playwright, browser_type.launcher)
        options: Dict[str, Any] = {"headless": headless}

        if browser_type.is_chromium_based:
            args = list(self.HARDENING_ARGS)
            if headless:
                args.extend(self.HEADLESS_ARGS)
            options["args"] = args
            if browser_type is BrowserType.EDGE:
                options["channel"] = "msedge"
        elif browser_type is BrowserType.FIREFOX:
            options["firefox_user_prefs"] = dict(self.FIREFOX_PREFS)

        return launcher.launch(**options)

    def resolve_device(self, playwright: Playwright) -> DeviceProfile:
        """Look up the configured device, falling back to a fixed iPhone profile."""
        name = self.config.get_string(ConfigKey.DEVICE_NAME, self.DEFAULT_DEVICE_NAME)
        descriptor = playwright.devices.get(name) if playwright.devices else None

        if not descriptor:
            logger.warning(f"Unknown device '{name}', using default mobile profile")
            return DeviceProfile(
                name=name,
                viewport=self.MOBILE_VIEWPORT,
                user_agent=self.MOBILE_USER_AGENT,
            )

        viewport = descriptor.get("viewport") or {}
        return DeviceProfile(
            name=name,
            viewport=Viewport(
                width=viewport.get("width", self.MOBILE_VIEWPORT.width),
                height=viewport.get("height", self.MOBILE_VIEWPORT.height),
                device_scale_factor=descriptor.get("device_scale_factor", 1.0),
                is_mobile=descriptor.get("is_mobile", True),
                has_touch=descriptor.get("has_touch", True),
            ),
            user_agent=descriptor.get("user_agent", self.MOBILE_USER_AGENT),
        )

    def build_context_options(
        self, browser_type: BrowserType, device: Optional[DeviceProfile] = None
    ) -> Dict[str, Any]:
        """Context options for desktop or emulated-device sessions."""
        viewport = device.viewport if device else self.DEFAULT_VIEWPORT
        options: Dict[str, Any] = {
            "viewport": {"width": viewport.width, "height": viewport.height},
        }
        if device is None:
            return options

        options["user_agent"] = device.user_agent
        options["device_scale_factor"] = viewport.device_scale_factor
        # Firefox rejects mobile emulation flags
        if browser_type is not BrowserType.FIREFOX:
            options["is_mobile"] = viewport.is_mobile
            options["has_touch"] = viewport.has_touch
        return options

    def timeout_policy(self) -> TimeoutPolicy:
        return TimeoutPolicy(
            element_wait_ms=self.config.get_int(ConfigKey.TIMEOUT, 10) * 1000,
            page_load_ms=self.config.get_int(ConfigKey.PAGE_LOAD_TIMEOUT, 30000),
            script_ms=self.config.get_int(ConfigKey.SCRIPT_TIMEOUT, 30000),
        )

    def apply_timeouts(self, session: BrowserSession) -> None:
        """Apply element-wait and page-load timeouts to the session's context.

        Playwright has no script-execution timeout of its own; that policy
        stays on the session and bounds in-page condition waits.
        """
        session.context.set_default_timeout(session.timeouts.element_wait_ms)
        session.context.set_default_navigation_timeout(session.timeouts.page_load_ms)

    def maximize(self, session: BrowserSession) -> None:
        """Resize the viewport to the available screen area."""
        try:
            size = session.page.evaluate(
                "() => ({width: window.screen.availWidth, height: window.screen.availHeight})"
            )
            if size and size.get("width", 0) > 0 and size.get("height", 0) > 0:
                session.page.set_viewport_size(
                    {"width": size["width"], "height": size["height"]}
                )
        except PlaywrightError as e:
            logger.debug(f"Could not maximize viewport: {e}")

    @staticmethod
    def _release(
        context: Optional[BrowserContext],
        browser: Optional[Browser],
        playwright: Optional[Playwright],
    ) -> None:
        for resource in (context, browser):
            if resource is not None:
                try:
                    resource.close()
                except Exception as e:
                    logger.debug(f"Error releasing browser resource: {e}")
        if playwright is not None:
            try:
                playwright.stop()
            except Exception as e:
                logger.debug(f"Error stopping Playwright: {e}")
