"""Process-wide harness wiring.

HarnessContext owns the single ConfigurationStore and ResultAggregator of a
process, and builds the session factory and scanners around them. It is
created once at process start (the pytest plugin or the CLI) and passed by
reference; nothing in the package keeps a module-level instance.
"""

import logging
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional, Union

from .browser.accessibility_auditor import AccessibilityAuditor
from .browser.session_factory import BrowserSession, BrowserSessionFactory
from .browser.vulnerability_probe import VulnerabilityProbe
from .config.harness_config import HARDCODED_DEFAULTS, ConfigKey, ConfigurationStore
from .reporting.aggregator import ResultAggregator

logger = logging.getLogger(__name__)


class HarnessContext:
    """Shared configuration, outcome collector and the services built on them."""

    def __init__(
        self,
        config: ConfigurationStore,
        session_factory: Optional[BrowserSessionFactory] = None,
    ):
        """
        Initialize the harness context.

        Args:
            config: Harness configuration
            session_factory: Session factory (defaults to a Playwright one)
        """
        self.config = config
        self.aggregator = ResultAggregator(config)
        self.session_factory = session_factory or BrowserSessionFactory(config)
        self.vulnerability_probe = VulnerabilityProbe(config)
        self.accessibility_auditor = AccessibilityAuditor(config)

    @classmethod
    def create(cls, config_path: Optional[Union[str, Path]] = None) -> "HarnessContext":
        """Build a context over a lazily loaded configuration store."""
        return cls(ConfigurationStore(config_path))

    @property
    def base_url(self) -> str:
        return self.config.get_string(
            ConfigKey.BASE_URL, HARDCODED_DEFAULTS[ConfigKey.BASE_URL]
        )

    def new_session(
        self, engine_name: Optional[str] = None, headless: Optional[bool] = None
    ) -> BrowserSession:
        return self.session_factory.create(engine_name, headless)

    @contextmanager
    def session(
        self, engine_name: Optional[str] = None, headless: Optional[bool] = None
    ) -> Iterator[BrowserSession]:
        """Open a session for the duration of a block and always close it."""
        browser_session = self.new_session(engine_name, headless)
        try:
            yield browser_session
        finally:
            browser_session.close()
