"""Harness configuration with layered fallback.

Settings are flat string key/value pairs loaded once, on first access, from
the first tier that can be read:

1. An explicit configuration file (or ``config.properties`` in the working
   directory when no path is given)
2. The ``default.properties`` file bundled with the package
3. A hardcoded minimal set

Environment variables prefixed with ``LOGINPROBE_`` override the loaded
values. After loading, the mapping is read-only.
"""

import os
import logging
import threading
from pathlib import Path
from types import MappingProxyType
from typing import Dict, List, Mapping, Optional, Tuple, Union

import yaml
from dotenv import dotenv_values

from ..exceptions import ConfigLoadError

logger = logging.getLogger(__name__)

CONFIG_FILE = "config.properties"
DEFAULT_CONFIG_FILE = Path(__file__).parent / "default.properties"
ENV_PREFIX = "LOGINPROBE_"

YAML_SUFFIXES = (".yaml", ".yml")
TRUE_VALUES = ("true", "1", "yes", "on")
FALSE_VALUES = ("false", "0", "no", "off")


class ConfigKey:
    """Recognized configuration keys."""

    BROWSER = "browser"
    BASE_URL = "baseUrl"
    TIMEOUT = "timeout"
    HEADLESS = "headless"
    SCREENSHOT_ON_FAILURE = "screenshotOnFailure"
    SCREENSHOT_DIR = "screenshotDir"
    ENABLE_SECURITY_TESTS = "enableSecurityTests"
    CHECK_XSS = "checkForXssVulnerabilities"
    CHECK_SQL_INJECTION = "checkForSqlInjectionVulnerabilities"
    CHECK_CSRF = "checkForCsrfVulnerabilities"
    ENABLE_ACCESSIBILITY = "enableAccessibilityTesting"
    ACCESSIBILITY_THRESHOLD = "accessibilityViolationThreshold"
    PERFORMANCE_THRESHOLD = "performanceThreshold"
    PAGE_LOAD_TIMEOUT = "pageLoadTimeout"
    SCRIPT_TIMEOUT = "scriptTimeout"
    EMULATE_DEVICE = "emulateDevice"
    DEVICE_NAME = "deviceName"
    REPORT_DIR = "reportDir"
    HTML_REPORT_FILE = "htmlReportFile"
    CSV_REPORT_FILE = "csvReportFile"
    REPORT_TITLE = "reportTitle"

    @classmethod
    def all(cls) -> List[str]:
        return [
            value
            for name, value in vars(cls).items()
            if name.isupper() and isinstance(value, str)
        ]


HARDCODED_DEFAULTS: Dict[str, str] = {
    ConfigKey.BROWSER: "chrome",
    ConfigKey.BASE_URL: "https://dev-dash.janitri.in/",
    ConfigKey.TIMEOUT: "10",
    ConfigKey.HEADLESS: "false",
    ConfigKey.SCREENSHOT_ON_FAILURE: "true",
}


def read_config_file(path: Path) -> Dict[str, str]:
    """
    Read one configuration file into a flat string mapping.

    Property files (``key=value``) are parsed with python-dotenv; ``.yaml``
    and ``.yml`` files must hold a flat mapping, optionally nested under a
    ``loginprobe`` section.

    Args:
        path: File to read

    Returns:
        Mapping of key to string value

    Raises:
        ConfigLoadError: If the file cannot be read or parsed
    """
    try:
        if path.suffix.lower() in YAML_SUFFIXES:
            with open(path, encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
            if not isinstance(data, dict):
                raise ConfigLoadError(f"{path} does not contain a mapping")
            if isinstance(data.get("loginprobe"), dict):
                data = data["loginprobe"]
            return {
                str(key): _scalar_to_string(value)
                for key, value in data.items()
                if value is not None and not isinstance(value, (dict, list))
            }

        values = dotenv_values(path, encoding="utf-8")
        return {key: value for key, value in values.items() if value is not None}

    except ConfigLoadError:
        raise
    except (OSError, UnicodeDecodeError, yaml.YAMLError) as e:
        raise ConfigLoadError(f"Failed to read {path}: {e}") from e


def _scalar_to_string(value: object) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


class ConfigurationStore:
    """
    Read-only, lazily loaded harness configuration.

    PATTERN: Tiered loading, first readable source wins
    CRITICAL: Never raises to callers; typed accessors apply the default
    GOTCHA: Loading happens once, under a lock, on first access
    """

    def __init__(
        self,
        config_path: Optional[Union[str, Path]] = None,
        default_path: Optional[Path] = DEFAULT_CONFIG_FILE,
        environ: Optional[Mapping[str, str]] = None,
    ):
        """
        Initialize configuration store.

        Args:
            config_path: Explicit configuration file (defaults to ./config.properties)
            default_path: Bundled defaults file
            environ: Environment used for overrides (defaults to os.environ)
        """
        self.config_path = Path(config_path) if config_path else None
        self.default_path = default_path
        self._environ = environ
        self._values: Optional[Mapping[str, str]] = None
        self._source: Optional[str] = None
        self._lock = threading.Lock()

    @classmethod
    def from_mapping(cls, values: Mapping[str, object]) -> "ConfigurationStore":
        """Build an already-loaded store from explicit values."""
        store = cls(default_path=None, environ={})
        store._values = MappingProxyType(
            {key: _scalar_to_string(value) for key, value in values.items()}
        )
        store._source = "mapping"
        return store

    @property
    def source(self) -> str:
        """Tier the values were loaded from (user, bundled, hardcoded, mapping)."""
        self._ensure_loaded()
        return self._source or "hardcoded"

    def _ensure_loaded(self) -> Mapping[str, str]:
        values = self._values
        if values is None:
            with self._lock:
                if self._values is None:
                    self._values = MappingProxyType(self._load())
                values = self._values
        return values

    def _candidate_files(self) -> List[Tuple[str, Path]]:
        user_path = self.config_path or Path.cwd() / CONFIG_FILE
        candidates = [("user", user_path)]
        if self.default_path is not None:
            candidates.append(("bundled", self.default_path))
        return candidates

    def _load(self) -> Dict[str, str]:
        values: Optional[Dict[str, str]] = None

        for tier, path in self._candidate_files():
            if not path.exists():
                logger.debug(f"No {tier} configuration at {path}")
                continue
            try:
                values = read_config_file(path)
                self._source = tier
                logger.info(f"Loaded {tier} configuration from {path}")
                break
            except ConfigLoadError as e:
                logger.warning(f"{e}; falling back to next configuration tier")

        if values is None:
            logger.warning("No configuration file found. Using hardcoded defaults.")
            values = dict(HARDCODED_DEFAULTS)
            self._source = "hardcoded"

        values.update(self._get_env_overrides(values))
        return values

    def _get_env_overrides(self, loaded: Mapping[str, str]) -> Dict[str, str]:
        """
        Collect overrides from LOGINPROBE_* environment variables.

        LOGINPROBE_BASE_URL and LOGINPROBE_BASEURL both map to ``baseUrl``;
        names matching no known key are kept lower-cased.
        """
        environ = os.environ if self._environ is None else self._environ
        known = {
            key.lower().replace("_", ""): key
            for key in list(ConfigKey.all()) + list(loaded)
        }
        overrides: Dict[str, str] = {}

        for name, value in environ.items():
            if not name.startswith(ENV_PREFIX):
                continue
            suffix = name[len(ENV_PREFIX):]
            key = known.get(suffix.lower().replace("_", ""), suffix.lower())
            overrides[key] = value
            logger.debug(f"Configuration override from environment: {key}")

        return overrides

    def get(self, key: str) -> Optional[str]:
        """Get the raw value for a key, or None when absent."""
        return self._ensure_loaded().get(key)

    def get_string(self, key: str, default: str = "") -> str:
        value = self.get(key)
        return default if value is None else value

    def get_int(self, key: str, default: int = 0) -> int:
        value = self.get(key)
        if value is None:
            return default
        try:
            return int(value.strip())
        except ValueError:
            logger.debug(f"Configuration value for {key} is not an integer: {value!r}")
            return default

    def get_bool(self, key: str, default: bool = False) -> bool:
        value = self.get(key)
        if value is None:
            return default
        normalized = value.strip().lower()
        if normalized in TRUE_VALUES:
            return True
        if normalized in FALSE_VALUES:
            return False
        logger.debug(f"Configuration value for {key} is not a boolean: {value!r}")
        return default

    def as_dict(self) -> Dict[str, str]:
        """Copy of every loaded setting."""
        return dict(self._ensure_loaded())

    def __contains__(self, key: object) -> bool:
        return key in self._ensure_loaded()
