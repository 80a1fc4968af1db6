"""
Configuration settings for the reach estimate client.
Holds the ad account credentials, throttling policy and runtime options.

Settings are loaded once from a YAML file, with environment variables taking
precedence, and then passed explicitly to whatever needs them.
"""

import logging
import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml
from dotenv import load_dotenv

from fb_reach.config.constants import (
    AD_ACCOUNT_PREFIX,
    DEFAULT_API_VERSION,
    DEFAULT_CONFIG_FILE,
    DEFAULT_REQUESTS_PER_WINDOW,
    DEFAULT_WINDOW_SECONDS,
    GRAPH_API_BASE_URL,
    REACH_ESTIMATE_EDGE,
    THROTTLE_MODES,
)
from fb_reach.errors import ConfigurationError

logger = logging.getLogger(__name__)

_ACCOUNT_ID_RE = re.compile(r"^act_\d+$")


def normalize_ad_account_id(ad_account_id: Any) -> str:
    """Return the account id with its ``act_`` prefix, adding it to bare digits."""
    account_id = str(ad_account_id or "").strip()
    if not account_id:
        raise ConfigurationError("ad_account_id is required")

    if account_id.isdigit():
        logger.warning(
            f"ad_account_id has no '{AD_ACCOUNT_PREFIX}' prefix, using "
            f"{AD_ACCOUNT_PREFIX}{account_id}"
        )
        account_id = f"{AD_ACCOUNT_PREFIX}{account_id}"

    if not _ACCOUNT_ID_RE.match(account_id):
        raise ConfigurationError(
            f"ad_account_id must look like {AD_ACCOUNT_PREFIX}<digits>, got {account_id!r}"
        )
    return account_id


@dataclass(frozen=True)
class FacebookConfig:
    """Credentials and endpoint settings for the Marketing API."""

    access_token: str
    ad_account_id: str
    api_version: str = DEFAULT_API_VERSION
    base_url: str = GRAPH_API_BASE_URL

    def __post_init__(self):
        """Validate the token and normalize the account id."""
        if not self.access_token or not str(self.access_token).strip():
            raise ConfigurationError("access_token is required")
        object.__setattr__(
            self, "ad_account_id", normalize_ad_account_id(self.ad_account_id)
        )

    @property
    def reach_estimate_url(self) -> str:
        """Endpoint for reach estimates on this ad account."""
        return "/".join(
            [
                self.base_url.rstrip("/"),
                self.api_version.strip("/"),
                self.ad_account_id,
                REACH_ESTIMATE_EDGE,
            ]
        )

    def __repr__(self) -> str:
        return (
            f"FacebookConfig(access_token='***', ad_account_id={self.ad_account_id!r}, "
            f"api_version={self.api_version!r}, base_url={self.base_url!r})"
        )


@dataclass(frozen=True)
class ThrottleConfig:
    """Client-side throttling policy applied before every request."""

    mode: str = "token_bucket"
    requests_per_window: int = DEFAULT_REQUESTS_PER_WINDOW
    window_seconds: float = DEFAULT_WINDOW_SECONDS

    def __post_init__(self):
        if self.mode not in THROTTLE_MODES:
            raise ConfigurationError(
                f"throttle must be one of {', '.join(THROTTLE_MODES)}, got {self.mode!r}"
            )
        if self.requests_per_window < 1:
            raise ConfigurationError("requests_per_window must be at least 1")
        if self.window_seconds < 0:
            raise ConfigurationError("window_seconds must not be negative")

    @property
    def interval_seconds(self) -> float:
        """Minimum spacing between requests."""
        return self.window_seconds / self.requests_per_window


@dataclass(frozen=True)
class AppConfig:
    """Application runtime settings."""

    log_level: str = "INFO"
    request_timeout: Optional[float] = None


@dataclass(frozen=True)
class Settings:
    """Main settings object combining all configuration."""

    facebook: FacebookConfig
    throttle: ThrottleConfig = field(default_factory=ThrottleConfig)
    app: AppConfig = field(default_factory=AppConfig)


def _read_config_file(path: Path) -> Dict[str, Any]:
    """Read a YAML config file into a flat mapping."""
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except OSError as e:
        raise ConfigurationError(f"Could not read config file {path}: {e}") from e
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid YAML in config file {path}: {e}") from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigurationError(f"Config file {path} must contain a mapping")
    return data


def _optional_float(value: Any, name: str) -> Optional[float]:
    if value is None or value == "":
        return None
    try:
        return float(value)
    except (TypeError, ValueError) as e:
        raise ConfigurationError(f"{name} must be a number, got {value!r}") from e


def _strict_int(value: Any, name: str) -> int:
    """Accept ints and digit strings only; floats are not truncated."""
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    if isinstance(value, str) and value.strip().isdigit():
        return int(value.strip())
    raise ConfigurationError(f"{name} must be an integer, got {value!r}")


def _env_overrides() -> Dict[str, Any]:
    """Collect configuration overrides from environment variables."""
    env_map = {
        "access_token": "FB_ACCESS_TOKEN",
        "ad_account_id": "FB_AD_ACCOUNT_ID",
        "api_version": "FB_API_VERSION",
        "request_timeout": "FB_REQUEST_TIMEOUT",
        "window_seconds": "FB_WINDOW_SECONDS",
        "log_level": "LOG_LEVEL",
    }
    overrides = {}
    for key, env_var in env_map.items():
        value = os.getenv(env_var)
        if value:
            overrides[key] = value
    return overrides


def settings_from_mapping(values: Dict[str, Any]) -> Settings:
    """Build validated settings from a flat mapping of config values."""
    facebook = FacebookConfig(
        access_token=values.get("access_token", ""),
        ad_account_id=values.get("ad_account_id", ""),
        api_version=values.get("api_version") or DEFAULT_API_VERSION,
        base_url=values.get("base_url") or GRAPH_API_BASE_URL,
    )

    window_seconds = _optional_float(values.get("window_seconds"), "window_seconds")
    requests_per_window = _strict_int(
        values.get("requests_per_window", DEFAULT_REQUESTS_PER_WINDOW),
        "requests_per_window",
    )

    throttle = ThrottleConfig(
        mode=values.get("throttle", "token_bucket"),
        requests_per_window=requests_per_window,
        window_seconds=(
            DEFAULT_WINDOW_SECONDS if window_seconds is None else window_seconds
        ),
    )

    log_level = str(values.get("log_level", "INFO")).upper()
    if not isinstance(logging.getLevelName(log_level), int):
        raise ConfigurationError(f"Unknown log_level {log_level!r}")

    app = AppConfig(
        log_level=log_level,
        request_timeout=_optional_float(
            values.get("request_timeout"), "request_timeout"
        ),
    )
    return Settings(facebook=facebook, throttle=throttle, app=app)


def load_settings(
    config_path: Optional[Union[str, Path]] = None, load_env_file: bool = True
) -> Settings:
    """
    Load settings from a YAML config file and the environment.

    Args:
        config_path: Path to the YAML file. Defaults to facebook_config.yml in
            the working directory; a missing default file is not an error as
            long as the environment supplies the credentials.
        load_env_file: Whether to read a .env file into the environment first

    Returns:
        Validated Settings
    """
    if load_env_file:
        load_dotenv()

    values: Dict[str, Any] = {}
    if config_path is not None:
        values.update(_read_config_file(Path(config_path)))
    elif Path(DEFAULT_CONFIG_FILE).exists():
        values.update(_read_config_file(Path(DEFAULT_CONFIG_FILE)))
    else:
        logger.debug(f"No {DEFAULT_CONFIG_FILE} found, using environment only")

    values.update(_env_overrides())
    settings = settings_from_mapping(values)
    logger.debug(f"Loaded settings: {settings.facebook!r}")
    return settings
