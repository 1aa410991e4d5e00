"""Configuration loading from environment variables."""

import logging
import os
from typing import Literal

from dotenv import load_dotenv
from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    HttpUrl,
    SecretStr,
    TypeAdapter,
    ValidationError,
    field_validator,
)

__all__ = ["ConfigError", "Settings", "load_settings"]

load_dotenv()

logger = logging.getLogger(__name__)
_http_url_adapter = TypeAdapter(HttpUrl)

REQUIRED_VARS = ("ADGUARD_URL", "ADGUARD_USER", "ADGUARD_PASS", "TARGET_RULE")
DEFAULT_CHECK_INTERVAL = 60
DEFAULT_HEALTH_PORT = 8080


class ConfigError(RuntimeError):
    """A required setting is missing or invalid."""


class Settings(BaseModel):
    """Runtime configuration for the rule sidecar.

    Attributes:
        adguard_url: AdGuard Home base address, without trailing slash.
        adguard_user: Basic auth user.
        adguard_pass: Basic auth password (never rendered in logs or repr).
        target_rule: Rule to keep at the bottom, matched byte for byte.
        check_interval_sec: Seconds between cycles (must be positive).
        health_port: Port for the liveness surface.
        rules_format: Body encoding used when writing rules.
        http_timeout_sec: Timeout for each call to AdGuard.
    """

    model_config = ConfigDict(frozen=True)

    adguard_url: str = Field(..., description="AdGuard Home base URL.")
    adguard_user: str = Field(..., min_length=1)
    adguard_pass: SecretStr
    target_rule: str = Field(..., min_length=1, description="Exact rule text to pin last.")
    check_interval_sec: int = Field(default=DEFAULT_CHECK_INTERVAL, gt=0)
    health_port: int = Field(default=DEFAULT_HEALTH_PORT, ge=1, le=65535)
    rules_format: Literal["json", "text"] = Field(
        default="json",
        description="Encoding of the set_rules body, picked per AdGuard version.",
    )
    http_timeout_sec: float = Field(default=10, gt=0, allow_inf_nan=False)

    @field_validator("adguard_url")
    @classmethod
    def validate_adguard_url(cls, v: str) -> str:
        """Validate that the URL is http(s) and drop any trailing slash.

        Args:
            v: URL to validate.

        Returns:
            The URL without trailing slash.

        Raises:
            ValueError: If URL is invalid or not http(s).
        """
        try:
            url = _http_url_adapter.validate_python(v)
        except ValidationError as e:
            raise ValueError(f"Invalid AdGuard URL: {e}") from e
        if url.scheme not in ("http", "https"):
            raise ValueError("Only http:// and https:// URLs allowed")
        return v.rstrip("/")


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name, "")
    if raw == "":
        return default
    try:
        return int(raw)
    except ValueError as e:
        raise ConfigError(f"{name} must be a valid integer (got: {raw})") from e


def load_settings() -> Settings:
    """Load and validate settings from the environment.

    Required environment variables:
    - ADGUARD_URL: AdGuard Home base URL.
    - ADGUARD_USER / ADGUARD_PASS: Basic auth credentials.
    - TARGET_RULE: Rule to keep at the bottom.

    Optional:
    - CHECK_INTERVAL: Positive integer seconds (default 60).
    - HEALTH_PORT: Liveness port (default 8080).
    - RULES_FORMAT: "json" (default) or "text".
    - HTTP_TIMEOUT: Seconds per AdGuard call (default 10).

    Empty values count as unset.

    Returns:
        Validated Settings object.

    Raises:
        ConfigError: If required env vars are missing or any value is invalid.
    """
    missing = [name for name in REQUIRED_VARS if not os.getenv(name)]
    if missing:
        raise ConfigError(f"Required environment variable(s) not set: {', '.join(missing)}")

    check_interval = _int_env("CHECK_INTERVAL", DEFAULT_CHECK_INTERVAL)
    if check_interval <= 0:
        raise ConfigError(f"CHECK_INTERVAL must be greater than 0 (got: {check_interval})")

    timeout_raw = os.getenv("HTTP_TIMEOUT") or "10"
    try:
        http_timeout = float(timeout_raw)
    except ValueError as e:
        raise ConfigError(f"HTTP_TIMEOUT must be a number (got: {timeout_raw})") from e

    try:
        settings = Settings(
            adguard_url=os.environ["ADGUARD_URL"],
            adguard_user=os.environ["ADGUARD_USER"],
            adguard_pass=SecretStr(os.environ["ADGUARD_PASS"]),
            target_rule=os.environ["TARGET_RULE"],
            check_interval_sec=check_interval,
            health_port=_int_env("HEALTH_PORT", DEFAULT_HEALTH_PORT),
            rules_format=(os.getenv("RULES_FORMAT") or "json").lower(),
            http_timeout_sec=http_timeout,
        )
    except ValidationError as e:
        raise ConfigError(f"Invalid configuration: {e}") from e

    logger.info(
        f"Configuration loaded: URL={settings.adguard_url}, "
        f"target_rule={settings.target_rule}, "
        f"check_interval={settings.check_interval_sec}s, "
        f"rules_format={settings.rules_format}, "
        f"health_port={settings.health_port}"
    )

    return settings
