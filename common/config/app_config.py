"""
Complete application configuration with validation.
Clinic API connection settings plus the clinic's local calendar rules.
"""

from typing import Any, Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError
from pydantic import BaseModel, Field, field_validator, model_validator
from pathlib import Path
from .config_types import EnvLogLevel, Environment
from .env_config import require_env, get_env, get_env_bool
from .logging_config import LoggingConfig


class ClinicApiConfig(BaseModel):
    """
    Connection settings for the external clinic REST API.

    The gateway never retries, so timeout is the only transport knob.
    """

    base_url: str = Field(..., min_length=1)
    timeout: float = Field(..., gt=0, le=300, description="Request timeout in seconds")
    verify_ssl: bool = Field(default=True)
    ssl_ca_path: Optional[Path] = Field(default=None)
    slow_threshold_ms: float = Field(
        ..., gt=0, description="Upstream time after which a request is flagged slow"
    )

    model_config = {"frozen": True}

    @field_validator("base_url")
    @classmethod
    def validate_base_url(cls, v: str) -> str:
        """Require an absolute http(s) URL and strip the trailing slash."""
        if not v.startswith(("http://", "https://")):
            raise ValueError(f"base_url must start with http:// or https://, got: {v}")
        return v.rstrip("/")

    @field_validator("ssl_ca_path")
    @classmethod
    def validate_ssl_ca_path(cls, v: Optional[Path]) -> Optional[Path]:
        if v is not None and not v.exists():
            raise ValueError(f"CA bundle not found: {v}")
        return v

    @property
    def uses_tls(self) -> bool:
        return self.base_url.startswith("https://")

    def to_dict_safe(self) -> dict[str, Any]:
        """Plain dict for logging."""
        data = self.model_dump()
        if data.get("ssl_ca_path"):
            data["ssl_ca_path"] = str(data["ssl_ca_path"])
        return data


class AppConfig(BaseModel):
    """
    Complete application configuration.

    All configuration is loaded from environment variables and validated
    at startup. Invalid configuration will fail fast with clear error messages.
    """

    app_title: str = Field(..., min_length=1)
    app_version: str = Field(..., pattern=r"^\d+\.\d+\.\d+$")  # Semantic versioning
    environment: str = Field(..., pattern="^(development|staging|production)$")
    timezone: str = Field(default="UTC")

    logging: LoggingConfig
    clinic_api: ClinicApiConfig

    model_config = {"frozen": True}

    @field_validator("timezone")
    @classmethod
    def validate_timezone(cls, v: str) -> str:
        try:
            ZoneInfo(v)
        except (ZoneInfoNotFoundError, ValueError):
            raise ValueError(f"Unknown time zone: {v}")
        return v

    @model_validator(mode="after")
    def validate_production_settings(self) -> "AppConfig":
        """
        Validate production-specific requirements.
        """
        if self.environment == "production":
            if self.logging.log_level == EnvLogLevel.DEBUG:
                raise ValueError("DEBUG log level not allowed in production")
            if not self.clinic_api.uses_tls:
                raise ValueError("Clinic API must be reached over https in production")
        return self

    @property
    def tz(self) -> ZoneInfo:
        """Clinic time zone, used to decide what "today" means."""
        return ZoneInfo(self.timezone)


def load_clinic_api_config() -> ClinicApiConfig:
    """
    Load clinic API settings from environment.

    Environment variables:
    Required:
    - CLINIC_API_URL: Base URL of the clinic REST API
    - CLINIC_API_TIMEOUT: Request timeout in seconds
    - UPSTREAM_SLOW_THRESHOLD_MS: Upstream time flagged as slow

    Optional:
    - CLINIC_API_VERIFY_SSL: Verify TLS certificates (default true)
    - CLINIC_API_CA_PATH: Custom CA bundle
    """
    base_url = require_env("CLINIC_API_URL")
    timeout_str = require_env("CLINIC_API_TIMEOUT")
    slow_threshold_str = require_env("UPSTREAM_SLOW_THRESHOLD_MS")

    try:
        timeout = float(timeout_str)
        slow_threshold_ms = float(slow_threshold_str)
    except ValueError:
        raise ValueError(
            f"CLINIC_API_TIMEOUT and UPSTREAM_SLOW_THRESHOLD_MS must be numbers, "
            f"got: {timeout_str!r}, {slow_threshold_str!r}"
        )

    ca_path = get_env("CLINIC_API_CA_PATH")

    return ClinicApiConfig(
        base_url=base_url,
        timeout=timeout,
        verify_ssl=get_env_bool("CLINIC_API_VERIFY_SSL", default=True),
        ssl_ca_path=Path(ca_path) if ca_path else None,
        slow_threshold_ms=slow_threshold_ms,
    )


def load_app_config() -> AppConfig:
    """
    Load complete application configuration.

    Raises:
        ValidationError: If configuration is invalid
        ConfigurationError: If required env vars are missing
    """
    from .logging_config import load_logging_config

    env_str = require_env("ENVIRONMENT")

    if env_str not in {e.value for e in Environment}:
        raise ValueError(
            f"Invalid ENVIRONMENT: {env_str}. Must be one of: [{Environment.choices()}]"
        )

    return AppConfig(
        app_title=require_env("APP_TITLE"),
        app_version=require_env("APP_VERSION"),
        environment=env_str,
        timezone=get_env("CLINIC_TIMEZONE") or "UTC",
        logging=load_logging_config(),
        clinic_api=load_clinic_api_config(),
    )


__all__ = [
    "AppConfig",
    "ClinicApiConfig",
    "load_app_config",
    "load_clinic_api_config",
]
