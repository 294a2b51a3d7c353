"""
Process-wide configuration.

initialize_config() loads and validates the environment, configures structlog
and keeps the resulting AppConfig; everything else reads it via get_config().
"""
from typing import Optional
from pydantic import ValidationError
from .app_config import AppConfig, load_app_config
from .structlog_config import configure_structlog
from common.api_error import ConfigurationError

_config: Optional[AppConfig] = None


def _describe(error: ValidationError) -> str:
    lines = [
        f"  - {'.'.join(str(part) for part in item['loc'])}: {item['msg']}"
        for item in error.errors()
    ]
    return "Configuration validation failed:\n" + "\n".join(lines)


def initialize_config() -> AppConfig:
    """
    Load, validate and install the configuration.

    Calling it again re-reads the environment. On failure the previously
    installed configuration stays in place.

    Raises:
        ConfigurationError: If a variable is missing or invalid
    """
    global _config

    try:
        config = load_app_config()
    except ValidationError as e:
        raise ConfigurationError(_describe(e)) from e
    except ValueError as e:
        raise ConfigurationError(str(e)) from e

    configure_structlog(config.logging.level_int)
    _config = config
    return config


def get_config() -> AppConfig:
    """
    Raises:
        RuntimeError: If initialize_config() has not run
    """
    if _config is None:
        raise RuntimeError(
            "Configuration not initialized. Call initialize_config() at startup."
        )
    return _config


def is_config_initialized() -> bool:
    return _config is not None


__all__ = ["initialize_config", "get_config", "is_config_initialized"]
