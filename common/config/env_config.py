import os
from typing import Optional
from common.api_error import ConfigurationError

_TRUTHY = {"1", "true", "yes", "on"}
_FALSY = {"0", "false", "no", "off"}


def get_env(name: str, default: Optional[str] = None) -> Optional[str]:
    """
    Get Env variable with optional default
    """
    return os.getenv(name, default=default)


def require_env(name: str) -> str:
    """
    Get required environment variable or raise immediately.
    """
    value = os.getenv(name)
    if not value:
        raise ConfigurationError(f"Missing required env variables: {name}")
    return value


def get_env_bool(name: str, default: bool) -> bool:
    """
    Read a boolean flag such as CLINIC_API_VERIFY_SSL=false.

    Unset or empty falls back to default; anything unrecognised is an error.
    """
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default

    value = raw.strip().lower()
    if value in _TRUTHY:
        return True
    if value in _FALSY:
        return False
    raise ConfigurationError(
        f"Invalid boolean for {name}: {raw!r}. Use one of {sorted(_TRUTHY | _FALSY)}"
    )


__all__ = ["require_env", "get_env", "get_env_bool"]
