from dataclasses import dataclass
from pathlib import Path
from typing import Optional
from .env_config import require_env, get_env
from .config_types import EnvLogLevel, EnvLogBackends
from common.api_error import ConfigurationError

LOG_LEVEL_KEY = "LOG_LEVEL"
LOG_BACKEND_KEY = "LOG_BACKEND"
LOG_DIR_KEY = "LOG_DIR"


@dataclass(frozen=True)
class LoggingConfig:
    log_level: EnvLogLevel
    log_backend: EnvLogBackends
    log_dir: Optional[Path] = None

    @property
    def level_value(self) -> str:
        return self.log_level.value

    @property
    def level_int(self) -> int:
        return self.log_level.level

    @property
    def resolved_log_dir(self) -> Path:
        return self.log_dir or Path.cwd() / "logs"


def _parse_choice(enum_cls, key: str, raw: str):
    try:
        return enum_cls(raw)
    except ValueError as exc:
        raise ConfigurationError(
            f"{key}={raw!r} is not valid; expected one of [{enum_cls.choices()}]"
        ) from exc


def load_logging_config() -> LoggingConfig:
    """
    Read LOG_LEVEL, LOG_BACKEND and the optional LOG_DIR.

    Raises:
        ConfigurationError: If a required key is missing or holds an unknown value
    """
    level = _parse_choice(EnvLogLevel, LOG_LEVEL_KEY, require_env(LOG_LEVEL_KEY).upper())
    backend = _parse_choice(
        EnvLogBackends, LOG_BACKEND_KEY, require_env(LOG_BACKEND_KEY).lower()
    )
    log_dir = get_env(LOG_DIR_KEY)

    return LoggingConfig(
        log_level=level,
        log_backend=backend,
        log_dir=Path(log_dir) if log_dir else None,
    )


__all__ = [
    "LoggingConfig",
    "load_logging_config",
]
