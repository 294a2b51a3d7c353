"""Enumerations accepted in environment variables."""

import logging
from enum import Enum


class _EnvChoice(str, Enum):
    """String enum whose str() is the raw env value."""

    def __str__(self) -> str:
        return self.value

    @classmethod
    def choices(cls) -> str:
        return ", ".join(member.value for member in cls)


class EnvLogLevel(_EnvChoice):
    """
    LOG_LEVEL values.

        >>> EnvLogLevel("WARNING").level
        30
    """

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"

    @property
    def level(self) -> int:
        return logging.getLevelName(self.value)


class EnvLogBackends(_EnvChoice):
    """LOG_BACKEND values. `console` disables persistence."""

    FILE = "file"
    CONSOLE = "console"


class Environment(_EnvChoice):
    DEVELOPMENT = "development"
    STAGING = "staging"
    PRODUCTION = "production"


__all__ = [
    "EnvLogLevel",
    "EnvLogBackends",
    "Environment",
]
