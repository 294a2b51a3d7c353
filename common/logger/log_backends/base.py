"""Base class for log persistence backends."""

from abc import ABC, abstractmethod
from typing import Any, Dict


class LogBackend(ABC):
    """
    Destination for persisted log entries.

    write() must not raise: it reports failure by returning False so one
    broken backend cannot stall the persistence worker.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Backend name for identification."""

    @abstractmethod
    def write(self, log_entry: Dict[str, Any]) -> bool:
        """Write one entry (already JSON-safe). True on success."""

    @abstractmethod
    def get_metrics(self) -> Dict[str, Any]:
        """Backend-specific health counters."""


__all__ = ["LogBackend"]
