from typing import Any, Optional
from app.schemas import Notification, NotificationLevel
from common import AppLogger, get_app_logger


class Notifier:
    """
    Collects the toasts produced while handling one dashboard action.

    Every notification is also logged: errors at WARNING with the operation
    name, everything else at INFO.
    """

    def __init__(self, operation: str, logger: Optional[AppLogger] = None):
        self.operation = operation
        self._logger = logger or get_app_logger(__name__)
        self._items: list[Notification] = []

    @property
    def notifications(self) -> list[Notification]:
        return list(self._items)

    @property
    def has_errors(self) -> bool:
        return any(n.level == NotificationLevel.ERROR for n in self._items)

    def success(self, title: str, description: Optional[str] = None) -> Notification:
        return self._add(NotificationLevel.SUCCESS, title, description)

    def info(self, title: str, description: Optional[str] = None) -> Notification:
        return self._add(NotificationLevel.INFO, title, description)

    def error(
        self, title: str, description: Optional[str] = None, **context: Any
    ) -> Notification:
        return self._add(NotificationLevel.ERROR, title, description, **context)

    def _add(
        self,
        level: NotificationLevel,
        title: str,
        description: Optional[str],
        **context: Any,
    ) -> Notification:
        notification = Notification(level=level, title=title, description=description)
        self._items.append(notification)

        log = self._logger.warning if level == NotificationLevel.ERROR else self._logger.info
        log(title, operation=self.operation, description=description, **context)
        return notification


__all__ = ["Notifier"]
