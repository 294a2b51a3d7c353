from typing import Any, Optional


class AppError(Exception):
    """Base error for all application-specific issues."""

    def __init__(
        self,
        message: str,
        status_code: int = 400,
        code: str = "INTERNAL_ERROR",
        details: Optional[dict[str, Any]] = None,
    ):
        self.message = message
        self.status_code = status_code
        self.code = code
        self.details = details
        super().__init__(self.message)


class RemoteApiError(AppError):
    """
    The clinic API rejected a call or could not be reached.

    status_code mirrors the upstream status (502/504 for transport failures),
    payload keeps the decoded error body for debugging.
    """

    def __init__(
        self,
        message: str,
        status_code: int = 502,
        *,
        method: Optional[str] = None,
        path: Optional[str] = None,
        payload: Any = None,
    ):
        super().__init__(message, status_code=status_code, code="UPSTREAM_ERROR")
        self.method = method
        self.path = path
        self.payload = payload

    @property
    def gateway_status(self) -> int:
        """Status to answer our own caller with: upstream 5xx becomes 502, 504 stays."""
        if self.status_code == 504:
            return 504
        if self.status_code >= 500:
            return 502
        return self.status_code


class ScheduleRuleError(AppError):
    """A mutation was refused locally before reaching the clinic API."""

    def __init__(
        self,
        message: str,
        status_code: int = 409,
        details: Optional[dict[str, Any]] = None,
    ):
        super().__init__(
            message, status_code=status_code, code="SCHEDULE_RULE", details=details
        )


__all__ = ["AppError", "RemoteApiError", "ScheduleRuleError"]
