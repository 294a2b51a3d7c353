from contextvars import ContextVar
from typing import Optional, Any

# One RequestTimer per request task; the clinic API client records upstream
# calls into whatever timer is active.
request_timer_context_var: ContextVar[Optional[Any]] = ContextVar(
    "request_timer",
    default=None,
)

__all__ = ["request_timer_context_var"]
