"""
structlog setup for the gateway process.

configure_structlog() runs once per process (uvicorn --reload spawns a new
worker process, which configures itself again). Every log line carries the
request_id bound by the request middleware, when there is one.
"""
import os
import sys
import threading
from typing import Any, Optional
import structlog
from rich.traceback import install as install_rich_traceback

install_rich_traceback(show_locals=False, width=None, extra_lines=3)

# Frames from these packages are folded in rendered tracebacks
_QUIET_TRACEBACK_MODULES = ["starlette", "uvicorn", "fastapi", "httpx", "httpcore", "anyio"]

_lock = threading.Lock()
_configured_pid: Optional[int] = None
_configured_level: Optional[int] = None


def _processors(colors: bool) -> list[Any]:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.StackInfoRenderer(),
        structlog.dev.set_exc_info,
        structlog.processors.TimeStamper(fmt="%Y-%m-%d %H:%M:%S", utc=False),
        structlog.dev.ConsoleRenderer(
            colors=colors,
            exception_formatter=structlog.dev.RichTracebackFormatter(
                show_locals=False,
                width=None,
                suppress=_QUIET_TRACEBACK_MODULES,
            ),
        ),
    ]


def configure_structlog(log_level: int) -> None:
    """
    Install the processor chain and a level filter.

    A repeated call with the same level does nothing.

    Raises:
        RuntimeError: If this process was already configured with another level
    """
    global _configured_pid, _configured_level

    with _lock:
        if is_configured():
            if _configured_level == log_level:
                return
            raise RuntimeError(
                f"structlog is already configured at level {_configured_level}; "
                f"refusing to switch to {log_level}"
            )

        structlog.configure(
            processors=_processors(colors=sys.stderr.isatty()),
            wrapper_class=structlog.make_filtering_bound_logger(log_level),
            context_class=dict,
            logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
            cache_logger_on_first_use=True,
        )
        _configured_pid = os.getpid()
        _configured_level = log_level


def get_logger(name: str = "app") -> structlog.BoundLogger:
    """
    Raises:
        RuntimeError: If configure_structlog() has not run in this process
    """
    if not is_configured():
        raise RuntimeError(
            "structlog is not configured; call initialize_config() at startup"
        )
    return structlog.get_logger(name)


def is_configured() -> bool:
    return _configured_pid == os.getpid()


__all__ = [
    "configure_structlog",
    "get_logger",
    "is_configured",
]
