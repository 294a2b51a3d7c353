"""
Request logging middleware for the gateway.

Every request gets an X-Request-ID and one structured log line. Outside
production, a Server-Timing header also separates time spent waiting on the
clinic API from local work.

Usage:
    app.add_middleware(
        RequestLoggingMiddleware,
        expose_performance_headers=True,
        slow_upstream_threshold_ms=800,
    )
"""

import time
import uuid
from typing import Awaitable, Callable, Iterable, Optional
import structlog
from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp
from common.context_vars import request_timer_context_var
from ..logger import get_app_logger
from .request_timer import RequestTimer
from .middleware_types import (
    RequestMetadata,
    RequestDetails,
    RequestLogEntry,
    PerformanceBreakdown,
)

UPSTREAM_TIMER_KEY = "upstream"
APP_TIMER_KEY = "app"

DEFAULT_REDACTED_PARAMS = ("token", "access_token")


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    def __init__(
        self,
        app: ASGIApp,
        *,
        expose_performance_headers: Optional[bool] = False,
        slow_upstream_threshold_ms: float = 1000.0,
        redacted_params: Iterable[str] = DEFAULT_REDACTED_PARAMS,
        logger_name: Optional[str] = None,
    ):
        super().__init__(app)
        self.expose_performance_headers = expose_performance_headers
        self.slow_upstream_threshold_ms = slow_upstream_threshold_ms
        self.redacted_params = frozenset(p.lower() for p in redacted_params)
        self.logger = get_app_logger(
            name=logger_name or __name__, persist=True, track_timing=True
        )

    async def dispatch(
        self,
        request: Request,
        call_next: Callable[[Request], Awaitable[Response]],
    ) -> Response:
        request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
        request.state.request_id = request_id

        timer = RequestTimer()
        timer_token = request_timer_context_var.set(timer)
        structlog.contextvars.bind_contextvars(request_id=request_id)
        started = time.perf_counter()
        try:
            with timer.capture(APP_TIMER_KEY):
                response = await call_next(request)
        finally:
            duration_ms = (time.perf_counter() - started) * 1000
            structlog.contextvars.unbind_contextvars("request_id")
            request_timer_context_var.reset(timer_token)

        performance = self._performance(timer, duration_ms)
        response.headers["X-Request-ID"] = request_id
        if self.expose_performance_headers:
            response.headers["Server-Timing"] = performance.server_timing()

        entry = RequestLogEntry(
            metadata=RequestMetadata(
                method=request.method,
                path=request.url.path,
                status_code=response.status_code,
                duration_ms=round(duration_ms, 2),
            ),
            details=self._details(request, request_id),
            performance=performance,
        )
        getattr(self.logger, entry.log_method)(
            entry.summary, **entry.model_dump(mode="json", exclude_none=True)
        )
        return response

    def _details(self, request: Request, request_id: str) -> RequestDetails:
        params = {
            key: "***" if key.lower() in self.redacted_params else value
            for key, value in request.query_params.items()
        }
        return RequestDetails(
            request_id=request_id,
            client_host=request.client.host if request.client else None,
            user_agent=request.headers.get("user-agent"),
            query_params=params or None,
            path_params=request.path_params or None,
        )

    def _performance(self, timer: RequestTimer, duration_ms: float) -> PerformanceBreakdown:
        return PerformanceBreakdown(
            total_ms=round(duration_ms, 2),
            handler_ms=round(timer.timings.get(APP_TIMER_KEY, 0.0), 2),
            upstream_total_ms=round(timer.timings.get(UPSTREAM_TIMER_KEY, 0.0), 2),
            upstream_call_count=timer.counters.get(UPSTREAM_TIMER_KEY, 0),
            slow_upstream_threshold_ms=self.slow_upstream_threshold_ms,
        )


__all__ = [
    "RequestLoggingMiddleware",
    "UPSTREAM_TIMER_KEY",
]
