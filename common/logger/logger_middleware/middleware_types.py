"""
Shapes of the per-request log entry.
"""

from typing import Optional, Dict, Any
from datetime import datetime
from pydantic import BaseModel, ConfigDict, Field, computed_field

# A page load fans out to appointments + patients + doctors; more than this
# many upstream calls per request usually means a reload loop.
UPSTREAM_FANOUT_WARNING = 6

SLOW_REQUEST_MS = 1000.0

# Below this total, a request is not flagged even if it was all upstream time
_DOMINATED_MIN_MS = 200.0
_DOMINATED_SHARE = 0.9


class PerformanceBreakdown(BaseModel):
    total_ms: float
    handler_ms: float = Field(..., description="Time inside the route, upstream calls included")
    upstream_total_ms: float = Field(0.0, description="Time spent waiting on the clinic API")
    upstream_call_count: int = Field(0, description="Calls made to the clinic API")
    slow_upstream_threshold_ms: float = Field(1000.0, exclude=True)

    @computed_field
    @property
    def local_ms(self) -> float:
        """Handler time not spent waiting on the clinic API."""
        return round(max(self.handler_ms - self.upstream_total_ms, 0.0), 2)

    def server_timing(self) -> str:
        parts = []
        if self.upstream_call_count:
            parts.append(f"upstream;dur={self.upstream_total_ms:.2f}")
        parts.append(f"app;dur={self.local_ms:.2f}")
        parts.append(f"total;dur={self.total_ms:.2f}")
        return ", ".join(parts)

    @property
    def upstream_share(self) -> float:
        return self.upstream_total_ms / self.total_ms if self.total_ms else 0.0


class RequestMetadata(BaseModel):
    model_config = ConfigDict(frozen=True)

    method: str
    path: str = Field(..., description="Request path without query params")
    status_code: int = Field(..., ge=100, le=599)
    duration_ms: float = Field(..., ge=0)


class RequestDetails(BaseModel):
    model_config = ConfigDict(frozen=True)

    request_id: Optional[str] = None
    client_host: Optional[str] = None
    user_agent: Optional[str] = None
    query_params: Optional[Dict[str, Any]] = Field(
        None, description="Query parameters, credentials masked"
    )
    path_params: Optional[Dict[str, Any]] = None


class RequestLogEntry(BaseModel):
    """One structured line per request handled by the gateway."""

    model_config = ConfigDict(frozen=True)

    timestamp: datetime = Field(default_factory=datetime.now)
    metadata: RequestMetadata
    details: Optional[RequestDetails] = None
    performance: Optional[PerformanceBreakdown] = None

    @computed_field
    @property
    def is_slow(self) -> bool:
        return self.metadata.duration_ms > SLOW_REQUEST_MS

    @computed_field
    @property
    def is_error(self) -> bool:
        return self.metadata.status_code >= 500

    @computed_field
    @property
    def upstream_warnings(self) -> list[str]:
        """Hints about how the clinic API shaped this request's latency."""
        perf = self.performance
        if perf is None:
            return []

        warns: list[str] = []
        if perf.upstream_call_count > UPSTREAM_FANOUT_WARNING:
            warns.append(
                f"UPSTREAM_FANOUT: {perf.upstream_call_count} clinic API calls in one request"
            )
        if perf.upstream_total_ms > perf.slow_upstream_threshold_ms:
            warns.append(
                f"SLOW_UPSTREAM: clinic API took {perf.upstream_total_ms:.0f}ms "
                f"(threshold {perf.slow_upstream_threshold_ms:.0f}ms)"
            )
        if perf.total_ms > _DOMINATED_MIN_MS and perf.upstream_share > _DOMINATED_SHARE:
            warns.append(
                f"UPSTREAM_DOMINATED: {perf.upstream_share:.0%} of "
                f"{perf.total_ms:.0f}ms spent waiting on the clinic API"
            )
        return warns

    @property
    def log_method(self) -> str:
        """error for 5xx, warning for 4xx or slow, info otherwise."""
        if self.is_error:
            return "error"
        if self.is_slow or self.metadata.status_code >= 400:
            return "warning"
        return "info"

    @property
    def summary(self) -> str:
        meta = self.metadata
        return f"{meta.method} {meta.path} -> {meta.status_code} ({meta.duration_ms:.0f}ms)"


__all__ = [
    "RequestMetadata",
    "RequestDetails",
    "RequestLogEntry",
    "PerformanceBreakdown",
    "UPSTREAM_FANOUT_WARNING",
    "SLOW_REQUEST_MS",
]
