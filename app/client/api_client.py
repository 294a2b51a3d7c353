"""
HTTP client for the external clinic REST API.

Design principles:
- One shared httpx.AsyncClient (connection pool) per process, owned by
  ClinicApiManager and opened/closed in the FastAPI lifespan
- One lightweight ClinicApiClient per request, carrying the caller's token
- No retries, no caching: a failed call raises RemoteApiError once
- Every call is timed into the active RequestTimer so the request log can
  tell upstream time from local work
"""

import json
import time
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any, AsyncGenerator, Optional, Union

import httpx
from pydantic import BaseModel

from common import ClinicApiConfig, RemoteApiError, get_app_logger
from common.context_vars import request_timer_context_var
from common.logger.logger_middleware import UPSTREAM_TIMER_KEY

logger = get_app_logger(__name__)

JsonBody = Union[BaseModel, dict[str, Any], None]


def extract_error_message(payload: Any, fallback: str) -> str:
    """
    Pull the human-readable message out of an error body.

    Order: "message", then "detail" (a string, or FastAPI's list of
    validation items), then the fallback.

    Example:
        >>> extract_error_message({"detail": [{"loc": ["body", "doctor_id"], "msg": "field required"}]}, "x")
        'body.doctor_id: field required'
    """
    if isinstance(payload, dict):
        message = payload.get("message")
        if isinstance(message, str) and message.strip():
            return message

        detail = payload.get("detail")
        if isinstance(detail, str) and detail.strip():
            return detail
        if isinstance(detail, list) and detail:
            return ", ".join(_describe_validation_item(item) for item in detail)
        if isinstance(detail, dict):
            return extract_error_message(detail, fallback)

    if isinstance(payload, str) and payload.strip():
        return payload.strip()

    return fallback


def _describe_validation_item(item: Any) -> str:
    if isinstance(item, str):
        return item
    if isinstance(item, dict):
        msg = item.get("msg") or item.get("type")
        loc = item.get("loc")
        if msg and loc:
            return f"{'.'.join(str(part) for part in loc)}: {msg}"
        if msg:
            return str(msg)
    return json.dumps(item, default=str)


class ClinicApiClient:
    """
    Typed verbs over the clinic API.

    Usage:
        async with manager.client(token) as api:
            appointments = await api.get("/api/appointments")
            await api.patch(f"/api/appointments/{appointment_id}/status", StatusChange(status="checked_in"))
    """

    def __init__(self, http: httpx.AsyncClient, token: Optional[str] = None):
        self._http = http
        self._token = token

    async def get(self, path: str, params: Optional[dict[str, Any]] = None) -> Any:
        return await self._request("GET", path, params=params)

    async def post(self, path: str, body: JsonBody = None) -> Any:
        return await self._request("POST", path, body=body)

    async def put(self, path: str, body: JsonBody = None) -> Any:
        return await self._request("PUT", path, body=body)

    async def patch(self, path: str, body: JsonBody = None) -> Any:
        return await self._request("PATCH", path, body=body)

    async def delete(self, path: str) -> Any:
        return await self._request("DELETE", path)

    def _headers(self) -> dict[str, str]:
        headers = {"Accept": "application/json"}
        if self._token:
            headers["Authorization"] = f"Bearer {self._token}"
        return headers

    @staticmethod
    def _encode(body: JsonBody) -> Optional[dict[str, Any]]:
        if body is None:
            return None
        if isinstance(body, BaseModel):
            return body.model_dump(mode="json", exclude_none=True)
        return body

    async def _request(
        self,
        method: str,
        path: str,
        *,
        params: Optional[dict[str, Any]] = None,
        body: JsonBody = None,
    ) -> Any:
        start = time.perf_counter()
        try:
            response = await self._http.request(
                method,
                path,
                params=params,
                json=self._encode(body),
                headers=self._headers(),
            )
        except httpx.TimeoutException as e:
            logger.error("Clinic API timed out", method=method, path=path)
            raise RemoteApiError(
                "The clinic server took too long to respond",
                status_code=504,
                method=method,
                path=path,
            ) from e
        except httpx.HTTPError as e:
            logger.error("Clinic API unreachable", method=method, path=path, error=str(e))
            raise RemoteApiError(
                "Could not reach the clinic server",
                status_code=502,
                method=method,
                path=path,
            ) from e
        finally:
            self._record_timing((time.perf_counter() - start) * 1000)

        payload = self._decode(response)

        if response.is_error:
            message = extract_error_message(
                payload, f"Clinic API request failed (HTTP {response.status_code})"
            )
            logger.warning(
                "Clinic API rejected request",
                method=method,
                path=path,
                status_code=response.status_code,
                message=message,
            )
            raise RemoteApiError(
                message,
                status_code=response.status_code,
                method=method,
                path=path,
                payload=payload,
            )

        return payload

    @staticmethod
    def _decode(response: httpx.Response) -> Any:
        if response.status_code == 204 or not response.content:
            return None
        try:
            return response.json()
        except ValueError:
            return response.text

    @staticmethod
    def _record_timing(duration_ms: float) -> None:
        timer = request_timer_context_var.get()
        if timer is not None:
            timer.record(UPSTREAM_TIMER_KEY, duration_ms, count=True)


class ClinicApiManager:
    """
    Owner of the pooled httpx client.

    Usage:
        # Startup
        manager = ClinicApiManager.from_config(config.clinic_api)
        await manager.verify_connection()

        # Per request
        async with manager.client(token) as api:
            ...

        # Shutdown
        await manager.dispose()
    """

    def __init__(
        self,
        base_url: str,
        *,
        timeout: float = 10.0,
        verify: Union[bool, str] = True,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self._config: dict[str, Any] = {
            "base_url": base_url,
            "timeout": timeout,
            "verify": bool(verify),
        }
        self.http = httpx.AsyncClient(
            base_url=base_url,
            timeout=httpx.Timeout(timeout),
            verify=verify,
            transport=transport,
        )
        self._verified = False

        logger.info("ClinicApiManager initialized", base_url=base_url, timeout=timeout)

    @classmethod
    def from_config(cls, config: ClinicApiConfig, **kwargs: Any) -> "ClinicApiManager":
        verify: Union[bool, str] = config.verify_ssl
        if config.verify_ssl and config.ssl_ca_path:
            verify = str(Path(config.ssl_ca_path))
        return cls(config.base_url, timeout=config.timeout, verify=verify, **kwargs)

    @property
    def is_verified(self) -> bool:
        return self._verified

    async def verify_connection(self) -> bool:
        """
        Check that the clinic server answers at all.

        Any HTTP response counts as reachable; only transport errors fail.
        The gateway still starts when this returns False, requests will then
        surface the upstream error to the caller.
        """
        try:
            await self.http.get("/")
            self._verified = True
            logger.info("Clinic API reachable", base_url=self._config["base_url"])
        except httpx.HTTPError as e:
            self._verified = False
            logger.warning(
                "Clinic API not reachable at startup",
                base_url=self._config["base_url"],
                error=str(e),
            )
        return self._verified

    @asynccontextmanager
    async def client(self, token: Optional[str] = None) -> AsyncGenerator[ClinicApiClient, None]:
        yield ClinicApiClient(self.http, token=token)

    async def health_check(self) -> dict[str, Any]:
        start = time.perf_counter()
        try:
            response = await self.http.get("/")
            return {
                "healthy": True,
                "upstream_status": response.status_code,
                "response_time_ms": round((time.perf_counter() - start) * 1000, 2),
            }
        except httpx.HTTPError as e:
            return {"healthy": False, "error": str(e)}

    async def dispose(self) -> None:
        await self.http.aclose()
        logger.info("Clinic API connections closed")


__all__ = [
    "ClinicApiClient",
    "ClinicApiManager",
    "extract_error_message",
]
