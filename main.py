# main.py
import sys
from contextlib import asynccontextmanager
from datetime import datetime
from typing import Any, Optional
from dotenv import load_dotenv
from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field
from app.client import ClinicApiManager
from common.api_error import AppError, ConfigurationError, RemoteApiError
from common.config import Environment, get_config, initialize_config, is_configured
from common.logger import get_app_logger
from common.logger.log_backends import get_all_metrics
from common.logger.logger_middleware import RequestLoggingMiddleware
from common.logger.persistence import get_persistence_metrics, shutdown_persistence

load_dotenv()
try:
    initialize_config()
except ConfigurationError as e:
    # structlog is not configured yet, stderr is all there is
    print(f"FATAL: Configuration error:\n{e}", file=sys.stderr)
    sys.exit(1)

config = get_config()
logger = get_app_logger(name=__name__, track_timing=True, persist=True)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(
        "Starting gateway",
        environment=config.environment,
        timezone=config.timezone,
        **config.clinic_api.to_dict_safe(),
    )

    clinic_api = ClinicApiManager.from_config(config.clinic_api)
    # An unreachable clinic API only warns; requests report it per call
    await clinic_api.verify_connection()
    app.state.clinic_api = clinic_api

    yield

    logger.info("Stopping gateway")
    await clinic_api.dispose()
    shutdown_persistence()


app = FastAPI(
    title=config.app_title,
    version=config.app_version,
    description=f"Clinic scheduling gateway ({config.environment})",
    lifespan=lifespan,
)
app.add_middleware(
    RequestLoggingMiddleware,
    expose_performance_headers=config.environment != Environment.PRODUCTION.value,
    slow_upstream_threshold_ms=config.clinic_api.slow_threshold_ms,
)


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError):
    if isinstance(exc, RemoteApiError):
        status_code = exc.gateway_status
    else:
        status_code = exc.status_code

    log = logger.error if status_code >= 500 else logger.warning
    log(
        f"{exc.code}: {exc.message}",
        path=request.url.path,
        error_code=exc.code,
        status_code=status_code,
    )

    return JSONResponse(
        status_code=status_code,
        content={
            "error": exc.code,
            "message": exc.message,
            "details": exc.details,
            "timestamp": datetime.now().isoformat(),
        },
    )


class UpstreamHealth(BaseModel):
    healthy: bool
    upstream_status: Optional[int] = None
    response_time_ms: Optional[float] = None
    error: Optional[str] = None


class HealthCheckResponse(BaseModel):
    status: str = Field(..., description="Healthy, or Degraded when the clinic API is down")
    timestamp: datetime
    version: str
    logging_configured: bool
    log_level: str
    clinic_api: UpstreamHealth = Field(..., description="Clinic API reachability")


class ErrorResponse(BaseModel):
    error: str
    timestamp: datetime


def _unavailable(status_code: int, error: str) -> HTTPException:
    body = ErrorResponse(error=error, timestamp=datetime.now())
    return HTTPException(status_code=status_code, detail=body.model_dump(mode="json"))


@app.get(
    "/health",
    response_model=HealthCheckResponse,
    responses={
        503: {"description": "Gateway not started", "model": ErrorResponse},
        500: {"description": "Unexpected server error", "model": ErrorResponse},
    },
)
async def check_health(request: Request) -> HealthCheckResponse:
    """Answers 200 while the gateway runs, reporting the clinic API separately."""
    clinic_api: Optional[ClinicApiManager] = getattr(request.app.state, "clinic_api", None)
    if clinic_api is None:
        logger.error("Clinic API client not initialized", endpoint="/health")
        raise _unavailable(503, "clinic API client not initialized")

    try:
        upstream = UpstreamHealth(**await clinic_api.health_check())
    except Exception as e:
        logger.critical("Unexpected error in health check", exc_info=True, error=str(e))
        raise _unavailable(500, f"Unexpected error: {e}")

    if not upstream.healthy:
        logger.warning("Clinic API unreachable", endpoint="/health", error=upstream.error)

    return HealthCheckResponse(
        status="Healthy" if upstream.healthy else "Degraded",
        timestamp=datetime.now(),
        version=config.app_version,
        logging_configured=is_configured(),
        log_level=get_config().logging.level_value,
        clinic_api=upstream,
    )


@app.get("/metrics")
async def metrics() -> dict[str, Any]:
    """Logger timings, persistence queue and backend counters."""
    return {
        "logger": logger.get_timing_stats(),
        "persistence": get_persistence_metrics(),
        "backends": get_all_metrics(),
    }


__all__ = ["app", "config"]
