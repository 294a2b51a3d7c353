from fastapi import Request
from typing import AsyncGenerator
from .api_client import ClinicApiClient
from .token_store import token_from_request


async def get_clinic_api(request: Request) -> AsyncGenerator[ClinicApiClient, None]:
    """
    Per-request clinic API client carrying the caller's token.
    Pulls the shared manager from app.state (set up in the lifespan).
    """
    manager = getattr(request.app.state, "clinic_api", None)

    if not manager:
        raise RuntimeError(
            "ClinicApiManager not found in app.state. Ensure lifespan is configured."
        )

    async with manager.client(token_from_request(request)) as client:
        yield client


__all__ = ["get_clinic_api"]
