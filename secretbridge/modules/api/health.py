"""Health endpoints for Kubernetes liveness and readiness probes."""

from typing import Callable

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from .models import HealthResponse, ReadinessResponse, ReadinessStatus


def create_health_router(is_ready: Callable[[], bool]) -> APIRouter:
    """
    Create the probe router.

    Args:
        is_ready: Returns True once the controller's initial sync completed

    Returns:
        APIRouter exposing /healthz and /readyz
    """
    router = APIRouter(tags=["health"])

    @router.get("/healthz", response_model=HealthResponse)
    async def healthz():
        """Liveness: the process is up and serving."""
        return HealthResponse()

    @router.get("/readyz", response_model=ReadinessResponse)
    async def readyz():
        """Readiness: 200 after the initial secret list, 503 before."""
        if is_ready():
            return ReadinessResponse(status=ReadinessStatus.READY, synced=True)
        body = ReadinessResponse(status=ReadinessStatus.SYNCING, synced=False)
        return JSONResponse(status_code=503, content=body.model_dump(mode="json"))

    return router
