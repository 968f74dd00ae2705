"""
API Module - Black Box Interface

Purpose: Liveness and readiness endpoints for the controller process
Interface: create_health_router(is_ready) -> APIRouter
Hidden: Response formatting, status codes
"""

from .health import create_health_router
from .models import HealthResponse, ReadinessResponse

__all__ = ["create_health_router", "HealthResponse", "ReadinessResponse"]
