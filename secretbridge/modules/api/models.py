"""
Response models for the health API.
"""

from enum import Enum

from pydantic import BaseModel, Field


class ReadinessStatus(str, Enum):
    """Readiness of the controller."""

    READY = "ready"
    SYNCING = "syncing"


class HealthResponse(BaseModel):
    """Liveness probe response."""

    status: str = Field(default="ok", description="Always 'ok' while the process serves")


class ReadinessResponse(BaseModel):
    """Readiness probe response."""

    status: ReadinessStatus = Field(..., description="Controller readiness")
    synced: bool = Field(..., description="Whether the initial secret list has completed")
