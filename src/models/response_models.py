from pydantic import BaseModel

from src.models.location import LocationFix
from src.models.request_models import Provider


class HealthResponse(BaseModel):
    """Response model for the health check endpoint."""

    status: str


class DescriptionResponse(BaseModel):
    """Human-readable label for a fix."""

    description: str


class NetworkLocationResponse(BaseModel):
    """Response model for the network location endpoint."""

    provider: Provider
    description: str
    fix: LocationFix
