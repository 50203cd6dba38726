"""Payload of the /health route."""

from enum import Enum

from pydantic import BaseModel


class ServiceStatus(str, Enum):
    available = "available"
    not_available = "not_available"


class Dependencies(BaseModel):
    """Reachability of the registry store."""

    redis: ServiceStatus


class HealthResponse(BaseModel):
    """Service status plus the number of cities currently loaded."""

    status: str
    dependencies: Dependencies
    cities: int
