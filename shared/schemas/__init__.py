"""Pydantic schemas shared across services."""

from shared.schemas.common import HealthResponse

__all__ = [
    "HealthResponse",
]
