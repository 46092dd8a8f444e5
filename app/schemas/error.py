"""Standardized error response schema."""

from pydantic import BaseModel, Field

from app.schemas.availability import ConflictingContract


class ErrorResponse(BaseModel):
    """Standard error body for domain exceptions (4xx)."""

    detail: str = Field(..., description="Human-readable error message")
    code: str = Field(..., description="Machine-readable error code")


class VehicleUnavailableResponse(ErrorResponse):
    """Error body for availability conflicts, explaining which contracts block the dates."""

    conflicting_contracts: list[ConflictingContract] = []
    vehicle_unavailable: bool = False
