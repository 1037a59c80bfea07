"""
Pydantic schemas for per-user preference endpoints.
"""

from __future__ import annotations

from pydantic import BaseModel, Field, field_validator


def _non_blank(value: str | int) -> str | int:
    if isinstance(value, str):
        value = value.strip()
        if not value:
            raise ValueError("must not be empty")
    return value


class SaveUniversityRequest(BaseModel):
    university_id: str | int

    @field_validator("university_id")
    @classmethod
    def check_university_id(cls, value: str | int) -> str | int:
        return _non_blank(value)


class SaveLocationRequest(BaseModel):
    # Presence is what matters: 0.0 is a valid latitude/longitude.
    latitude: float = Field(..., ge=-90.0, le=90.0)
    longitude: float = Field(..., ge=-180.0, le=180.0)
    address: str | None = Field(default=None, max_length=500)


class SavePickupRouteRequest(BaseModel):
    bus_id: str | int
    pickup_latitude: float = Field(..., ge=-90.0, le=90.0)
    pickup_longitude: float = Field(..., ge=-180.0, le=180.0)

    @field_validator("bus_id")
    @classmethod
    def check_bus_id(cls, value: str | int) -> str | int:
        return _non_blank(value)
