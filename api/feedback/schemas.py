"""
Pydantic schemas for driver feedback endpoints.
"""

from __future__ import annotations

from pydantic import BaseModel, Field, field_validator

from core import keys


class SubmitFeedbackRequest(BaseModel):
    driver_id: str | int
    # Strict: JSON true, 4.0 and "4" are not ratings.
    rating: int = Field(..., ge=1, le=5, strict=True)
    comment: str | None = Field(default=None, max_length=2000)

    @field_validator("driver_id")
    @classmethod
    def check_driver_id(cls, value: str | int) -> str:
        # Driver ids become a key segment; feedback scans depend on it being delimiter-free.
        text = str(value).strip()
        if not text:
            raise ValueError("must not be empty")
        if keys.DELIMITER in text:
            raise ValueError(f"must not contain '{keys.DELIMITER}'")
        return text
