"""
Auth API schemas (request/response models).
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field

Role = Literal["student", "parent"]


class SignupRequest(BaseModel):
    email: str = Field(..., min_length=3, max_length=320)
    password: str = Field(..., min_length=6, max_length=128)
    name: str = Field(..., min_length=1, max_length=200)
    role: Role
    roll_number: str | None = Field(default=None, max_length=64)
    phone_number: str | None = Field(default=None, max_length=32)
    emergency_phone: str | None = Field(default=None, max_length=32)


class Identity(BaseModel):
    """
    Minimal descriptor of a verified caller.
    """

    model_config = {"frozen": True}

    id: str
    email: str


class SignupUser(BaseModel):
    id: str
    email: str
    name: str
    role: Role
    roll_number: str | None = None
    phone_number: str | None = None
    emergency_phone: str | None = None


class SignupResponse(BaseModel):
    success: bool = True
    message: str = "Account created successfully"
    user: SignupUser
