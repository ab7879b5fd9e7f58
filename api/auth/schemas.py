"""
Auth API schemas (request/response models).
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field


class LoginRequest(BaseModel):
    email: str = Field(..., min_length=3, max_length=320)
    password: str = Field(..., min_length=1, max_length=128)


class CreateAdminRequest(BaseModel):
    email: str = Field(..., min_length=3, max_length=320)
    password: str = Field(..., min_length=1, max_length=128)
    name: str | None = Field(default=None, max_length=200)


class LoginResponse(BaseModel):
    token: str
    message: str
    email: str
    name: str | None
    id: int


class RefreshResponse(BaseModel):
    token: str
    success: bool = True


class LogoutResponse(BaseModel):
    message: str
    success: bool = True


class ProfileResponse(BaseModel):
    id: int
    email: str
    name: str | None
    createdAt: datetime
    updatedAt: datetime


class CreateAdminResponse(BaseModel):
    message: str
    userId: int
