"""Pydantic schemas for registration and login."""

from datetime import datetime
from typing import Optional

from pydantic import EmailStr, Field

from safetour.common.schemas import CamelModel


class RegisterRequest(CamelModel):
    email: EmailStr
    password: str = Field(..., min_length=1, max_length=1024)
    wallet_address: Optional[str] = None
    name: Optional[str] = Field(None, max_length=255)
    emergency_contact: Optional[str] = Field(None, max_length=255)


class LoginRequest(CamelModel):
    email: str = Field(..., min_length=1, max_length=320)
    password: str = Field(..., min_length=1, max_length=1024)


class IdentitySummary(CamelModel):
    id: str
    email: str
    role: str
    wallet_address: Optional[str] = None
    name: Optional[str] = None
    created_at: datetime


class AuthResponse(CamelModel):
    token: str
    identity: IdentitySummary
