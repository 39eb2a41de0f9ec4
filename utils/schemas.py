"""
Pydantic schemas for the User API.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field


# ═══════════════════════════════════════════════════════════════════════════════
# Requests
# ═══════════════════════════════════════════════════════════════════════════════


class RegisterRequest(BaseModel):
    """Fields default to empty so missing values surface as rule failures."""

    name: str = ""
    email: str = ""
    password: str = ""


class LoginRequest(BaseModel):
    email: str
    password: str


# ═══════════════════════════════════════════════════════════════════════════════
# Responses
# ═══════════════════════════════════════════════════════════════════════════════


class UserOut(BaseModel):
    """Public view of a user.  The password hash is never exposed."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    email: str
    created_at: Optional[datetime] = None


class TokenResponse(BaseModel):
    token: str


class MessageResponse(BaseModel):
    message: str


class FieldError(BaseModel):
    field: str
    message: str
    location: str = "body"
    value: Any = None


class ErrorResponse(BaseModel):
    error: str
    errors: List[FieldError] = Field(default_factory=list)
