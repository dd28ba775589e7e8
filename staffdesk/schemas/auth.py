from __future__ import annotations

from typing import Literal, Optional

from pydantic import EmailStr, Field

from ..core.security import MIN_PASSWORD_LENGTH
from .common import ApiModel


class LoginRequest(ApiModel):
    email: EmailStr
    password: str = Field(..., min_length=1)

    model_config = {
        "json_schema_extra": {"example": {"email": "jane@example.com", "password": "secret1"}},
    }


class RegisterRequest(ApiModel):
    name: str = Field(..., min_length=1)
    email: EmailStr
    password: str = Field(..., min_length=MIN_PASSWORD_LENGTH)
    department: Optional[str] = None
    position: Optional[str] = None
    phone_number: Optional[str] = None
    address: Optional[str] = None


class UserOut(ApiModel):
    id: int
    name: str
    email: str
    role: Literal["admin", "employee"]
    department: Optional[str] = None
    position: Optional[str] = None
    phone_number: Optional[str] = None
    address: Optional[str] = None
    status: str = "active"
    joining_date: Optional[str] = None
    created_at: Optional[str] = None


class TokenResponse(ApiModel):
    success: bool = True
    token: str
    user: UserOut
