"""Admin-facing employee payloads."""

from __future__ import annotations

from datetime import date
from typing import Literal, Optional

from pydantic import EmailStr, Field

from ..core.security import MIN_PASSWORD_LENGTH
from .common import ApiModel


class EmployeeCreate(ApiModel):
    name: str = Field(..., min_length=1)
    email: EmailStr
    password: str = Field(..., min_length=MIN_PASSWORD_LENGTH)
    department: str = Field(..., min_length=1)
    position: str = Field(..., min_length=1)
    phone_number: str = Field(..., min_length=1)
    address: str = Field(..., min_length=1)
    role: Literal["admin", "employee"] = "employee"
    joining_date: Optional[date] = None


class EmployeeUpdate(ApiModel):
    name: Optional[str] = Field(default=None, min_length=1)
    email: Optional[EmailStr] = None
    department: Optional[str] = None
    position: Optional[str] = None
    phone_number: Optional[str] = None
    address: Optional[str] = None
    role: Optional[Literal["admin", "employee"]] = None
    status: Optional[Literal["active", "inactive"]] = None
    joining_date: Optional[date] = None


class PasswordReset(ApiModel):
    new_password: str = Field(..., min_length=MIN_PASSWORD_LENGTH)
