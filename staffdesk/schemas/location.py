from __future__ import annotations

from datetime import datetime
from typing import Literal, Optional

from pydantic import Field

from .common import ApiModel


class CheckInRequest(ApiModel):
    latitude: float = Field(..., ge=-90, le=90)
    longitude: float = Field(..., ge=-180, le=180)
    address: Optional[str] = None
    device: Optional[str] = None
    accuracy: Optional[float] = Field(default=None, ge=0)


class LiveUpdateRequest(ApiModel):
    latitude: float = Field(..., ge=-90, le=90)
    longitude: float = Field(..., ge=-180, le=180)
    accuracy: Optional[float] = Field(default=None, ge=0)
    timestamp: Optional[datetime] = None


class LocationOut(ApiModel):
    id: int
    employee_id: int
    employee_name: Optional[str] = None
    latitude: float
    longitude: float
    accuracy: Optional[float] = None
    address: Optional[str] = None
    device: Optional[str] = None
    status: Literal["checked-in", "checked-out"]
    check_in_time: str
    check_out_time: Optional[str] = None
    last_update: Optional[str] = None
