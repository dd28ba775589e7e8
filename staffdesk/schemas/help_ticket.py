from __future__ import annotations

from typing import Literal, Optional

from pydantic import Field, field_validator

from .common import ApiModel

TicketStatus = Literal["open", "in-progress", "resolved", "closed"]
TicketPriority = Literal["low", "medium", "high", "urgent"]
TicketCategory = Literal["technical", "hr", "payroll", "general", "other"]


class TicketCreate(ApiModel):
    subject: str = Field(..., min_length=1)
    message: str = Field(..., min_length=1)
    priority: TicketPriority = "medium"
    category: TicketCategory = "general"

    @field_validator("subject", "message")
    @classmethod
    def not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("must not be blank")
        return value.strip()


class ReplyRequest(ApiModel):
    message: str = Field(..., min_length=1)


class StatusRequest(ApiModel):
    status: TicketStatus


class AdminReply(ApiModel):
    message: str
    replied_at: Optional[str] = None
    replied_by: Optional[str] = None


class TicketOut(ApiModel):
    id: int
    employee_id: int
    employee_name: Optional[str] = None
    subject: str
    message: str
    priority: TicketPriority
    category: TicketCategory
    status: TicketStatus
    admin_reply: Optional[AdminReply] = None
    created_at: str
    updated_at: str


class TicketStats(ApiModel):
    total: int = 0
    open: int = 0
    in_progress: int = 0
    resolved: int = 0
    closed: int = 0
    by_priority: dict[str, int] = Field(default_factory=dict)
    by_category: dict[str, int] = Field(default_factory=dict)
