from __future__ import annotations

from typing import Literal, Optional

from pydantic import Field

from .common import ApiModel

DocumentStatus = Literal["pending", "verified", "rejected"]


class DocumentOut(ApiModel):
    id: int
    name: str
    type: str
    filename: str
    content_type: Optional[str] = None
    size: Optional[int] = None
    verification_status: DocumentStatus = "pending"
    verified_at: Optional[str] = None
    created_at: str
    upload_date: Optional[str] = None
    employee_id: int
    employee_name: Optional[str] = None
    file_url: str


class DocumentUpload(ApiModel):
    """Client-side form check run before a multipart upload leaves the machine."""

    type: str = Field(..., min_length=1)
    name: Optional[str] = None
    filename: str = Field(..., min_length=1)


class VerifyRequest(ApiModel):
    status: DocumentStatus
