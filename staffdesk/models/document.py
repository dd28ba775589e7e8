"""SQLAlchemy model for uploaded employee documents."""

from __future__ import annotations

from sqlalchemy import Column, ForeignKey, Integer, Text
from sqlalchemy.orm import relationship

from ..db.session import Base

VERIFICATION_STATUSES = ("pending", "verified", "rejected")


class Document(Base):
    __tablename__ = "documents"
    __allow_unmapped__ = True

    id = Column(Integer, primary_key=True, index=True)
    employee_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    name = Column(Text, nullable=False)
    type = Column(Text, nullable=False)
    filename = Column(Text, nullable=False)
    content_type = Column(Text, nullable=True)
    size = Column(Integer, nullable=True)
    storage_filename = Column(Text, nullable=False)
    verification_status = Column(Text, nullable=False, default="pending")
    verified_at = Column(Text, nullable=True)
    created_at = Column(Text, nullable=False)

    employee = relationship("User", back_populates="documents")

    @property
    def employee_name(self) -> str | None:
        return self.employee.name if self.employee is not None else None

    @property
    def file_url(self) -> str:
        return f"/documents/{self.id}/file"


__all__ = ["Document", "VERIFICATION_STATUSES"]
