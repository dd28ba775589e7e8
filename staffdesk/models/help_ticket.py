"""SQLAlchemy model for help-desk tickets and the single admin reply they carry."""

from __future__ import annotations

from sqlalchemy import Column, ForeignKey, Integer, Text
from sqlalchemy.orm import relationship

from ..db.session import Base

TICKET_STATUSES = ("open", "in-progress", "resolved", "closed")
TICKET_PRIORITIES = ("low", "medium", "high", "urgent")
TICKET_CATEGORIES = ("technical", "hr", "payroll", "general", "other")


class HelpTicket(Base):
    __tablename__ = "help_tickets"
    __allow_unmapped__ = True

    id = Column(Integer, primary_key=True, index=True)
    employee_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    subject = Column(Text, nullable=False)
    message = Column(Text, nullable=False)
    priority = Column(Text, nullable=False, default="medium")
    category = Column(Text, nullable=False, default="general")
    status = Column(Text, nullable=False, default="open", index=True)
    reply_message = Column(Text, nullable=True)
    replied_at = Column(Text, nullable=True)
    replied_by_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    created_at = Column(Text, nullable=False)
    updated_at = Column(Text, nullable=False)

    employee = relationship("User", back_populates="tickets", foreign_keys=[employee_id])
    replied_by = relationship("User", foreign_keys=[replied_by_id])

    @property
    def employee_name(self) -> str | None:
        return self.employee.name if self.employee is not None else None

    @property
    def admin_reply(self) -> dict[str, object] | None:
        if not self.reply_message:
            return None
        return {
            "message": self.reply_message,
            "repliedAt": self.replied_at,
            "repliedBy": self.replied_by.name if self.replied_by is not None else None,
        }


__all__ = ["HelpTicket", "TICKET_STATUSES", "TICKET_PRIORITIES", "TICKET_CATEGORIES"]
