"""SQLAlchemy model for manually entered weekly payroll records."""

from __future__ import annotations

import json

from sqlalchemy import Column, ForeignKey, Integer, Text
from sqlalchemy.orm import relationship

from ..db.session import Base

PAYMENT_STATUSES = ("pending", "paid", "cancelled")
PAYMENT_METHODS = ("bank_transfer", "cash", "check", "other")


def _load_items(raw: str | None) -> list[dict[str, object]]:
    if not raw:
        return []
    try:
        decoded = json.loads(raw)
    except (TypeError, json.JSONDecodeError):
        return []
    if not isinstance(decoded, list):
        return []
    return [dict(item) for item in decoded if isinstance(item, dict)]


class PaymentRecord(Base):
    __tablename__ = "payment_records"
    __allow_unmapped__ = True

    id = Column(Integer, primary_key=True, index=True)
    employee_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    week_start_date = Column(Text, nullable=False, index=True)
    week_end_date = Column(Text, nullable=False)
    # Money columns hold two-decimal strings, e.g. "1250.00".
    basic_salary = Column(Text, nullable=False)
    overtime_hours = Column(Text, nullable=False, default="0.00")
    overtime_rate = Column(Text, nullable=False, default="0.00")
    overtime_amount = Column(Text, nullable=False, default="0.00")
    bonuses_blob = Column("bonuses", Text, nullable=True)
    deductions_blob = Column("deductions", Text, nullable=True)
    gross_pay = Column(Text, nullable=False)
    net_pay = Column(Text, nullable=False)
    payment_method = Column(Text, nullable=False, default="bank_transfer")
    payment_status = Column(Text, nullable=False, default="pending", index=True)
    payment_date = Column(Text, nullable=True)
    notes = Column(Text, nullable=True)
    created_at = Column(Text, nullable=False)
    updated_at = Column(Text, nullable=False)

    employee = relationship("User", back_populates="payment_records")

    @property
    def bonuses(self) -> list[dict[str, object]]:
        return _load_items(self.bonuses_blob)

    @bonuses.setter
    def bonuses(self, value: list[dict[str, object]] | None) -> None:
        self.bonuses_blob = json.dumps(value) if value else None

    @property
    def deductions(self) -> list[dict[str, object]]:
        return _load_items(self.deductions_blob)

    @deductions.setter
    def deductions(self, value: list[dict[str, object]] | None) -> None:
        self.deductions_blob = json.dumps(value) if value else None

    @property
    def employee_name(self) -> str | None:
        return self.employee.name if self.employee is not None else None

    @property
    def pay_period(self) -> str:
        return f"{self.week_start_date[:10]} - {self.week_end_date[:10]}"


__all__ = ["PaymentRecord", "PAYMENT_STATUSES", "PAYMENT_METHODS"]
