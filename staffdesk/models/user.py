"""SQLAlchemy model for user accounts; every employee is a user row."""

from __future__ import annotations

from sqlalchemy import Column, Integer, Text
from sqlalchemy.orm import relationship

from ..db.session import Base

ROLE_ADMIN = "admin"
ROLE_EMPLOYEE = "employee"
ROLES = (ROLE_ADMIN, ROLE_EMPLOYEE)
EMPLOYEE_STATUSES = ("active", "inactive")


class User(Base):
    __tablename__ = "users"
    __allow_unmapped__ = True

    id = Column(Integer, primary_key=True, index=True)
    name = Column(Text, nullable=False)
    email = Column(Text, nullable=False, unique=True, index=True)
    password_hash = Column(Text, nullable=False)
    role = Column(Text, nullable=False, default=ROLE_EMPLOYEE)
    department = Column(Text, nullable=True)
    position = Column(Text, nullable=True)
    phone_number = Column(Text, nullable=True)
    address = Column(Text, nullable=True)
    status = Column(Text, nullable=False, default="active")
    joining_date = Column(Text, nullable=True)
    created_at = Column(Text, nullable=False)

    documents = relationship("Document", back_populates="employee", cascade="all, delete-orphan")
    locations = relationship("LocationCheckIn", back_populates="employee", cascade="all, delete-orphan")
    tickets = relationship(
        "HelpTicket",
        back_populates="employee",
        cascade="all, delete-orphan",
        foreign_keys="HelpTicket.employee_id",
    )
    payment_records = relationship("PaymentRecord", back_populates="employee", cascade="all, delete-orphan")

    @property
    def is_admin(self) -> bool:
        return self.role == ROLE_ADMIN

    @property
    def is_active(self) -> bool:
        return (self.status or "active") == "active"


__all__ = ["User", "ROLE_ADMIN", "ROLE_EMPLOYEE", "ROLES", "EMPLOYEE_STATUSES"]
