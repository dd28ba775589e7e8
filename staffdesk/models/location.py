"""SQLAlchemy model for GPS check-in/check-out records."""

from __future__ import annotations

from sqlalchemy import Column, Float, ForeignKey, Integer, Text
from sqlalchemy.orm import relationship

from ..db.session import Base

STATUS_CHECKED_IN = "checked-in"
STATUS_CHECKED_OUT = "checked-out"


class LocationCheckIn(Base):
    __tablename__ = "locations"
    __allow_unmapped__ = True

    id = Column(Integer, primary_key=True, index=True)
    employee_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    latitude = Column(Float, nullable=False)
    longitude = Column(Float, nullable=False)
    accuracy = Column(Float, nullable=True)
    address = Column(Text, nullable=True)
    device = Column(Text, nullable=True)
    status = Column(Text, nullable=False, default=STATUS_CHECKED_IN, index=True)
    check_in_time = Column(Text, nullable=False)
    check_out_time = Column(Text, nullable=True)
    # Live tracking overwrites the coordinates above; this records when.
    last_update = Column(Text, nullable=True)
    created_at = Column(Text, nullable=False)

    employee = relationship("User", back_populates="locations")

    @property
    def employee_name(self) -> str | None:
        return self.employee.name if self.employee is not None else None


__all__ = ["LocationCheckIn", "STATUS_CHECKED_IN", "STATUS_CHECKED_OUT"]
