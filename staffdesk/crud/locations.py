"""CRUD helpers for check-in records and live position updates."""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import desc, select
from sqlalchemy.orm import Session, selectinload

from ..models.location import STATUS_CHECKED_IN, STATUS_CHECKED_OUT, LocationCheckIn
from ..models.user import User


def _utcnow() -> str:
    return datetime.now(tz=timezone.utc).isoformat(timespec="seconds").replace("+00:00", "Z")


def list_locations(db: Session, employee_id: int | None = None, status: str | None = None):
    stmt = (
        select(LocationCheckIn)
        .options(selectinload(LocationCheckIn.employee))
        .order_by(desc(LocationCheckIn.check_in_time), desc(LocationCheckIn.id))
    )
    if employee_id is not None:
        stmt = stmt.where(LocationCheckIn.employee_id == employee_id)
    if status:
        stmt = stmt.where(LocationCheckIn.status == status)
    return db.execute(stmt).scalars().all()


def get_location(db: Session, location_id: int) -> LocationCheckIn | None:
    stmt = (
        select(LocationCheckIn)
        .options(selectinload(LocationCheckIn.employee))
        .where(LocationCheckIn.id == location_id)
    )
    return db.execute(stmt).scalars().first()


def active_check_in(db: Session, employee_id: int) -> LocationCheckIn | None:
    stmt = select(LocationCheckIn).where(
        LocationCheckIn.employee_id == employee_id,
        LocationCheckIn.status == STATUS_CHECKED_IN,
    )
    return db.execute(stmt).scalars().first()


def check_in(db: Session, employee: User, payload: dict) -> LocationCheckIn:
    if active_check_in(db, employee.id) is not None:
        raise ValueError("You are already checked in")
    now = _utcnow()
    record = LocationCheckIn(
        employee_id=employee.id,
        latitude=float(payload["latitude"]),
        longitude=float(payload["longitude"]),
        accuracy=payload.get("accuracy"),
        address=(payload.get("address") or None),
        device=(payload.get("device") or None),
        status=STATUS_CHECKED_IN,
        check_in_time=now,
        last_update=now,
        created_at=now,
    )
    db.add(record)
    db.commit()
    db.refresh(record)
    return record


def check_out(db: Session, record: LocationCheckIn) -> LocationCheckIn:
    if record.status != STATUS_CHECKED_IN:
        raise ValueError("This check-in has already been closed")
    record.status = STATUS_CHECKED_OUT
    record.check_out_time = _utcnow()
    db.commit()
    db.refresh(record)
    return record


def live_update(db: Session, record: LocationCheckIn, payload: dict) -> LocationCheckIn:
    if record.status != STATUS_CHECKED_IN:
        raise ValueError("Live updates are only accepted while checked in")
    record.latitude = float(payload["latitude"])
    record.longitude = float(payload["longitude"])
    if payload.get("accuracy") is not None:
        record.accuracy = float(payload["accuracy"])
    stamp = payload.get("timestamp")
    if isinstance(stamp, datetime):
        if stamp.tzinfo is None:
            stamp = stamp.replace(tzinfo=timezone.utc)
        record.last_update = stamp.astimezone(timezone.utc).isoformat(timespec="seconds").replace("+00:00", "Z")
    else:
        record.last_update = _utcnow()
    db.commit()
    db.refresh(record)
    return record


def delete_location(db: Session, record: LocationCheckIn) -> None:
    db.delete(record)
    db.commit()
