from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from ..crud.locations import (
    check_in,
    check_out,
    delete_location,
    get_location,
    list_locations,
    live_update,
)
from ..db.session import get_db
from ..deps.auth import ensure_owner_or_admin, get_current_user
from ..models.location import LocationCheckIn
from ..models.user import User
from ..schemas.common import envelope, listing
from ..schemas.location import CheckInRequest, LiveUpdateRequest, LocationOut

router = APIRouter(prefix="/locations", tags=["locations"])


def _location_to_schema(record: LocationCheckIn) -> LocationOut:
    return LocationOut.model_validate(record, from_attributes=True)


def _load(db: Session, location_id: int, user: User) -> LocationCheckIn:
    record = get_location(db, location_id)
    if record is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Location record not found")
    ensure_owner_or_admin(user, record.employee_id)
    return record


def _load_own(db: Session, location_id: int, user: User) -> LocationCheckIn:
    record = _load(db, location_id, user)
    if record.employee_id != user.id:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Only the employee who checked in can do that")
    return record


@router.get("")
def api_list_locations(db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    records = list_locations(db, employee_id=None if user.is_admin else user.id)
    return listing(_location_to_schema(r) for r in records)


@router.get("/{location_id}")
def api_get_location(location_id: int, db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    return envelope(_location_to_schema(_load(db, location_id, user)))


@router.post("/checkin", status_code=201)
def api_check_in(payload: CheckInRequest, db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    try:
        record = check_in(db, user, payload.model_dump())
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    return envelope(_location_to_schema(get_location(db, record.id) or record))


@router.put("/{location_id}/checkout")
def api_check_out(location_id: int, db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    record = _load_own(db, location_id, user)
    try:
        updated = check_out(db, record)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    return envelope(_location_to_schema(updated))


@router.put("/{location_id}/live-update")
def api_live_update(
    location_id: int,
    payload: LiveUpdateRequest,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    record = _load_own(db, location_id, user)
    try:
        updated = live_update(db, record, payload.model_dump())
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    return envelope(_location_to_schema(updated))


@router.delete("/{location_id}")
def api_delete_location(location_id: int, db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    delete_location(db, _load(db, location_id, user))
    return envelope({})
