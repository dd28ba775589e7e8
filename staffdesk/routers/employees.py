from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from ..crud.users import create_user, delete_user, get_user, list_users, reset_password, update_user
from ..db.session import get_db
from ..deps.auth import require_admin
from ..models.user import User
from ..schemas.common import envelope, listing
from ..schemas.employee import EmployeeCreate, EmployeeUpdate, PasswordReset
from .auth import user_to_schema

router = APIRouter(prefix="/employees", tags=["employees"], dependencies=[Depends(require_admin)])


def _load(db: Session, employee_id: int) -> User:
    user = get_user(db, employee_id)
    if user is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Employee not found")
    return user


@router.get("")
def api_list_employees(db: Session = Depends(get_db)):
    return listing(user_to_schema(u) for u in list_users(db))


@router.get("/{employee_id}")
def api_get_employee(employee_id: int, db: Session = Depends(get_db)):
    return envelope(user_to_schema(_load(db, employee_id)))


@router.post("", status_code=201)
def api_create_employee(payload: EmployeeCreate, db: Session = Depends(get_db)):
    try:
        user = create_user(db, payload.model_dump())
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    return envelope(user_to_schema(user))


@router.put("/{employee_id}")
def api_update_employee(employee_id: int, payload: EmployeeUpdate, db: Session = Depends(get_db)):
    user = _load(db, employee_id)
    try:
        updated = update_user(db, user, payload.model_dump(exclude_unset=True))
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    return envelope(user_to_schema(updated))


@router.delete("/{employee_id}")
def api_delete_employee(
    employee_id: int,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
):
    user = _load(db, employee_id)
    if user.id == admin.id:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="You cannot delete your own account")
    delete_user(db, user)
    return envelope({})


@router.put("/{employee_id}/reset-password")
def api_reset_password(employee_id: int, payload: PasswordReset, db: Session = Depends(get_db)):
    user = _load(db, employee_id)
    try:
        reset_password(db, user, payload.new_password)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    return envelope({"message": "Password reset successfully"})
