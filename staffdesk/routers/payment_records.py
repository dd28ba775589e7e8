from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from ..crud.payment_records import (
    create_record,
    delete_record,
    employee_summary,
    get_record,
    list_records,
    money,
    payment_stats,
    update_record,
)
from ..crud.users import get_user
from ..db.session import get_db
from ..deps.auth import ensure_owner_or_admin, get_current_user, require_admin
from ..models.payment_record import PaymentRecord
from ..models.user import User
from ..schemas.common import envelope, listing
from ..schemas.payment_record import (
    LineItem,
    Overtime,
    PaymentCreate,
    PaymentOut,
    PaymentStats,
    PaymentSummary,
    PaymentUpdate,
)

router = APIRouter(prefix="/payment-records", tags=["payment-records"])


def _record_to_schema(record: PaymentRecord) -> PaymentOut:
    return PaymentOut(
        id=record.id,
        employee_id=record.employee_id,
        employee_name=record.employee_name,
        week_start_date=record.week_start_date,
        week_end_date=record.week_end_date,
        pay_period=record.pay_period,
        basic_salary=money(record.basic_salary),
        overtime=Overtime(
            hours=money(record.overtime_hours),
            rate=money(record.overtime_rate),
            amount=money(record.overtime_amount),
        ),
        bonuses=[LineItem(description=str(b.get("description") or ""), amount=money(b.get("amount"))) for b in record.bonuses],
        deductions=[
            LineItem(description=str(d.get("description") or ""), amount=money(d.get("amount"))) for d in record.deductions
        ],
        gross_pay=money(record.gross_pay),
        net_pay=money(record.net_pay),
        payment_method=record.payment_method,
        payment_status=record.payment_status,
        payment_date=record.payment_date,
        notes=record.notes,
        created_at=record.created_at,
        updated_at=record.updated_at,
    )


def _load(db: Session, record_id: int) -> PaymentRecord:
    record = get_record(db, record_id)
    if record is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Payment record not found")
    return record


@router.get("")
def api_list_records(
    status_filter: Optional[str] = Query(default=None, alias="status"),
    employee_id: Optional[int] = Query(default=None, alias="employeeId"),
    start_date: Optional[str] = Query(default=None, alias="startDate"),
    end_date: Optional[str] = Query(default=None, alias="endDate"),
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    # Employees only ever see their own records, whatever employeeId says.
    scope = employee_id if user.is_admin else user.id
    records = list_records(db, employee_id=scope, status=status_filter, start_date=start_date, end_date=end_date)
    return listing(_record_to_schema(r) for r in records)


@router.get("/stats")
def api_payment_stats(db: Session = Depends(get_db), admin: User = Depends(require_admin)):
    return envelope(PaymentStats.model_validate(payment_stats(db)))


@router.get("/my-summary")
def api_my_summary(db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    summary, recent = employee_summary(db, user.id)
    return envelope(
        {
            "summary": PaymentSummary.model_validate(summary).to_wire(),
            "recentPayments": [_record_to_schema(r).to_wire() for r in recent],
        }
    )


@router.get("/{record_id}")
def api_get_record(record_id: int, db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    record = _load(db, record_id)
    ensure_owner_or_admin(user, record.employee_id)
    return envelope(_record_to_schema(record))


@router.post("", status_code=201)
def api_create_record(payload: PaymentCreate, db: Session = Depends(get_db), admin: User = Depends(require_admin)):
    employee = get_user(db, payload.employee_id)
    if employee is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Employee not found")
    try:
        record = create_record(db, employee, payload.model_dump())
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    return envelope(_record_to_schema(_load(db, record.id)))


@router.put("/{record_id}")
def api_update_record(
    record_id: int,
    payload: PaymentUpdate,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
):
    record = _load(db, record_id)
    try:
        updated = update_record(db, record, payload.model_dump(exclude_unset=True))
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    return envelope(_record_to_schema(updated))


@router.delete("/{record_id}")
def api_delete_record(record_id: int, db: Session = Depends(get_db), admin: User = Depends(require_admin)):
    delete_record(db, _load(db, record_id))
    return envelope({})
