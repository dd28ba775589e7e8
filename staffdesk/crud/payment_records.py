"""CRUD helpers for payroll records.

Figures are entered by an admin; the only arithmetic here is adding them up:
overtime = hours x rate, gross = basic + overtime + bonuses, net = gross -
deductions. Amounts are kept as two-decimal strings so sums never drift.
"""

from __future__ import annotations

from datetime import datetime, timezone
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Iterable

from sqlalchemy import desc, select
from sqlalchemy.orm import Session, selectinload

from ..models.payment_record import PAYMENT_METHODS, PAYMENT_STATUSES, PaymentRecord
from ..models.user import User

CENT = Decimal("0.01")
ZERO = Decimal("0")


def _utcnow() -> str:
    return datetime.now(tz=timezone.utc).isoformat(timespec="seconds").replace("+00:00", "Z")


def _to_decimal(value: object) -> Decimal:
    if value is None or value == "":
        return ZERO
    if isinstance(value, Decimal):
        return value
    try:
        return Decimal(str(value).strip())
    except (InvalidOperation, ValueError) as exc:
        raise ValueError(f"Invalid amount: {value!r}") from exc


def _format_decimal(value: Decimal) -> str:
    return str(value.quantize(CENT, rounding=ROUND_HALF_UP))


def money(value: object) -> float:
    """Render a stored amount as a JSON number."""

    return float(_to_decimal(value))


def _clean_items(items: Iterable[dict] | None) -> list[dict[str, object]]:
    cleaned: list[dict[str, object]] = []
    for item in items or []:
        amount = _to_decimal(item.get("amount"))
        if amount < ZERO:
            raise ValueError("Amounts must not be negative")
        cleaned.append({"description": str(item.get("description") or ""), "amount": _format_decimal(amount)})
    return cleaned


def _recalculate(record: PaymentRecord) -> None:
    overtime = _to_decimal(record.overtime_hours) * _to_decimal(record.overtime_rate)
    record.overtime_amount = _format_decimal(overtime)
    bonuses = sum((_to_decimal(item.get("amount")) for item in record.bonuses), ZERO)
    deductions = sum((_to_decimal(item.get("amount")) for item in record.deductions), ZERO)
    gross = _to_decimal(record.basic_salary) + overtime + bonuses
    record.gross_pay = _format_decimal(gross)
    record.net_pay = _format_decimal(gross - deductions)


def _apply_status(record: PaymentRecord, status: str) -> None:
    if status not in PAYMENT_STATUSES:
        raise ValueError(f"Unknown payment status: {status}")
    if status == "paid" and record.payment_status != "paid":
        record.payment_date = _utcnow()
    elif status != "paid":
        record.payment_date = None
    record.payment_status = status


def list_records(
    db: Session,
    *,
    employee_id: int | None = None,
    status: str | None = None,
    start_date: str | None = None,
    end_date: str | None = None,
):
    stmt = (
        select(PaymentRecord)
        .options(selectinload(PaymentRecord.employee))
        .order_by(desc(PaymentRecord.week_start_date), desc(PaymentRecord.id))
    )
    if employee_id is not None:
        stmt = stmt.where(PaymentRecord.employee_id == employee_id)
    if status:
        stmt = stmt.where(PaymentRecord.payment_status == status)
    # ISO dates compare correctly as strings; only the date part matters.
    if start_date:
        stmt = stmt.where(PaymentRecord.week_start_date >= start_date[:10])
    if end_date:
        stmt = stmt.where(PaymentRecord.week_end_date <= end_date[:10])
    return db.execute(stmt).scalars().all()


def get_record(db: Session, record_id: int) -> PaymentRecord | None:
    stmt = select(PaymentRecord).options(selectinload(PaymentRecord.employee)).where(PaymentRecord.id == record_id)
    return db.execute(stmt).scalars().first()


def create_record(db: Session, employee: User, payload: dict) -> PaymentRecord:
    basic = _to_decimal(payload.get("basic_salary"))
    if basic <= ZERO:
        raise ValueError("Basic salary is required")
    start = str(payload.get("week_start_date") or "")
    end = str(payload.get("week_end_date") or "")
    if not start or not end:
        raise ValueError("Week start and end dates are required")
    method = payload.get("payment_method") or "bank_transfer"
    if method not in PAYMENT_METHODS:
        raise ValueError(f"Unknown payment method: {method}")
    overtime = payload.get("overtime") or {}
    now = _utcnow()
    record = PaymentRecord(
        employee_id=employee.id,
        week_start_date=start[:10],
        week_end_date=end[:10],
        basic_salary=_format_decimal(basic),
        overtime_hours=_format_decimal(_to_decimal(overtime.get("hours"))),
        overtime_rate=_format_decimal(_to_decimal(overtime.get("rate"))),
        payment_method=method,
        payment_status="pending",
        notes=(payload.get("notes") or None),
        created_at=now,
        updated_at=now,
    )
    record.bonuses = _clean_items(payload.get("bonuses"))
    record.deductions = _clean_items(payload.get("deductions"))
    _apply_status(record, payload.get("payment_status") or "pending")
    _recalculate(record)
    db.add(record)
    db.commit()
    db.refresh(record)
    return record


def update_record(db: Session, record: PaymentRecord, payload: dict) -> PaymentRecord:
    if payload.get("week_start_date") is not None:
        record.week_start_date = str(payload["week_start_date"])[:10]
    if payload.get("week_end_date") is not None:
        record.week_end_date = str(payload["week_end_date"])[:10]
    if record.week_end_date < record.week_start_date:
        raise ValueError("weekEndDate must not be before weekStartDate")
    if payload.get("basic_salary") is not None:
        basic = _to_decimal(payload["basic_salary"])
        if basic <= ZERO:
            raise ValueError("Basic salary must be positive")
        record.basic_salary = _format_decimal(basic)
    if payload.get("overtime") is not None:
        record.overtime_hours = _format_decimal(_to_decimal(payload["overtime"].get("hours")))
        record.overtime_rate = _format_decimal(_to_decimal(payload["overtime"].get("rate")))
    if payload.get("bonuses") is not None:
        record.bonuses = _clean_items(payload["bonuses"])
    if payload.get("deductions") is not None:
        record.deductions = _clean_items(payload["deductions"])
    if payload.get("payment_method") is not None:
        if payload["payment_method"] not in PAYMENT_METHODS:
            raise ValueError(f"Unknown payment method: {payload['payment_method']}")
        record.payment_method = payload["payment_method"]
    if payload.get("payment_status") is not None:
        _apply_status(record, payload["payment_status"])
    if "notes" in payload:
        record.notes = payload.get("notes") or None
    _recalculate(record)
    record.updated_at = _utcnow()
    db.commit()
    db.refresh(record)
    return record


def delete_record(db: Session, record: PaymentRecord) -> None:
    db.delete(record)
    db.commit()


def _sum_net(records: Iterable[PaymentRecord]) -> float:
    return float(sum((_to_decimal(r.net_pay) for r in records), ZERO))


def payment_stats(db: Session) -> dict[str, object]:
    records = list_records(db)
    paid = [r for r in records if r.payment_status == "paid"]
    pending = [r for r in records if r.payment_status == "pending"]
    return {
        "total_records": len(records),
        "pending_count": len(pending),
        "paid_count": len(paid),
        "cancelled_count": sum(1 for r in records if r.payment_status == "cancelled"),
        "total_paid": _sum_net(paid),
        "total_pending": _sum_net(pending),
    }


def employee_summary(db: Session, employee_id: int) -> tuple[dict[str, object], list[PaymentRecord]]:
    records = list_records(db, employee_id=employee_id)
    paid = [r for r in records if r.payment_status == "paid"]
    pending = [r for r in records if r.payment_status == "pending"]
    summary = {
        "total_payments": len(records),
        "paid_payments": len(paid),
        "pending_payments": len(pending),
        "total_paid_amount": _sum_net(paid),
        "total_pending_amount": _sum_net(pending),
    }
    return summary, records[:5]
