"""CRUD helpers for help-desk tickets."""

from __future__ import annotations

from collections import Counter
from datetime import datetime, timezone

from sqlalchemy import desc, select
from sqlalchemy.orm import Session, selectinload

from ..models.help_ticket import TICKET_CATEGORIES, TICKET_PRIORITIES, TICKET_STATUSES, HelpTicket
from ..models.user import User


def _utcnow() -> str:
    return datetime.now(tz=timezone.utc).isoformat(timespec="seconds").replace("+00:00", "Z")


def list_tickets(
    db: Session,
    *,
    employee_id: int | None = None,
    status: str | None = None,
    priority: str | None = None,
    category: str | None = None,
):
    stmt = (
        select(HelpTicket)
        .options(selectinload(HelpTicket.employee), selectinload(HelpTicket.replied_by))
        .order_by(desc(HelpTicket.created_at), desc(HelpTicket.id))
    )
    if employee_id is not None:
        stmt = stmt.where(HelpTicket.employee_id == employee_id)
    # Empty strings come from "All" selections and mean no filter.
    if status:
        stmt = stmt.where(HelpTicket.status == status)
    if priority:
        stmt = stmt.where(HelpTicket.priority == priority)
    if category:
        stmt = stmt.where(HelpTicket.category == category)
    return db.execute(stmt).scalars().all()


def get_ticket(db: Session, ticket_id: int) -> HelpTicket | None:
    stmt = (
        select(HelpTicket)
        .options(selectinload(HelpTicket.employee), selectinload(HelpTicket.replied_by))
        .where(HelpTicket.id == ticket_id)
    )
    return db.execute(stmt).scalars().first()


def create_ticket(db: Session, employee: User, payload: dict) -> HelpTicket:
    subject = (payload.get("subject") or "").strip()
    message = (payload.get("message") or "").strip()
    if not subject or not message:
        raise ValueError("Subject and message are required")
    priority = payload.get("priority") or "medium"
    category = payload.get("category") or "general"
    if priority not in TICKET_PRIORITIES:
        raise ValueError(f"Unknown priority: {priority}")
    if category not in TICKET_CATEGORIES:
        raise ValueError(f"Unknown category: {category}")
    now = _utcnow()
    ticket = HelpTicket(
        employee_id=employee.id,
        subject=subject,
        message=message,
        priority=priority,
        category=category,
        status="open",
        created_at=now,
        updated_at=now,
    )
    db.add(ticket)
    db.commit()
    db.refresh(ticket)
    return ticket


def reply_to_ticket(db: Session, ticket: HelpTicket, admin: User, message: str) -> HelpTicket:
    text = (message or "").strip()
    if not text:
        raise ValueError("Reply message is required")
    now = _utcnow()
    ticket.reply_message = text
    ticket.replied_at = now
    ticket.replied_by_id = admin.id
    # A first reply moves an untouched ticket into progress.
    if ticket.status == "open":
        ticket.status = "in-progress"
    ticket.updated_at = now
    db.commit()
    db.refresh(ticket)
    return ticket


def set_ticket_status(db: Session, ticket: HelpTicket, status: str) -> HelpTicket:
    if status not in TICKET_STATUSES:
        raise ValueError(f"Unknown status: {status}")
    ticket.status = status
    ticket.updated_at = _utcnow()
    db.commit()
    db.refresh(ticket)
    return ticket


def delete_ticket(db: Session, ticket: HelpTicket) -> None:
    db.delete(ticket)
    db.commit()


def ticket_stats(db: Session, employee_id: int | None = None) -> dict[str, object]:
    tickets = list_tickets(db, employee_id=employee_id)
    by_status = Counter(t.status for t in tickets)
    return {
        "total": len(tickets),
        "open": by_status.get("open", 0),
        "in_progress": by_status.get("in-progress", 0),
        "resolved": by_status.get("resolved", 0),
        "closed": by_status.get("closed", 0),
        "by_priority": {p: sum(1 for t in tickets if t.priority == p) for p in TICKET_PRIORITIES},
        "by_category": {c: sum(1 for t in tickets if t.category == c) for c in TICKET_CATEGORIES},
    }
