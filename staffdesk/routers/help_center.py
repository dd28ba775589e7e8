from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from ..crud.help_tickets import (
    create_ticket,
    delete_ticket,
    get_ticket,
    list_tickets,
    reply_to_ticket,
    set_ticket_status,
    ticket_stats,
)
from ..db.session import get_db
from ..deps.auth import ensure_owner_or_admin, get_current_user, require_admin
from ..models.help_ticket import HelpTicket
from ..models.user import User
from ..schemas.common import envelope, listing
from ..schemas.help_ticket import ReplyRequest, StatusRequest, TicketCreate, TicketOut, TicketStats

router = APIRouter(prefix="/help-center", tags=["help-center"])


def _ticket_to_schema(ticket: HelpTicket) -> TicketOut:
    return TicketOut.model_validate(ticket, from_attributes=True)


def _load(db: Session, ticket_id: int, user: User) -> HelpTicket:
    ticket = get_ticket(db, ticket_id)
    if ticket is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Ticket not found")
    ensure_owner_or_admin(user, ticket.employee_id)
    return ticket


@router.get("")
def api_list_tickets(
    status_filter: Optional[str] = Query(default=None, alias="status"),
    priority: Optional[str] = Query(default=None),
    category: Optional[str] = Query(default=None),
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    tickets = list_tickets(
        db,
        employee_id=None if user.is_admin else user.id,
        status=status_filter,
        priority=priority,
        category=category,
    )
    return listing(_ticket_to_schema(t) for t in tickets)


@router.get("/stats")
def api_ticket_stats(db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    stats = ticket_stats(db, employee_id=None if user.is_admin else user.id)
    return envelope(TicketStats.model_validate(stats))


@router.get("/{ticket_id}")
def api_get_ticket(ticket_id: int, db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    return envelope(_ticket_to_schema(_load(db, ticket_id, user)))


@router.post("", status_code=201)
def api_create_ticket(payload: TicketCreate, db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    try:
        ticket = create_ticket(db, user, payload.model_dump())
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    return envelope(_ticket_to_schema(get_ticket(db, ticket.id) or ticket))


@router.put("/{ticket_id}/reply")
def api_reply_to_ticket(
    ticket_id: int,
    payload: ReplyRequest,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
):
    ticket = _load(db, ticket_id, admin)
    try:
        updated = reply_to_ticket(db, ticket, admin, payload.message)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    return envelope(_ticket_to_schema(get_ticket(db, updated.id) or updated))


@router.put("/{ticket_id}/status")
def api_update_ticket_status(
    ticket_id: int,
    payload: StatusRequest,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
):
    ticket = _load(db, ticket_id, admin)
    return envelope(_ticket_to_schema(set_ticket_status(db, ticket, payload.status)))


@router.delete("/{ticket_id}")
def api_delete_ticket(ticket_id: int, db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    delete_ticket(db, _load(db, ticket_id, user))
    return envelope({})
