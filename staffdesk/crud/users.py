"""CRUD helpers for user accounts (employees and admins)."""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from ..core.security import MIN_PASSWORD_LENGTH, hash_password, verify_password
from ..models.user import EMPLOYEE_STATUSES, ROLE_ADMIN, ROLE_EMPLOYEE, ROLES, User

logger = logging.getLogger(__name__)

PROFILE_FIELDS = ("department", "position", "phone_number", "address")


def _utcnow() -> str:
    return datetime.now(tz=timezone.utc).isoformat(timespec="seconds").replace("+00:00", "Z")


def _normalize_email(value: object) -> str:
    return str(value or "").strip().lower()


def _check_password(password: object) -> str:
    text = str(password or "")
    if len(text) < MIN_PASSWORD_LENGTH:
        raise ValueError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters")
    return text


def list_users(db: Session, role: str | None = None):
    stmt = select(User).order_by(User.name)
    if role:
        stmt = stmt.where(User.role == role)
    return db.execute(stmt).scalars().all()


def get_user(db: Session, user_id: int) -> User | None:
    return db.get(User, user_id)


def get_user_by_email(db: Session, email: str) -> User | None:
    stmt = select(User).where(func.lower(User.email) == _normalize_email(email))
    return db.execute(stmt).scalars().first()


def authenticate(db: Session, email: str, password: str) -> User | None:
    user = get_user_by_email(db, email)
    if user is None or not verify_password(password, user.password_hash):
        return None
    return user


def create_user(db: Session, payload: dict) -> User:
    name = (payload.get("name") or "").strip()
    if not name:
        raise ValueError("Name is required")
    email = _normalize_email(payload.get("email"))
    if not email:
        raise ValueError("Email is required")
    if get_user_by_email(db, email) is not None:
        raise ValueError("A user with that email already exists")
    role = payload.get("role") or ROLE_EMPLOYEE
    if role not in ROLES:
        raise ValueError(f"Unknown role: {role}")
    now = _utcnow()
    joining = payload.get("joining_date")
    user = User(
        name=name,
        email=email,
        password_hash=hash_password(_check_password(payload.get("password"))),
        role=role,
        status="active",
        joining_date=str(joining) if joining else now[:10],
        created_at=now,
    )
    for field in PROFILE_FIELDS:
        value = payload.get(field)
        setattr(user, field, (str(value).strip() or None) if value is not None else None)
    db.add(user)
    db.commit()
    db.refresh(user)
    logger.info("Created %s account %s", role, user.id)
    return user


def update_user(db: Session, user: User, payload: dict) -> User:
    if "name" in payload and payload["name"] is not None:
        name = str(payload["name"]).strip()
        if not name:
            raise ValueError("Name is required")
        user.name = name
    if payload.get("email") is not None:
        email = _normalize_email(payload["email"])
        existing = get_user_by_email(db, email)
        if existing is not None and existing.id != user.id:
            raise ValueError("A user with that email already exists")
        user.email = email
    if payload.get("role") is not None:
        if payload["role"] not in ROLES:
            raise ValueError(f"Unknown role: {payload['role']}")
        user.role = payload["role"]
    if payload.get("status") is not None:
        if payload["status"] not in EMPLOYEE_STATUSES:
            raise ValueError(f"Unknown status: {payload['status']}")
        user.status = payload["status"]
    if payload.get("joining_date") is not None:
        user.joining_date = str(payload["joining_date"])
    for field in PROFILE_FIELDS:
        if field in payload:
            value = payload.get(field)
            setattr(user, field, (str(value).strip() or None) if value is not None else None)
    db.commit()
    db.refresh(user)
    return user


def reset_password(db: Session, user: User, new_password: str) -> User:
    user.password_hash = hash_password(_check_password(new_password))
    db.commit()
    db.refresh(user)
    logger.info("Password reset for user %s", user.id)
    return user


def delete_user(db: Session, user: User) -> None:
    db.delete(user)
    db.commit()


def ensure_admin(db: Session, email: str, password: str, name: str = "Administrator") -> User | None:
    """Seed the bootstrap admin account if the configured email is unused."""

    if not email or not password:
        return None
    existing = get_user_by_email(db, email)
    if existing is not None:
        return existing
    return create_user(db, {"name": name, "email": email, "password": password, "role": ROLE_ADMIN})
