from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from ..core.security import issue_token
from ..crud.users import authenticate, create_user
from ..db.session import get_db
from ..deps.auth import get_current_user
from ..models.user import ROLE_EMPLOYEE, User
from ..schemas.auth import LoginRequest, RegisterRequest, TokenResponse, UserOut
from ..schemas.common import envelope

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])


def user_to_schema(user: User) -> UserOut:
    return UserOut.model_validate(user, from_attributes=True)


def _token_response(user: User) -> dict:
    token = issue_token(user.id, user.role)
    return TokenResponse(token=token, user=user_to_schema(user)).to_wire()


@router.post("/login", summary="Exchange email and password for a bearer token")
def login(payload: LoginRequest, db: Session = Depends(get_db)):
    user = authenticate(db, payload.email, payload.password)
    if user is None:
        logger.info("Rejected login for %s", payload.email)
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid credentials")
    if not user.is_active:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Account is inactive")
    return _token_response(user)


@router.post("/register", status_code=201, summary="Create an employee account and sign in")
def register(payload: RegisterRequest, db: Session = Depends(get_db)):
    data = payload.model_dump()
    data["role"] = ROLE_EMPLOYEE
    try:
        user = create_user(db, data)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    return _token_response(user)


@router.get("/me")
def me(user: User = Depends(get_current_user)):
    return envelope(user_to_schema(user))


@router.get("/logout")
def logout(user: User = Depends(get_current_user)):
    # Tokens are stateless; the client discards its copy.
    return envelope({})
