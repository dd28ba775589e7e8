from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any

import bcrypt
from jose import JWTError, jwt
from pydantic import BaseModel, ValidationError

from .config import settings

ALGORITHM = "HS256"
ISSUER = "staffdesk"
MIN_PASSWORD_LENGTH = 6


class TokenPayload(BaseModel):
    sub: str
    role: str
    exp: datetime
    iat: datetime
    iss: str

    @property
    def user_id(self) -> int:
        return int(self.sub)


def _now() -> datetime:
    return datetime.now(tz=timezone.utc)


def hash_password(plain: str) -> str:
    return bcrypt.hashpw(plain.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_password(plain: str, hashed: str) -> bool:
    if not hashed:
        return False
    try:
        return bcrypt.checkpw(plain.encode("utf-8"), hashed.encode("utf-8"))
    except ValueError:
        return False


def issue_token(user_id: int, role: str, *, expires_delta: timedelta | None = None) -> str:
    now = _now()
    delta = expires_delta if expires_delta is not None else timedelta(minutes=settings.JWT_TTL_MIN)
    payload: dict[str, Any] = {
        "sub": str(user_id),
        "role": role,
        "iat": int(now.timestamp()),
        "exp": int((now + delta).timestamp()),
        "iss": ISSUER,
    }
    return jwt.encode(payload, settings.JWT_SECRET, algorithm=ALGORITHM)


def decode_token(token: str) -> TokenPayload:
    try:
        decoded = jwt.decode(token, settings.JWT_SECRET, algorithms=[ALGORITHM], issuer=ISSUER)
    except JWTError as exc:
        raise ValueError("Invalid token") from exc
    try:
        return TokenPayload.model_validate(decoded)
    except ValidationError as exc:
        raise ValueError("Invalid token payload") from exc


def token_expiry(token: str) -> float | None:
    """Read the ``exp`` claim without verifying the signature.

    The client holds no signing secret; it only needs to know whether a
    persisted token is already past its expiry. Returns ``None`` when the
    token carries no expiry claim and raises ``ValueError`` when it cannot be
    decoded at all.
    """

    try:
        claims = jwt.get_unverified_claims(token)
    except JWTError as exc:
        raise ValueError("Malformed token") from exc
    exp = claims.get("exp")
    if exp is None:
        return None
    try:
        return float(exp)
    except (TypeError, ValueError) as exc:
        raise ValueError("Malformed expiry claim") from exc


def is_token_expired(token: str, *, now: float | None = None) -> bool:
    exp = token_expiry(token)
    if exp is None:
        return False
    current = now if now is not None else _now().timestamp()
    return exp < current
