"""Authentication state for one client process.

``SessionStore`` owns the token and the decoded identity. It is created
explicitly, handed to whatever needs it (the router, the CLI), and mutated
only through ``login``/``register``/``logout``/``rehydrate``. The HTTP
pipeline never touches it directly: on a 401 the pipeline clears persisted
storage and fires ``session_invalidated``; the store listens and drops its
in-memory copy.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any, Literal, Mapping, Optional

from pydantic import ConfigDict, ValidationError

from ..core.security import is_token_expired
from ..schemas.common import ApiModel, Envelope
from .errors import ApiError
from .http import ApiClient
from .services import AuthService
from .signals import Signal
from .storage import TOKEN_KEY, USER_KEY

logger = logging.getLogger(__name__)

LOGIN_FAILED = "Login failed"
REGISTRATION_FAILED = "Registration failed"


class Identity(ApiModel):
    """The signed-in user as the server describes them."""

    model_config = ConfigDict(extra="allow")

    id: int
    role: Literal["admin", "employee"]
    name: Optional[str] = None
    email: Optional[str] = None
    department: Optional[str] = None
    position: Optional[str] = None

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"


@dataclass(frozen=True)
class AuthResult:
    success: bool
    error: str | None = None


def _server_error(exc: ApiError, default: str) -> str:
    payload = exc.payload
    if isinstance(payload, dict):
        message = payload.get("error") or payload.get("message")
        if isinstance(message, str) and message:
            return message
    return default


def _first_validation_message(exc: ValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return str(exc)
    first = errors[0]
    field = ".".join(str(part) for part in first.get("loc", ()))
    return f"{field}: {first.get('msg')}" if field else str(first.get("msg"))


class SessionStore:
    def __init__(self, api: ApiClient) -> None:
        self.api = api
        self.storage = api.storage
        self.auth = AuthService(api)
        self.changed = Signal("session_changed")
        self._token: str | None = None
        self._identity: Identity | None = None
        self._loading = True
        api.session_invalidated.connect(self._on_invalidated)

    # ---- derived state
    @property
    def token(self) -> str | None:
        return self._token

    @property
    def identity(self) -> Identity | None:
        return self._identity

    @property
    def is_authenticated(self) -> bool:
        return self._token is not None

    @property
    def is_admin(self) -> bool:
        return self._identity is not None and self._identity.is_admin

    @property
    def loading(self) -> bool:
        return self._loading

    # ---- mutations
    async def login(self, email: str, password: str) -> AuthResult:
        return await self._authenticate(self.auth.login, {"email": email, "password": password}, LOGIN_FAILED)

    async def register(self, user_data: Mapping[str, Any]) -> AuthResult:
        return await self._authenticate(self.auth.register, user_data, REGISTRATION_FAILED)

    async def _authenticate(self, call, payload: Mapping[str, Any], default_error: str) -> AuthResult:
        try:
            response = await call(payload)
        except ValidationError as exc:
            return AuthResult(False, _first_validation_message(exc))
        except ApiError as exc:
            logger.info("Authentication rejected: %s", exc.message)
            return AuthResult(False, _server_error(exc, default_error))

        token, identity = self._read_credentials(response)
        if token is None or identity is None:
            return AuthResult(False, response.error or default_error)
        self._establish(token, identity)
        logger.info("Signed in as user %s (%s)", identity.id, identity.role)
        return AuthResult(True)

    def logout(self) -> None:
        """Forget the session locally. Never raises."""

        self.storage.remove_item(TOKEN_KEY)
        self.storage.remove_item(USER_KEY)
        self._token = None
        self._identity = None
        self.changed.send(store=self)

    async def sign_out(self) -> None:
        """Tell the server, then forget the session whatever it answered."""

        if self._token is not None:
            try:
                await self.auth.logout()
            except ApiError as exc:
                logger.info("Server-side logout failed: %s", exc.message)
        self.logout()

    async def rehydrate(self) -> None:
        try:
            await self._rehydrate()
        finally:
            self._loading = False
            self.changed.send(store=self)

    async def _rehydrate(self) -> None:
        token = self.storage.get_item(TOKEN_KEY)
        if not token:
            self._token = None
            self._identity = None
            return
        try:
            expired = is_token_expired(token)
        except ValueError:
            logger.warning("Stored token is unreadable; discarding it")
            self.logout()
            return
        if expired:
            logger.info("Stored token has expired")
            self.logout()
            return

        try:
            response = await self.auth.get_profile()
            identity = Identity.model_validate(response.data)
        except (ApiError, ValidationError) as exc:
            logger.warning("Could not verify stored session: %s", exc)
            self.logout()
            return
        self._establish(token, identity)

    # ---- helpers
    def _establish(self, token: str, identity: Identity) -> None:
        self.storage.set_item(TOKEN_KEY, token)
        self.storage.set_item(USER_KEY, json.dumps(identity.to_wire()))
        self._token = token
        self._identity = identity
        self.changed.send(store=self)

    @staticmethod
    def _read_credentials(response: Envelope) -> tuple[str | None, Identity | None]:
        extra = response.model_extra or {}
        token = extra.get("token")
        user = extra.get("user")
        if not isinstance(token, str) or not token:
            return None, None
        try:
            return token, Identity.model_validate(user)
        except ValidationError:
            return None, None

    def _on_invalidated(self, **_: Any) -> None:
        self._token = None
        self._identity = None
        self.changed.send(store=self)


__all__ = ["SessionStore", "Identity", "AuthResult", "LOGIN_FAILED", "REGISTRATION_FAILED"]
