"""The single request/response pipeline every resource service goes through.

Request stage: attach ``Authorization: Bearer <token>`` when persisted storage
holds a token. Response stage: pass successes through; on 401 clear the
persisted session and fire ``session_invalidated`` *before* the caller sees
the error, so no view can intercept it first.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from ..core.config import settings
from ..schemas.common import Envelope
from .errors import ApiError, ServiceUnavailable, SessionExpired
from .signals import Signal
from .storage import TOKEN_KEY, USER_KEY, MemoryStorage

logger = logging.getLogger(__name__)

# A 401 from these means "wrong credentials", not "your session ended".
CREDENTIAL_PATHS = ("/auth/login", "/auth/register")


def _error_message(payload: Any, response: httpx.Response) -> str:
    if isinstance(payload, dict):
        for key in ("error", "message", "detail"):
            value = payload.get(key)
            if isinstance(value, str) and value:
                return value
    return response.reason_phrase or f"HTTP {response.status_code}"


class ApiClient:
    def __init__(
        self,
        storage: MemoryStorage,
        *,
        base_url: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.storage = storage
        self.session_invalidated = Signal("session_invalidated")
        self._client = httpx.AsyncClient(
            base_url=base_url or settings.API_URL,
            headers={"Accept": "application/json"},
            # Only geolocation reads carry a deadline; HTTP calls wait.
            timeout=None,
            transport=transport,
            event_hooks={
                "request": [self._attach_token],
                "response": [self._intercept_unauthorized],
            },
        )

    @property
    def base_url(self) -> str:
        return str(self._client.base_url)

    async def _attach_token(self, request: httpx.Request) -> None:
        token = self.storage.get_item(TOKEN_KEY)
        if token:
            request.headers["Authorization"] = f"Bearer {token}"
        logger.debug("%s %s auth=%s", request.method, request.url.path, bool(token))

    async def _intercept_unauthorized(self, response: httpx.Response) -> None:
        path = response.request.url.path
        logger.debug("%s %s -> %s", response.request.method, path, response.status_code)
        if response.status_code != 401 or self._is_credential_path(path):
            return
        logger.warning("Session rejected by server on %s; clearing stored credentials", path)
        self.storage.remove_item(TOKEN_KEY)
        self.storage.remove_item(USER_KEY)
        self.session_invalidated.send(path=path)

    def _is_credential_path(self, path: str) -> bool:
        base_path = self._client.base_url.path.rstrip("/")
        relative = path[len(base_path):] if base_path and path.startswith(base_path) else path
        return relative in CREDENTIAL_PATHS

    async def send(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        try:
            return await self._client.request(method, url, **kwargs)
        except httpx.TransportError as exc:
            logger.warning("No response for %s %s: %s", method, url, exc)
            raise ServiceUnavailable() from exc

    async def request(self, method: str, url: str, **kwargs: Any) -> Envelope:
        response = await self.send(method, url, **kwargs)
        try:
            payload = response.json()
        except ValueError:
            payload = None
        if response.is_error:
            message = _error_message(payload, response)
            if response.status_code == 401 and not self._is_credential_path(response.request.url.path):
                raise SessionExpired(401, message, payload)
            raise ApiError(response.status_code, message, payload)
        if not isinstance(payload, dict):
            raise ApiError(response.status_code, "Unexpected response from server", payload)
        return Envelope.model_validate(payload)

    async def get(self, url: str, **kwargs: Any) -> Envelope:
        return await self.request("GET", url, **kwargs)

    async def post(self, url: str, **kwargs: Any) -> Envelope:
        return await self.request("POST", url, **kwargs)

    async def put(self, url: str, **kwargs: Any) -> Envelope:
        return await self.request("PUT", url, **kwargs)

    async def delete(self, url: str, **kwargs: Any) -> Envelope:
        return await self.request("DELETE", url, **kwargs)

    async def download(self, url: str) -> bytes:
        response = await self.send("GET", url)
        if response.is_error:
            try:
                payload = response.json()
            except ValueError:
                payload = None
            error_type = SessionExpired if response.status_code == 401 else ApiError
            raise error_type(response.status_code, _error_message(payload, response), payload)
        return response.content

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> "ApiClient":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()
