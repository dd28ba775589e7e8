from __future__ import annotations

from typing import Any


class ApiError(Exception):
    """The server answered with an error status."""

    def __init__(self, status_code: int | None, message: str, payload: Any | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.message = message
        self.payload = payload

    @property
    def has_response(self) -> bool:
        return self.status_code is not None

    def __repr__(self) -> str:
        return f"{type(self).__name__}(status_code={self.status_code!r}, message={self.message!r})"


class SessionExpired(ApiError):
    """401 from the server; persisted session state has already been cleared."""


class ServiceUnavailable(ApiError):
    """No response at all: connection refused, DNS failure, dropped socket."""

    def __init__(self, message: str = "No response from server") -> None:
        super().__init__(None, message)


class GeolocationError(Exception):
    PERMISSION_DENIED = 1
    POSITION_UNAVAILABLE = 2
    TIMEOUT = 3

    _MESSAGES = {
        PERMISSION_DENIED: "Location access denied. Please enable location permissions.",
        POSITION_UNAVAILABLE: "Location information unavailable.",
        TIMEOUT: "Location request timed out.",
    }

    def __init__(self, code: int | None = None) -> None:
        self.code = code
        detail = self._MESSAGES.get(code, "An unknown error occurred.")
        super().__init__(f"Unable to get your location. {detail}")
