"""Transient user-facing messages (what a web front end shows as toasts)."""

from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Literal

from .errors import ApiError

logger = logging.getLogger(__name__)

NO_RESPONSE = "No response from server. Please check if backend is running."

Level = Literal["success", "error", "info"]


@dataclass(frozen=True)
class Notice:
    level: Level
    message: str
    created_at: datetime = field(default_factory=lambda: datetime.now(tz=timezone.utc))


def describe_failure(action: str, exc: BaseException, *, label: str | None = None) -> str:
    """Turn a failed call into the message shown to the user.

    ``action`` reads as a verb phrase ("check in"); ``label`` names it as a
    noun for the server-error form ("Check-in failed: ...") and defaults to
    the capitalised action.
    """

    if isinstance(exc, ApiError):
        if exc.has_response:
            server_error = None
            if isinstance(exc.payload, dict):
                server_error = exc.payload.get("error")
            return f"{label or action.capitalize()} failed: {server_error or 'Server error'}"
        return NO_RESPONSE
    return f"Failed to {action}. Please try again."


class Notifier:
    def __init__(self, limit: int = 20) -> None:
        self._notices: deque[Notice] = deque(maxlen=limit)

    @property
    def notices(self) -> list[Notice]:
        return list(self._notices)

    @property
    def last(self) -> Notice | None:
        return self._notices[-1] if self._notices else None

    def success(self, message: str) -> Notice:
        return self._push("success", message)

    def info(self, message: str) -> Notice:
        return self._push("info", message)

    def error(self, message: str) -> Notice:
        return self._push("error", message)

    def failure(self, action: str, exc: BaseException, *, label: str | None = None) -> Notice:
        logger.warning("%s failed: %r", action, exc)
        return self.error(describe_failure(action, exc, label=label))

    def clear(self) -> None:
        self._notices.clear()

    def _push(self, level: Level, message: str) -> Notice:
        notice = Notice(level, message)
        self._notices.append(notice)
        log = logger.warning if level == "error" else logger.info
        log("[%s] %s", level, message)
        return notice


__all__ = ["Notifier", "Notice", "describe_failure", "NO_RESPONSE"]
