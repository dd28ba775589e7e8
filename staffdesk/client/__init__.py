"""Async client for the StaffDesk API.

Typical wiring::

    storage = LocalStorage(settings.storage_file)
    api = ApiClient(storage)
    session = SessionStore(api)
    router = Router(session, session_invalidated=api.session_invalidated)
    await session.rehydrate()
"""

from .errors import ApiError, GeolocationError, ServiceUnavailable, SessionExpired
from .gate import AuthGate, Decision, GateOutcome, Requirement, Route, Router
from .http import ApiClient
from .listing import Contains, count_by, filter_and_sort
from .notify import Notifier, describe_failure
from .services import Services
from .session import AuthResult, Identity, SessionStore
from .storage import LocalStorage, MemoryStorage

__all__ = [
    "ApiClient",
    "ApiError",
    "AuthGate",
    "AuthResult",
    "Contains",
    "Decision",
    "GateOutcome",
    "GeolocationError",
    "Identity",
    "LocalStorage",
    "MemoryStorage",
    "Notifier",
    "Requirement",
    "Route",
    "Router",
    "ServiceUnavailable",
    "Services",
    "SessionExpired",
    "SessionStore",
    "count_by",
    "describe_failure",
    "filter_and_sort",
]
