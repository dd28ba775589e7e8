"""Route authorization and the one place that navigates.

``AuthGate.evaluate`` is a pure decision over the current session state and a
route's declared requirement; nothing is cached, so a logout is reflected on
the very next navigation. ``Router`` owns the current location, consults the
gate on every ``navigate`` and is the only subscriber that reacts to
``session_invalidated`` by moving to the login view.
"""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass
from typing import Any, Protocol

from .signals import Signal

logger = logging.getLogger(__name__)

LOGIN_PATH = "/login"
UNAUTHORIZED_PATH = "/unauthorized"
HOME_PATH = "/dashboard"
NOT_FOUND_VIEW = "not-found"


class Requirement(enum.Enum):
    AUTHENTICATED = "authenticated"
    ADMIN = "admin"


class GateOutcome(enum.Enum):
    WAIT = "wait"
    REDIRECT = "redirect"
    RENDER = "render"


class SessionView(Protocol):
    @property
    def loading(self) -> bool: ...

    @property
    def is_authenticated(self) -> bool: ...

    @property
    def is_admin(self) -> bool: ...


@dataclass(frozen=True)
class Route:
    path: str
    view: str
    requirement: Requirement | None = None

    @property
    def is_public(self) -> bool:
        return self.requirement is None


@dataclass(frozen=True)
class Decision:
    outcome: GateOutcome
    target: str | None = None

    @classmethod
    def wait(cls) -> "Decision":
        return cls(GateOutcome.WAIT)

    @classmethod
    def redirect(cls, target: str) -> "Decision":
        return cls(GateOutcome.REDIRECT, target)

    @classmethod
    def render(cls) -> "Decision":
        return cls(GateOutcome.RENDER)


class AuthGate:
    def __init__(self, session: SessionView) -> None:
        self.session = session

    def evaluate(self, requirement: Requirement | None) -> Decision:
        if requirement is None:
            return Decision.render()
        if self.session.loading:
            return Decision.wait()
        if not self.session.is_authenticated:
            return Decision.redirect(LOGIN_PATH)
        if requirement is Requirement.ADMIN and not self.session.is_admin:
            return Decision.redirect(UNAUTHORIZED_PATH)
        return Decision.render()


DEFAULT_ROUTES: tuple[Route, ...] = (
    Route(LOGIN_PATH, "login"),
    Route(UNAUTHORIZED_PATH, "unauthorized"),
    Route("/dashboard", "dashboard", Requirement.AUTHENTICATED),
    Route("/profile", "profile", Requirement.AUTHENTICATED),
    Route("/documents", "documents", Requirement.AUTHENTICATED),
    Route("/locations", "locations", Requirement.AUTHENTICATED),
    Route("/help-center", "help-center", Requirement.AUTHENTICATED),
    Route("/payment-records", "payment-records", Requirement.AUTHENTICATED),
    Route("/my-payments", "my-payments", Requirement.AUTHENTICATED),
    Route("/employees", "employees", Requirement.ADMIN),
)

ROOT_REDIRECTS = {"/": HOME_PATH, "": HOME_PATH}


@dataclass(frozen=True)
class Navigation:
    """Where a navigation ended up and what the gate said about it."""

    requested: str
    path: str
    view: str | None
    decision: Decision

    @property
    def rendered(self) -> bool:
        return self.decision.outcome is GateOutcome.RENDER

    @property
    def redirected(self) -> bool:
        return self.path != self.requested


class Router:
    # Redirect chains are at most login/unauthorized after one hop.
    MAX_REDIRECTS = 5

    def __init__(
        self,
        session: SessionView,
        *,
        routes: tuple[Route, ...] = DEFAULT_ROUTES,
        session_invalidated: Signal | None = None,
    ) -> None:
        self.gate = AuthGate(session)
        self._routes = {route.path: route for route in routes}
        self.current: Navigation | None = None
        self.navigated = Signal("navigated")
        if session_invalidated is not None:
            session_invalidated.connect(self._on_session_invalidated)

    @property
    def current_path(self) -> str | None:
        return self.current.path if self.current else None

    def resolve(self, path: str) -> Route | None:
        return self._routes.get(path)

    def navigate(self, path: str) -> Navigation:
        requested = path
        for _ in range(self.MAX_REDIRECTS):
            path = ROOT_REDIRECTS.get(path, path)
            route = self.resolve(path)
            if route is None:
                return self._settle(Navigation(requested, path, NOT_FOUND_VIEW, Decision.render()))
            decision = self.gate.evaluate(route.requirement)
            if decision.outcome is GateOutcome.REDIRECT and decision.target != path:
                logger.debug("Gate redirected %s -> %s", path, decision.target)
                path = decision.target
                continue
            view = route.view if decision.outcome is GateOutcome.RENDER else None
            return self._settle(Navigation(requested, path, view, decision))
        raise RuntimeError(f"Redirect loop while navigating to {requested}")

    def _settle(self, navigation: Navigation) -> Navigation:
        self.current = navigation
        self.navigated.send(navigation=navigation)
        return navigation

    def _on_session_invalidated(self, **_: Any) -> None:
        logger.info("Session invalidated; returning to %s", LOGIN_PATH)
        self.navigate(LOGIN_PATH)


__all__ = [
    "AuthGate",
    "Decision",
    "GateOutcome",
    "Navigation",
    "Requirement",
    "Route",
    "Router",
    "DEFAULT_ROUTES",
    "LOGIN_PATH",
    "UNAUTHORIZED_PATH",
    "HOME_PATH",
    "NOT_FOUND_VIEW",
]
