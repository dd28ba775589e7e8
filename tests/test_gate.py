from types import SimpleNamespace

import pytest

from staffdesk.client.gate import (
    DEFAULT_ROUTES,
    NOT_FOUND_VIEW,
    AuthGate,
    GateOutcome,
    Requirement,
    Router,
)
from staffdesk.client.signals import Signal

PROTECTED = [route.path for route in DEFAULT_ROUTES if route.requirement is Requirement.AUTHENTICATED]
ADMIN_ONLY = [route.path for route in DEFAULT_ROUTES if route.requirement is Requirement.ADMIN]


def _session(*, loading=False, authenticated=False, admin=False):
    return SimpleNamespace(loading=loading, is_authenticated=authenticated, is_admin=admin)


def test_loading_session_waits_instead_of_deciding():
    gate = AuthGate(_session(loading=True))

    assert gate.evaluate(Requirement.AUTHENTICATED).outcome is GateOutcome.WAIT
    assert gate.evaluate(Requirement.ADMIN).outcome is GateOutcome.WAIT
    assert gate.evaluate(None).outcome is GateOutcome.RENDER


@pytest.mark.parametrize("path", PROTECTED + ADMIN_ONLY)
def test_unauthenticated_never_renders_protected_views(path):
    router = Router(_session())

    navigation = router.navigate(path)

    assert navigation.path == "/login"
    assert navigation.view == "login"


@pytest.mark.parametrize("path", ADMIN_ONLY)
def test_employee_is_sent_to_unauthorized_for_admin_views(path):
    router = Router(_session(authenticated=True))

    navigation = router.navigate(path)

    assert navigation.path == "/unauthorized"
    assert navigation.view == "unauthorized"


@pytest.mark.parametrize("path", PROTECTED)
def test_employee_renders_general_views(path):
    navigation = Router(_session(authenticated=True)).navigate(path)

    assert navigation.rendered and not navigation.redirected


@pytest.mark.parametrize("path", PROTECTED + ADMIN_ONLY)
def test_admin_renders_everything(path):
    navigation = Router(_session(authenticated=True, admin=True)).navigate(path)

    assert navigation.rendered
    assert navigation.path == path


def test_root_redirects_to_dashboard_and_unknown_paths_are_not_found():
    router = Router(_session(authenticated=True))

    assert router.navigate("/").path == "/dashboard"
    missing = router.navigate("/no-such-page")
    assert missing.view == NOT_FOUND_VIEW
    assert missing.rendered


def test_decision_is_recomputed_after_session_change():
    session = _session(authenticated=True, admin=True)
    router = Router(session)
    assert router.navigate("/employees").rendered

    session.is_authenticated = False
    session.is_admin = False

    assert router.navigate("/employees").path == "/login"


def test_router_follows_session_invalidated_signal():
    invalidated = Signal("session_invalidated")
    session = _session(authenticated=True)
    router = Router(session, session_invalidated=invalidated)
    router.navigate("/documents")
    visited = []
    router.navigated.connect(lambda navigation: visited.append(navigation.path))

    invalidated.send(path="/documents")

    assert router.current_path == "/login"
    assert visited == ["/login"]


def test_loading_navigation_waits_on_requested_view():
    router = Router(_session(loading=True))

    navigation = router.navigate("/dashboard")

    assert navigation.decision.outcome is GateOutcome.WAIT
    assert navigation.view is None
    assert navigation.path == "/dashboard"
