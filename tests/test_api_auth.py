import asyncio
import time

import httpx
import pytest
from jose import jwt

from staffdesk.client.errors import SessionExpired
from staffdesk.client.gate import Router
from staffdesk.client.services import Services
from staffdesk.client.session import SessionStore
from staffdesk.client.storage import TOKEN_KEY, LocalStorage, MemoryStorage
from staffdesk.core.config import settings
from staffdesk.main import create_app

from conftest import EMPLOYEE_PASSWORD


def test_login_and_profile_against_the_real_api(make_client, employee_user):
    async def scenario():
        async with make_client() as api:
            session = SessionStore(api)
            result = await session.login("ELI@staffdesk.io", EMPLOYEE_PASSWORD)
            profile = await Services(api).auth.get_profile()
        return result, session, profile

    result, session, profile = asyncio.run(scenario())

    assert result.success
    assert session.identity.email == "eli@staffdesk.io"
    assert session.identity.department == "Field"
    assert profile.data["role"] == "employee"
    assert "passwordHash" not in profile.data


def test_wrong_password_is_a_login_error_not_a_session_expiry(make_client, employee_user):
    async def scenario():
        async with make_client() as api:
            session = SessionStore(api)
            return await session.login("eli@staffdesk.io", "wrong-pass")

    result = asyncio.run(scenario())

    assert result.success is False
    assert result.error == "Invalid credentials"


def test_register_creates_an_employee_and_signs_in(make_client):
    async def scenario():
        async with make_client() as api:
            session = SessionStore(api)
            first = await session.register({"name": "New Hire", "email": "new@staffdesk.io", "password": "secret1"})
            duplicate = await session.register({"name": "Again", "email": "new@staffdesk.io", "password": "secret1"})
        return first, duplicate, session

    first, duplicate, session = asyncio.run(scenario())

    assert first.success
    assert session.identity.role == "employee"
    assert duplicate.error == "A user with that email already exists"


def test_session_survives_a_restart_through_local_storage(make_client, employee_user, tmp_path):
    path = tmp_path / "storage.json"

    async def first_run():
        async with make_client(LocalStorage(path)) as api:
            await SessionStore(api).login("eli@staffdesk.io", EMPLOYEE_PASSWORD)

    async def second_run():
        async with make_client(LocalStorage(path)) as api:
            session = SessionStore(api)
            await session.rehydrate()
            return session

    asyncio.run(first_run())
    session = asyncio.run(second_run())

    assert session.is_authenticated
    assert session.identity.name == "Eli Employee"


def test_server_rejecting_the_token_mid_session_sends_client_to_login(make_client, employee_user, monkeypatch):
    storage = MemoryStorage()

    async def scenario():
        async with make_client(storage) as api:
            session = SessionStore(api)
            router = Router(session, session_invalidated=api.session_invalidated)
            await session.rehydrate()
            await session.login("eli@staffdesk.io", EMPLOYEE_PASSWORD)
            assert router.navigate("/documents").rendered
            # Signing key rotated on the server: every issued token is now invalid.
            monkeypatch.setattr(settings, "JWT_SECRET", "rotated-secret")
            with pytest.raises(SessionExpired):
                await Services(api).documents.list()
            return session, router

    session, router = asyncio.run(scenario())

    assert not session.is_authenticated
    assert router.current_path == "/login"
    assert TOKEN_KEY not in storage


def test_token_from_another_issuer_fails_rehydration(make_client, employee_user):
    forged = jwt.encode(
        {"sub": str(employee_user.id), "role": "admin", "exp": int(time.time()) + 600, "iss": "staffdesk"},
        "not-our-secret",
        algorithm="HS256",
    )
    storage = MemoryStorage({TOKEN_KEY: forged})

    async def scenario():
        async with make_client(storage) as api:
            session = SessionStore(api)
            await session.rehydrate()
            return session

    session = asyncio.run(scenario())

    assert not session.is_authenticated
    assert not session.is_admin
    assert TOKEN_KEY not in storage


def test_missing_bearer_gets_enveloped_401(app):
    async def scenario():
        transport = httpx.ASGITransport(app=app)
        async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as client:
            return await client.get("/auth/me")

    response = asyncio.run(scenario())

    assert response.status_code == 401
    assert response.json() == {"success": False, "error": "Not authorized to access this route"}
    assert response.headers["WWW-Authenticate"] == "Bearer"
    assert response.headers["X-Request-ID"]


def test_bootstrap_admin_is_seeded(engine, session_factory, monkeypatch):
    monkeypatch.setattr(settings, "ADMIN_EMAIL", "root@staffdesk.io")
    monkeypatch.setattr(settings, "ADMIN_PASSWORD", "rootpass")
    app = create_app(bind=engine, session_factory=session_factory, instrument=False)

    async def scenario():
        transport = httpx.ASGITransport(app=app)
        async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as client:
            response = await client.post("/auth/login", json={"email": "root@staffdesk.io", "password": "rootpass"})
            return response.json()

    body = asyncio.run(scenario())

    assert body["success"] is True
    assert body["user"]["role"] == "admin"


def test_middleware_stack_adds_cors_and_hardening_headers(engine, session_factory, monkeypatch):
    monkeypatch.setattr(settings, "ALLOWED_ORIGINS", ["https://desk.example"])
    app = create_app(bind=engine, session_factory=session_factory, instrument=False)

    async def scenario():
        transport = httpx.ASGITransport(app=app)
        async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as client:
            allowed = await client.get("/health", headers={"Origin": "https://desk.example"})
            foreign = await client.get("/health", headers={"Origin": "https://evil.example"})
            return allowed, foreign

    allowed, foreign = asyncio.run(scenario())

    assert allowed.headers["access-control-allow-origin"] == "https://desk.example"
    assert "X-Request-ID" in allowed.headers["access-control-expose-headers"]
    assert "access-control-allow-origin" not in foreign.headers
    assert allowed.headers["X-Content-Type-Options"] == "nosniff"
    assert allowed.headers["X-Frame-Options"] == "DENY"
    assert allowed.headers["X-Request-ID"]
