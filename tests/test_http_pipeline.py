import asyncio

import httpx
import pytest

from staffdesk.client.errors import ApiError, ServiceUnavailable, SessionExpired
from staffdesk.client.http import ApiClient
from staffdesk.client.storage import TOKEN_KEY, USER_KEY, MemoryStorage


def _client(handler, storage=None, base_url="http://api.test"):
    return ApiClient(storage or MemoryStorage(), base_url=base_url, transport=httpx.MockTransport(handler))


def test_bearer_header_follows_persisted_token():
    seen = []

    def handler(request):
        seen.append(request.headers.get("Authorization"))
        return httpx.Response(200, json={"success": True, "data": []})

    storage = MemoryStorage()

    async def scenario():
        async with _client(handler, storage) as api:
            await api.get("/documents")
            storage.set_item(TOKEN_KEY, "tok-1")
            await api.get("/documents")

    asyncio.run(scenario())

    assert seen == [None, "Bearer tok-1"]


def test_unauthorized_clears_storage_before_caller_sees_error():
    storage = MemoryStorage({TOKEN_KEY: "stale", USER_KEY: "{}"})
    observed = []

    def handler(request):
        return httpx.Response(401, json={"success": False, "error": "Token expired"})

    async def scenario():
        async with _client(handler, storage) as api:
            api.session_invalidated.connect(lambda **kw: observed.append((kw["path"], storage.get_item(TOKEN_KEY))))
            with pytest.raises(SessionExpired) as excinfo:
                await api.get("/employees")
            # The signal already fired by the time the exception surfaced.
            assert observed == [("/employees", None)]
            return excinfo.value

    error = asyncio.run(scenario())

    assert error.status_code == 401
    assert error.message == "Token expired"
    assert storage.get_item(TOKEN_KEY) is None
    assert storage.get_item(USER_KEY) is None


def test_credential_endpoints_do_not_invalidate_the_session():
    storage = MemoryStorage({TOKEN_KEY: "keep-me"})
    fired = []

    def handler(request):
        return httpx.Response(401, json={"success": False, "error": "Invalid credentials"})

    async def scenario():
        async with _client(handler, storage, base_url="http://api.test/api") as api:
            api.session_invalidated.connect(lambda **kw: fired.append(kw))
            with pytest.raises(ApiError) as excinfo:
                await api.post("/auth/login", json={"email": "a@b.com", "password": "nope"})
            return excinfo.value

    error = asyncio.run(scenario())

    assert not isinstance(error, SessionExpired)
    assert error.message == "Invalid credentials"
    assert fired == []
    assert storage.get_item(TOKEN_KEY) == "keep-me"


def test_other_errors_pass_through_with_server_message():
    storage = MemoryStorage({TOKEN_KEY: "t"})

    def handler(request):
        if request.url.path == "/forbidden":
            return httpx.Response(403, json={"success": False, "error": "Admins only"})
        return httpx.Response(500, text="oops")

    async def scenario():
        async with _client(handler, storage) as api:
            with pytest.raises(ApiError) as forbidden:
                await api.get("/forbidden")
            with pytest.raises(ApiError) as broken:
                await api.get("/broken")
            return forbidden.value, broken.value

    forbidden, broken = asyncio.run(scenario())

    assert (forbidden.status_code, forbidden.message) == (403, "Admins only")
    assert broken.status_code == 500
    assert broken.has_response
    assert storage.get_item(TOKEN_KEY) == "t"


def test_transport_failure_is_reported_as_no_response():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    async def scenario():
        async with _client(handler) as api:
            with pytest.raises(ServiceUnavailable) as excinfo:
                await api.get("/documents")
            return excinfo.value

    error = asyncio.run(scenario())

    assert error.status_code is None
    assert not error.has_response


def test_envelope_keeps_count_and_extra_keys():
    def handler(request):
        return httpx.Response(200, json={"success": True, "data": [{"id": 1}], "count": 1, "token": "x"})

    async def scenario():
        async with _client(handler) as api:
            return await api.get("/documents")

    response = asyncio.run(scenario())

    assert response.count == 1
    assert response.data == [{"id": 1}]
    assert response.model_extra["token"] == "x"
