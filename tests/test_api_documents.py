import asyncio
import inspect
import io

import pytest
from pydantic import ValidationError

from staffdesk.client.errors import ApiError
from staffdesk.client.services import Services
from staffdesk.client.session import SessionStore
from staffdesk.core.config import settings
from staffdesk.routers.documents import api_upload_document

from conftest import ADMIN_PASSWORD, EMPLOYEE_PASSWORD


async def _signed_in(api, email, password):
    session = SessionStore(api)
    result = await session.login(email, password)
    assert result.success, result.error
    return Services(api)


def test_uploaded_document_is_listed_as_pending(make_client, employee_user):
    async def scenario():
        async with make_client() as api:
            services = await _signed_in(api, "eli@staffdesk.io", EMPLOYEE_PASSWORD)
            created = await services.documents.upload(
                io.BytesIO(b"%PDF-1.4 passport scan"),
                doc_type="ID",
                name="Passport",
                filename="passport.pdf",
                content_type="application/pdf",
            )
            listed = await services.documents.list()
            content = await services.documents.download(created.data["id"])
        return created, listed, content

    created, listed, content = asyncio.run(scenario())

    assert created.data["verificationStatus"] == "pending"
    assert listed.count == 1
    row = listed.data[0]
    assert (row["type"], row["name"], row["verificationStatus"]) == ("ID", "Passport", "pending")
    assert row["employeeName"] == "Eli Employee"
    assert row["filename"] == "passport.pdf"
    assert content == b"%PDF-1.4 passport scan"


def test_name_defaults_to_filename_and_blank_type_is_rejected_locally(make_client, employee_user):
    async def scenario():
        async with make_client() as api:
            services = await _signed_in(api, "eli@staffdesk.io", EMPLOYEE_PASSWORD)
            created = await services.documents.upload(b"data", doc_type="Contract", filename="contract.txt")
            with pytest.raises(ValidationError):
                await services.documents.upload(b"data", doc_type="", filename="x.txt")
            return created, (await services.documents.list()).count

    created, count = asyncio.run(scenario())

    assert created.data["name"] == "contract.txt"
    assert count == 1


def test_admin_verifies_and_employee_sees_only_own(make_client, admin_user, employee_user):
    async def scenario():
        async with make_client() as employee_api, make_client() as admin_api:
            employee = await _signed_in(employee_api, "eli@staffdesk.io", EMPLOYEE_PASSWORD)
            admin = await _signed_in(admin_api, "ada@staffdesk.io", ADMIN_PASSWORD)
            mine = await employee.documents.upload(b"x", doc_type="ID", filename="id.png")
            await admin.documents.upload(b"y", doc_type="Policy", filename="policy.txt")

            with pytest.raises(ApiError) as forbidden:
                await employee.documents.verify(mine.data["id"], "verified")
            verified = await admin.documents.verify(mine.data["id"], "verified")

            employee_view = await employee.documents.list()
            admin_view = await admin.documents.list()
            return forbidden.value, verified, employee_view, admin_view

    forbidden, verified, employee_view, admin_view = asyncio.run(scenario())

    assert forbidden.status_code == 403
    assert verified.data["verificationStatus"] == "verified"
    assert verified.data["verifiedAt"]
    assert employee_view.count == 1
    assert admin_view.count == 2


def test_delete_removes_row_and_file(make_client, employee_user):
    async def scenario():
        async with make_client() as api:
            services = await _signed_in(api, "eli@staffdesk.io", EMPLOYEE_PASSWORD)
            created = await services.documents.upload(b"bytes", doc_type="ID", filename="a.bin")
            await services.documents.delete(created.data["id"])
            with pytest.raises(ApiError) as missing:
                await services.documents.get(created.data["id"])
            return missing.value

    missing = asyncio.run(scenario())

    assert missing.status_code == 404
    assert not any(settings.documents_dir.rglob("*.bin"))


def test_upload_over_limit_is_refused(make_client, employee_user, monkeypatch):
    monkeypatch.setattr(settings, "UPLOAD_MAX_BYTES", 8)

    async def scenario():
        async with make_client() as api:
            services = await _signed_in(api, "eli@staffdesk.io", EMPLOYEE_PASSWORD)
            with pytest.raises(ApiError) as too_big:
                await services.documents.upload(b"0123456789", doc_type="ID", filename="big.bin")
            return too_big.value, (await services.documents.list()).count

    too_big, count = asyncio.run(scenario())

    assert too_big.status_code == 413
    assert count == 0


def test_upload_handler_runs_in_the_threadpool():
    assert not inspect.iscoroutinefunction(api_upload_document)
