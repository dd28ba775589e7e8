"""One service per backend resource, one method per endpoint.

Nothing here decides anything: build the call, hand back the parsed
envelope. Form payloads are validated against the same pydantic schemas the
backend uses, so a bad form raises ``pydantic.ValidationError`` before any
request is made.
"""

from __future__ import annotations

from pathlib import Path
from typing import IO, Any, Mapping, Type, TypeVar

from ..schemas.auth import LoginRequest, RegisterRequest
from ..schemas.common import ApiModel, Envelope
from ..schemas.document import DocumentUpload, VerifyRequest
from ..schemas.employee import EmployeeCreate, EmployeeUpdate, PasswordReset
from ..schemas.help_ticket import ReplyRequest, StatusRequest, TicketCreate
from ..schemas.location import CheckInRequest, LiveUpdateRequest
from ..schemas.payment_record import PaymentCreate, PaymentUpdate
from .http import ApiClient

FormT = TypeVar("FormT", bound=ApiModel)


def _form(model: Type[FormT], data: Mapping[str, Any] | FormT) -> dict[str, Any]:
    form = data if isinstance(data, model) else model.model_validate(data)
    return form.to_wire(exclude_unset=True)


def _params(**values: Any) -> dict[str, Any]:
    # Empty filter values mean "all" and are left off the query string.
    return {key: value for key, value in values.items() if value not in (None, "")}


class AuthService:
    def __init__(self, api: ApiClient) -> None:
        self.api = api

    async def login(self, credentials: Mapping[str, Any] | LoginRequest) -> Envelope:
        return await self.api.post("/auth/login", json=_form(LoginRequest, credentials))

    async def register(self, user_data: Mapping[str, Any] | RegisterRequest) -> Envelope:
        return await self.api.post("/auth/register", json=_form(RegisterRequest, user_data))

    async def get_profile(self) -> Envelope:
        return await self.api.get("/auth/me")

    async def logout(self) -> Envelope:
        return await self.api.get("/auth/logout")


class EmployeeService:
    def __init__(self, api: ApiClient) -> None:
        self.api = api

    async def list(self) -> Envelope:
        return await self.api.get("/employees")

    async def get(self, employee_id: int) -> Envelope:
        return await self.api.get(f"/employees/{employee_id}")

    async def create(self, employee: Mapping[str, Any] | EmployeeCreate) -> Envelope:
        return await self.api.post("/employees", json=_form(EmployeeCreate, employee))

    async def update(self, employee_id: int, changes: Mapping[str, Any] | EmployeeUpdate) -> Envelope:
        return await self.api.put(f"/employees/{employee_id}", json=_form(EmployeeUpdate, changes))

    async def delete(self, employee_id: int) -> Envelope:
        return await self.api.delete(f"/employees/{employee_id}")

    async def reset_password(self, employee_id: int, new_password: str) -> Envelope:
        body = _form(PasswordReset, {"new_password": new_password})
        return await self.api.put(f"/employees/{employee_id}/reset-password", json=body)


class DocumentService:
    def __init__(self, api: ApiClient) -> None:
        self.api = api

    async def list(self) -> Envelope:
        return await self.api.get("/documents")

    async def get(self, document_id: int) -> Envelope:
        return await self.api.get(f"/documents/{document_id}")

    async def download(self, document_id: int) -> bytes:
        return await self.api.download(f"/documents/{document_id}/file")

    async def upload(
        self,
        file: IO[bytes] | bytes,
        *,
        doc_type: str,
        filename: str | None = None,
        name: str | None = None,
        content_type: str = "application/octet-stream",
    ) -> Envelope:
        if filename is None:
            filename = Path(getattr(file, "name", "") or "").name
        form = DocumentUpload.model_validate({"type": doc_type, "name": name, "filename": filename})
        data = {"type": form.type}
        if form.name:
            data["name"] = form.name
        files = {"file": (form.filename, file, content_type)}
        return await self.api.post("/documents", data=data, files=files)

    async def verify(self, document_id: int, status: str) -> Envelope:
        return await self.api.put(f"/documents/{document_id}/verify", json=_form(VerifyRequest, {"status": status}))

    async def delete(self, document_id: int) -> Envelope:
        return await self.api.delete(f"/documents/{document_id}")


class LocationService:
    def __init__(self, api: ApiClient) -> None:
        self.api = api

    async def list(self) -> Envelope:
        return await self.api.get("/locations")

    async def get(self, location_id: int) -> Envelope:
        return await self.api.get(f"/locations/{location_id}")

    async def check_in(self, location: Mapping[str, Any] | CheckInRequest) -> Envelope:
        return await self.api.post("/locations/checkin", json=_form(CheckInRequest, location))

    async def check_out(self, location_id: int) -> Envelope:
        return await self.api.put(f"/locations/{location_id}/checkout")

    async def live_update(self, location_id: int, position: Mapping[str, Any] | LiveUpdateRequest) -> Envelope:
        return await self.api.put(f"/locations/{location_id}/live-update", json=_form(LiveUpdateRequest, position))

    async def delete(self, location_id: int) -> Envelope:
        return await self.api.delete(f"/locations/{location_id}")


class HelpCenterService:
    def __init__(self, api: ApiClient) -> None:
        self.api = api

    async def list(self, *, status: str | None = None, priority: str | None = None, category: str | None = None) -> Envelope:
        return await self.api.get("/help-center", params=_params(status=status, priority=priority, category=category))

    async def get(self, ticket_id: int) -> Envelope:
        return await self.api.get(f"/help-center/{ticket_id}")

    async def create(self, ticket: Mapping[str, Any] | TicketCreate) -> Envelope:
        return await self.api.post("/help-center", json=_form(TicketCreate, ticket))

    async def reply(self, ticket_id: int, message: str) -> Envelope:
        return await self.api.put(f"/help-center/{ticket_id}/reply", json=_form(ReplyRequest, {"message": message}))

    async def set_status(self, ticket_id: int, status: str) -> Envelope:
        return await self.api.put(f"/help-center/{ticket_id}/status", json=_form(StatusRequest, {"status": status}))

    async def delete(self, ticket_id: int) -> Envelope:
        return await self.api.delete(f"/help-center/{ticket_id}")

    async def stats(self) -> Envelope:
        return await self.api.get("/help-center/stats")


class PaymentRecordService:
    def __init__(self, api: ApiClient) -> None:
        self.api = api

    async def list(
        self,
        *,
        status: str | None = None,
        employee_id: int | None = None,
        start_date: str | None = None,
        end_date: str | None = None,
    ) -> Envelope:
        params = _params(status=status, employeeId=employee_id, startDate=start_date, endDate=end_date)
        return await self.api.get("/payment-records", params=params)

    async def get(self, record_id: int) -> Envelope:
        return await self.api.get(f"/payment-records/{record_id}")

    async def create(self, record: Mapping[str, Any] | PaymentCreate) -> Envelope:
        return await self.api.post("/payment-records", json=_form(PaymentCreate, record))

    async def update(self, record_id: int, changes: Mapping[str, Any] | PaymentUpdate) -> Envelope:
        return await self.api.put(f"/payment-records/{record_id}", json=_form(PaymentUpdate, changes))

    async def set_status(self, record_id: int, status: str) -> Envelope:
        return await self.update(record_id, {"payment_status": status})

    async def delete(self, record_id: int) -> Envelope:
        return await self.api.delete(f"/payment-records/{record_id}")

    async def stats(self) -> Envelope:
        return await self.api.get("/payment-records/stats")

    async def my_summary(self) -> Envelope:
        return await self.api.get("/payment-records/my-summary")


class Services:
    """All resource services bound to one pipeline."""

    def __init__(self, api: ApiClient) -> None:
        self.api = api
        self.auth = AuthService(api)
        self.employees = EmployeeService(api)
        self.documents = DocumentService(api)
        self.locations = LocationService(api)
        self.help_center = HelpCenterService(api)
        self.payment_records = PaymentRecordService(api)
