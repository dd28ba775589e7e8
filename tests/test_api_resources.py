import asyncio

import pytest
from pydantic import ValidationError

from staffdesk.client.errors import ApiError, SessionExpired
from staffdesk.client.services import Services
from staffdesk.client.session import SessionStore

from conftest import ADMIN_PASSWORD, EMPLOYEE_PASSWORD


async def _signed_in(api, email, password):
    session = SessionStore(api)
    result = await session.login(email, password)
    assert result.success, result.error
    return Services(api), session


def test_employee_admin_crud(make_client, admin_user, employee_user):
    new_hire = {
        "name": "Nia New",
        "email": "nia@staffdesk.io",
        "password": "secret1",
        "department": "Sales",
        "position": "Rep",
        "phone_number": "555-0100",
        "address": "1 Main St",
    }

    async def scenario():
        async with make_client() as api:
            services, _ = await _signed_in(api, "ada@staffdesk.io", ADMIN_PASSWORD)
            created = await services.employees.create(new_hire)
            employee_id = created.data["id"]
            updated = await services.employees.update(employee_id, {"position": "Senior Rep", "status": "inactive"})
            await services.employees.reset_password(employee_id, "newsecret")
            with pytest.raises(ApiError) as self_delete:
                await services.employees.delete(admin_user.id)
            listed = await services.employees.list()
            await services.employees.delete(employee_id)
            remaining = await services.employees.list()
            return created, updated, self_delete.value, listed, remaining

    created, updated, self_delete, listed, remaining = asyncio.run(scenario())

    assert created.data["phoneNumber"] == "555-0100"
    assert updated.data["position"] == "Senior Rep"
    assert updated.data["status"] == "inactive"
    assert self_delete.status_code == 400
    assert listed.count == 3
    assert remaining.count == 2


def test_employee_forbidden_from_admin_routes_keeps_session(make_client, employee_user):
    async def scenario():
        async with make_client() as api:
            services, session = await _signed_in(api, "eli@staffdesk.io", EMPLOYEE_PASSWORD)
            with pytest.raises(ApiError) as excinfo:
                await services.employees.list()
            return excinfo.value, session

    error, session = asyncio.run(scenario())

    assert error.status_code == 403
    assert not isinstance(error, SessionExpired)
    assert session.is_authenticated


def test_employee_form_is_checked_before_sending(make_client, admin_user):
    async def scenario():
        async with make_client() as api:
            services, _ = await _signed_in(api, "ada@staffdesk.io", ADMIN_PASSWORD)
            with pytest.raises(ValidationError):
                await services.employees.create({"name": "Short", "email": "s@staffdesk.io", "password": "123"})
            return (await services.employees.list()).count

    assert asyncio.run(scenario()) == 1


def test_location_lifecycle(make_client, admin_user, employee_user):
    reading = {"latitude": 40.7128, "longitude": -74.006, "address": "NYC", "device": "cli", "accuracy": 8}

    async def scenario():
        async with make_client() as api, make_client() as admin_api:
            services, _ = await _signed_in(api, "eli@staffdesk.io", EMPLOYEE_PASSWORD)
            admin, _ = await _signed_in(admin_api, "ada@staffdesk.io", ADMIN_PASSWORD)
            checked_in = await services.locations.check_in(reading)
            location_id = checked_in.data["id"]
            with pytest.raises(ApiError) as twice:
                await services.locations.check_in(reading)
            moved = await services.locations.live_update(
                location_id, {"latitude": 40.7130, "longitude": -74.0070, "accuracy": 5}
            )
            with pytest.raises(ApiError) as not_owner:
                await admin.locations.live_update(location_id, {"latitude": 1, "longitude": 1})
            admin_view = await admin.locations.list()
            checked_out = await services.locations.check_out(location_id)
            await services.locations.delete(location_id)
            after_delete = await services.locations.list()
            return checked_in, twice.value, moved, not_owner.value, admin_view, checked_out, after_delete

    checked_in, twice, moved, not_owner, admin_view, checked_out, after_delete = asyncio.run(scenario())

    assert checked_in.data["status"] == "checked-in"
    assert twice.message == "You are already checked in"
    assert moved.data["latitude"] == 40.7130
    assert moved.data["lastUpdate"]
    assert not_owner.status_code == 403
    assert admin_view.data[0]["employeeName"] == "Eli Employee"
    assert checked_out.data["status"] == "checked-out"
    assert checked_out.data["checkOutTime"]
    assert after_delete.count == 0


def test_help_ticket_flow(make_client, admin_user, employee_user):
    async def scenario():
        async with make_client() as api, make_client() as admin_api:
            services, _ = await _signed_in(api, "eli@staffdesk.io", EMPLOYEE_PASSWORD)
            admin, _ = await _signed_in(admin_api, "ada@staffdesk.io", ADMIN_PASSWORD)
            ticket = await services.help_center.create(
                {"subject": "  VPN down ", "message": "Cannot connect", "priority": "high", "category": "technical"}
            )
            await services.help_center.create({"subject": "Payslip", "message": "Missing", "category": "payroll"})
            ticket_id = ticket.data["id"]
            with pytest.raises(ApiError) as forbidden:
                await services.help_center.reply(ticket_id, "me too")
            replied = await admin.help_center.reply(ticket_id, "Restarted the gateway")
            high = await services.help_center.list(priority="high")
            everything = await services.help_center.list(status="", priority=None)
            resolved = await admin.help_center.set_status(ticket_id, "resolved")
            stats = await admin.help_center.stats()
            return ticket, forbidden.value, replied, high, everything, resolved, stats

    ticket, forbidden, replied, high, everything, resolved, stats = asyncio.run(scenario())

    assert ticket.data["subject"] == "VPN down"
    assert ticket.data["status"] == "open"
    assert forbidden.status_code == 403
    assert replied.data["status"] == "in-progress"
    assert replied.data["adminReply"]["message"] == "Restarted the gateway"
    assert replied.data["adminReply"]["repliedBy"] == "Ada Admin"
    assert high.count == 1
    assert everything.count == 2
    assert resolved.data["status"] == "resolved"
    assert stats.data["total"] == 2
    assert stats.data["resolved"] == 1
    assert stats.data["open"] == 1
    assert stats.data["byCategory"]["payroll"] == 1


def test_payment_records_add_up_and_stay_private(make_client, admin_user, employee_user):
    record = {
        "employee_id": employee_user.id,
        "week_start_date": "2024-05-06",
        "week_end_date": "2024-05-12",
        "basic_salary": 800,
        "overtime": {"hours": 4, "rate": 25.5},
        "bonuses": [{"description": "Referral", "amount": 50}],
        "deductions": [{"description": "Tax", "amount": 120.25}],
        "payment_method": "bank_transfer",
    }

    async def scenario():
        async with make_client() as api, make_client() as admin_api:
            services, _ = await _signed_in(api, "eli@staffdesk.io", EMPLOYEE_PASSWORD)
            admin, _ = await _signed_in(admin_api, "ada@staffdesk.io", ADMIN_PASSWORD)
            created = await admin.payment_records.create(record)
            await admin.payment_records.create({**record, "employee_id": admin_user.id, "basic_salary": 1000})
            paid = await admin.payment_records.set_status(created.data["id"], "paid")
            mine = await services.payment_records.list(employee_id=admin_user.id)
            summary = await services.payment_records.my_summary()
            stats = await admin.payment_records.stats()
            with pytest.raises(ApiError) as forbidden:
                await services.payment_records.stats()
            ranged = await admin.payment_records.list(start_date="2024-05-06", end_date="2024-05-12")
            outside = await admin.payment_records.list(start_date="2024-06-01")
            return created, paid, mine, summary, stats, forbidden.value, ranged, outside

    created, paid, mine, summary, stats, forbidden, ranged, outside = asyncio.run(scenario())

    data = created.data
    assert data["overtime"]["amount"] == 102.0
    assert data["grossPay"] == 952.0
    assert data["netPay"] == 831.75
    assert data["payPeriod"] == "2024-05-06 - 2024-05-12"
    assert data["paymentStatus"] == "pending"
    assert paid.data["paymentStatus"] == "paid"
    assert paid.data["paymentDate"]
    assert mine.count == 1
    assert mine.data[0]["employeeId"] == data["employeeId"]
    assert summary.data["summary"]["paidPayments"] == 1
    assert summary.data["summary"]["totalPaidAmount"] == 831.75
    assert len(summary.data["recentPayments"]) == 1
    assert stats.data["totalRecords"] == 2
    assert stats.data["pendingCount"] == 1
    assert forbidden.status_code == 403
    assert ranged.count == 2
    assert outside.count == 0


def test_payment_period_is_validated_client_side(make_client, admin_user):
    async def scenario():
        async with make_client() as api:
            services, _ = await _signed_in(api, "ada@staffdesk.io", ADMIN_PASSWORD)
            with pytest.raises(ValidationError):
                await services.payment_records.create(
                    {
                        "employee_id": admin_user.id,
                        "week_start_date": "2024-05-12",
                        "week_end_date": "2024-05-06",
                        "basic_salary": 100,
                    }
                )

    asyncio.run(scenario())
