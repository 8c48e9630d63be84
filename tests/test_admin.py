"""Tests for the admin endpoints: guard, listings, approvals and stats."""

import pytest
from httpx import AsyncClient
from sqlalchemy import func, select

from app.api.v1.endpoints.admin import _round_tenths, _summarise_day
from app.core.dates import today_display_date
from app.models.attendance import AttendanceRecord
from app.models.user import ROLE_ADMIN, STATUS_PENDING, User

STORE = {
    "name": "Koramangala Dark Store",
    "address": "80 Feet Road",
    "city": "Bengaluru",
    "latitude": 12.9352,
    "longitude": 77.6245,
    "radius": 150,
}


async def _add_record(session_factory, **fields) -> AttendanceRecord:
    values = dict(
        date=today_display_date(),
        check_in_time="09:00:00",
        method="face",
        status="present",
    )
    values.update(fields)
    record = AttendanceRecord(**values)
    async with session_factory() as session:
        session.add(record)
        await session.commit()
    return record


# ── Guard ───────────────────────────────────────────────────────────
@pytest.mark.asyncio
async def test_admin_routes_require_identity(async_client: AsyncClient):
    resp = await async_client.get("/api/v1/admin/employees")
    assert resp.status_code == 401
    assert resp.json() == {"success": False, "message": "User ID required"}


@pytest.mark.asyncio
async def test_admin_routes_reject_employees(async_client: AsyncClient, make_user):
    emp = await make_user("worker")
    resp = await async_client.get(
        "/api/v1/admin/stats", headers={"X-User-Id": str(emp.id)}
    )
    assert resp.status_code == 403
    assert resp.json()["message"] == "Admin access required"


@pytest.mark.asyncio
async def test_unknown_caller_is_forbidden(async_client: AsyncClient):
    resp = await async_client.get("/api/v1/admin/stats", headers={"X-User-Id": "999"})
    assert resp.status_code == 403


@pytest.mark.asyncio
async def test_non_numeric_caller_id(async_client: AsyncClient):
    resp = await async_client.get("/api/v1/admin/stats", headers={"X-User-Id": "abc"})
    assert resp.status_code == 401


# ── Listings ────────────────────────────────────────────────────────
@pytest.mark.asyncio
async def test_list_employees_excludes_admins(
    async_client: AsyncClient, make_user, admin_headers
):
    await make_user("zed", name="Zed")
    await make_user("amy", name="Amy")
    resp = await async_client.get("/api/v1/admin/employees", headers=admin_headers)
    assert resp.status_code == 200
    data = resp.json()
    assert data["count"] == 2
    assert [e["name"] for e in data["employees"]] == ["Amy", "Zed"]
    assert all("hashedPassword" not in e for e in data["employees"])


@pytest.mark.asyncio
async def test_list_all_users_admins_first(
    async_client: AsyncClient, make_user, admin_headers
):
    await make_user("amy", name="Amy")
    resp = await async_client.get("/api/v1/admin/employees/all", headers=admin_headers)
    users = resp.json()["users"]
    assert [u["role"] for u in users] == ["admin", "employee"]


@pytest.mark.asyncio
async def test_pending_users_newest_first(
    async_client: AsyncClient, make_user, admin_headers
):
    await make_user("first", account_status=STATUS_PENDING)
    await make_user("approved-one")
    await make_user("second", account_status=STATUS_PENDING)

    resp = await async_client.get("/api/v1/admin/pending-users", headers=admin_headers)
    assert resp.status_code == 200
    data = resp.json()
    assert data["count"] == 2
    assert [u["username"] for u in data["users"]] == ["second", "first"]


# ── Approval workflow ───────────────────────────────────────────────
@pytest.mark.asyncio
async def test_approve_then_login(async_client: AsyncClient, make_user, admin_headers):
    """An approved registration can log in straight away."""
    user = await make_user("newbie", name="Newbie", account_status=STATUS_PENDING)

    resp = await async_client.put(
        f"/api/v1/admin/users/{user.id}/approve", headers=admin_headers
    )
    assert resp.status_code == 200
    data = resp.json()
    assert data["message"] == "User Newbie has been approved"
    assert data["user"]["accountStatus"] == "approved"

    login = await async_client.post(
        "/api/v1/auth/login", json={"username": "newbie", "password": "secret123"}
    )
    assert login.status_code == 200


@pytest.mark.asyncio
async def test_approve_twice_is_400(async_client: AsyncClient, make_user, admin_headers):
    user = await make_user("already")
    resp = await async_client.put(
        f"/api/v1/admin/users/{user.id}/approve", headers=admin_headers
    )
    assert resp.status_code == 400
    assert resp.json()["message"] == "User is already approved"


@pytest.mark.asyncio
async def test_legacy_user_counts_as_approved(
    async_client: AsyncClient, make_user, admin_headers
):
    user = await make_user("legacy", account_status=None)
    resp = await async_client.put(
        f"/api/v1/admin/users/{user.id}/approve", headers=admin_headers
    )
    assert resp.status_code == 400


@pytest.mark.asyncio
async def test_reject_blocks_login(async_client: AsyncClient, make_user, admin_headers):
    user = await make_user("shady", account_status=STATUS_PENDING)
    resp = await async_client.put(
        f"/api/v1/admin/users/{user.id}/reject", headers=admin_headers
    )
    assert resp.status_code == 200
    assert resp.json()["user"]["accountStatus"] == "rejected"

    login = await async_client.post(
        "/api/v1/auth/login", json={"username": "shady", "password": "secret123"}
    )
    assert login.status_code == 403


@pytest.mark.asyncio
async def test_approve_unknown_user_is_404(async_client: AsyncClient, admin_headers):
    resp = await async_client.put("/api/v1/admin/users/4040/approve", headers=admin_headers)
    assert resp.status_code == 404


# ── Password reset ──────────────────────────────────────────────────
@pytest.mark.asyncio
@pytest.mark.parametrize("body", [{}, {"newPassword": ""}, {"newPassword": "12345"}])
async def test_reset_password_too_short(
    async_client: AsyncClient, make_user, admin_headers, body
):
    user = await make_user("forgetful")
    resp = await async_client.put(
        f"/api/v1/admin/users/{user.id}/reset-password", json=body, headers=admin_headers
    )
    assert resp.status_code == 400
    assert resp.json()["message"] == "Password must be at least 6 characters"


@pytest.mark.asyncio
async def test_reset_password_allows_new_login(
    async_client: AsyncClient, make_user, admin_headers
):
    user = await make_user("forgetful", name="Forgetful")
    resp = await async_client.put(
        f"/api/v1/admin/users/{user.id}/reset-password",
        json={"newPassword": "brand-new"},
        headers=admin_headers,
    )
    assert resp.status_code == 200
    assert resp.json()["user"] == {"id": user.id, "name": "Forgetful", "username": "forgetful"}

    old = await async_client.post(
        "/api/v1/auth/login", json={"username": "forgetful", "password": "secret123"}
    )
    new = await async_client.post(
        "/api/v1/auth/login", json={"username": "forgetful", "password": "brand-new"}
    )
    assert old.status_code == 400
    assert new.status_code == 200


# ── Store assignment ────────────────────────────────────────────────
@pytest.mark.asyncio
async def test_assign_store(async_client: AsyncClient, make_user, admin_headers):
    user = await make_user("picker")
    resp = await async_client.put(
        f"/api/v1/admin/employees/{user.id}/assign-store",
        json={"assignedStore": STORE},
        headers=admin_headers,
    )
    assert resp.status_code == 200
    assert resp.json()["user"]["assignedStore"] == STORE

    employees = (
        await async_client.get("/api/v1/admin/employees", headers=admin_headers)
    ).json()["employees"]
    assert employees[0]["assignedStore"]["city"] == "Bengaluru"

    login = await async_client.post(
        "/api/v1/auth/login", json={"username": "picker", "password": "secret123"}
    )
    assert login.json()["assignedStore"]["name"] == STORE["name"]


@pytest.mark.asyncio
async def test_assign_store_defaults_radius(
    async_client: AsyncClient, make_user, admin_headers
):
    user = await make_user("picker")
    store = {k: v for k, v in STORE.items() if k not in ("radius", "address")}
    resp = await async_client.put(
        f"/api/v1/admin/employees/{user.id}/assign-store",
        json={"assignedStore": store},
        headers=admin_headers,
    )
    assert resp.status_code == 200
    assigned = resp.json()["user"]["assignedStore"]
    assert assigned["radius"] == 100
    assert assigned["address"] == ""


@pytest.mark.asyncio
async def test_assign_store_requires_coordinates(
    async_client: AsyncClient, make_user, admin_headers
):
    user = await make_user("picker")
    store = {k: v for k, v in STORE.items() if k != "latitude"}
    resp = await async_client.put(
        f"/api/v1/admin/employees/{user.id}/assign-store",
        json={"assignedStore": store},
        headers=admin_headers,
    )
    assert resp.status_code == 400
    assert resp.json()["success"] is False


@pytest.mark.asyncio
async def test_assign_store_unknown_user(async_client: AsyncClient, admin_headers):
    resp = await async_client.put(
        "/api/v1/admin/employees/777/assign-store",
        json={"assignedStore": STORE},
        headers=admin_headers,
    )
    assert resp.status_code == 404


# ── Employee removal ────────────────────────────────────────────────
@pytest.mark.asyncio
async def test_delete_employee_cascades_attendance(
    async_client: AsyncClient, make_user, admin_headers, session_factory
):
    """Removing an employee also removes every one of their records."""
    emp = await make_user("leaver")
    other = await make_user("stayer")
    await _add_record(session_factory, user_id=emp.id)
    await _add_record(session_factory, user_id=emp.id, date="01/01/2026")
    await _add_record(session_factory, user_id=other.id)

    resp = await async_client.delete(f"/api/v1/admin/employees/{emp.id}", headers=admin_headers)
    assert resp.status_code == 200

    async with session_factory() as session:
        assert await session.get(User, emp.id) is None
        remaining = await session.execute(
            select(AttendanceRecord.user_id, func.count(AttendanceRecord.id))
            .group_by(AttendanceRecord.user_id)
        )
        assert dict(remaining.all()) == {other.id: 1}


@pytest.mark.asyncio
async def test_cannot_delete_self(async_client: AsyncClient, admin, admin_headers):
    resp = await async_client.delete(f"/api/v1/admin/employees/{admin.id}", headers=admin_headers)
    assert resp.status_code == 400
    assert resp.json()["message"] == "Cannot delete yourself"


@pytest.mark.asyncio
async def test_cannot_delete_other_admin(async_client: AsyncClient, make_user, admin_headers):
    other = await make_user("deputy", role=ROLE_ADMIN)
    resp = await async_client.delete(f"/api/v1/admin/employees/{other.id}", headers=admin_headers)
    assert resp.status_code == 403


@pytest.mark.asyncio
async def test_delete_unknown_employee(async_client: AsyncClient, admin_headers):
    resp = await async_client.delete("/api/v1/admin/employees/31337", headers=admin_headers)
    assert resp.status_code == 404


# ── Attendance oversight ────────────────────────────────────────────
@pytest.mark.asyncio
async def test_attendance_listing_names_owners(
    async_client: AsyncClient, make_user, admin_headers, session_factory
):
    emp = await make_user("runner", name="Runner")
    await _add_record(session_factory, user_id=emp.id)
    await _add_record(session_factory, user_id=9999)  # owner since removed

    resp = await async_client.get("/api/v1/admin/attendance", headers=admin_headers)
    assert resp.status_code == 200
    data = resp.json()
    assert data["count"] == 2
    # newest first
    orphan, own = data["records"]
    assert (orphan["userName"], orphan["userUsername"]) == ("Unknown", "unknown")
    assert (own["userName"], own["userUsername"]) == ("Runner", "runner")


@pytest.mark.asyncio
async def test_attendance_listing_filters(
    async_client: AsyncClient, make_user, admin_headers, session_factory
):
    a = await make_user("a")
    b = await make_user("b")
    await _add_record(session_factory, user_id=a.id, date="01/02/2026")
    await _add_record(session_factory, user_id=a.id, date="02/02/2026")
    await _add_record(session_factory, user_id=b.id, date="01/02/2026")

    by_date = await async_client.get(
        "/api/v1/admin/attendance", params={"date": "01/02/2026"}, headers=admin_headers
    )
    assert by_date.json()["count"] == 2

    both = await async_client.get(
        "/api/v1/admin/attendance",
        params={"date": "01/02/2026", "userId": a.id},
        headers=admin_headers,
    )
    assert [r["userId"] for r in both.json()["records"]] == [a.id]


@pytest.mark.asyncio
async def test_user_attendance(
    async_client: AsyncClient, make_user, admin_headers, session_factory
):
    emp = await make_user("runner")
    await _add_record(session_factory, user_id=emp.id, date="01/02/2026")
    await _add_record(session_factory, user_id=emp.id, date="02/02/2026")

    resp = await async_client.get(f"/api/v1/admin/attendance/{emp.id}", headers=admin_headers)
    assert resp.status_code == 200
    data = resp.json()
    assert data["user"]["username"] == "runner"
    assert [r["date"] for r in data["records"]] == ["02/02/2026", "01/02/2026"]


@pytest.mark.asyncio
async def test_user_attendance_unknown_user(async_client: AsyncClient, admin_headers):
    resp = await async_client.get("/api/v1/admin/attendance/555", headers=admin_headers)
    assert resp.status_code == 404


@pytest.mark.asyncio
async def test_admin_delete_attendance(
    async_client: AsyncClient, make_user, admin_headers, session_factory
):
    emp = await make_user("runner")
    record = await _add_record(session_factory, user_id=emp.id)

    resp = await async_client.delete(
        f"/api/v1/admin/attendance/{record.id}", headers=admin_headers
    )
    assert resp.status_code == 200

    again = await async_client.delete(
        f"/api/v1/admin/attendance/{record.id}", headers=admin_headers
    )
    assert again.status_code == 404
    assert again.json()["message"] == "Attendance record not found"


# ── Dashboard ───────────────────────────────────────────────────────
@pytest.mark.asyncio
async def test_stats_for_today(
    async_client: AsyncClient, make_user, admin_headers, session_factory
):
    """One open and one closed record today: 2 in, 1 still in, 5.5 hours."""
    first = await make_user("first")
    second = await make_user("second")
    await _add_record(session_factory, user_id=first.id, hours_worked=2.5)
    await _add_record(
        session_factory, user_id=second.id, hours_worked=3.0, check_out_time="17:00:00"
    )
    # Other days are ignored
    await _add_record(
        session_factory, user_id=first.id, date="01/01/2020", hours_worked=8.0,
        check_out_time="17:00:00",
    )

    resp = await async_client.get("/api/v1/admin/stats", headers=admin_headers)
    assert resp.status_code == 200
    stats = resp.json()["stats"]
    assert stats == {
        "totalEmployees": 2,
        "checkedInToday": 2,
        "currentlyCheckedIn": 1,
        "totalHoursToday": 5.5,
        "date": today_display_date(),
    }


@pytest.mark.asyncio
async def test_stats_empty_day(async_client: AsyncClient, admin_headers):
    stats = (await async_client.get("/api/v1/admin/stats", headers=admin_headers)).json()["stats"]
    assert stats["totalEmployees"] == 0
    assert stats["checkedInToday"] == 0
    assert stats["totalHoursToday"] == 0


def test_round_tenths_goes_half_up():
    assert _round_tenths(2.25) == 2.3
    assert _round_tenths(5.5) == 5.5
    assert _round_tenths(1.04) == 1.0
    assert _round_tenths(0) == 0


def test_summarise_day_counts_distinct_users():
    records = [
        AttendanceRecord(user_id=1, hours_worked=1.2, check_out_time="12:00"),
        AttendanceRecord(user_id=1, hours_worked=0.0, check_out_time=None),
        AttendanceRecord(user_id=2, hours_worked=1.1, check_out_time=""),
    ]
    assert _summarise_day(records) == (2, 2, 2.3)


@pytest.mark.asyncio
@pytest.mark.parametrize("field, limit", [("name", 200), ("address", 500), ("city", 100)])
async def test_assign_store_rejects_overlong_text(
    async_client: AsyncClient, make_user, admin_headers, field, limit
):
    user = await make_user("picker")
    store = {**STORE, field: "x" * (limit + 1)}
    resp = await async_client.put(
        f"/api/v1/admin/employees/{user.id}/assign-store",
        json={"assignedStore": store},
        headers=admin_headers,
    )
    assert resp.status_code == 400
    assert field in resp.json()["message"]

    listing = (await async_client.get("/api/v1/admin/employees", headers=admin_headers)).json()
    assert listing["employees"][0]["assignedStore"] is None
