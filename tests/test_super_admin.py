"""
Platform administration tests — schools, module entitlements, invites,
set-password activation and user status changes.
"""

import json
import logging

import pytest
from httpx import AsyncClient
from sqlalchemy import select

from schoolgate.core.config import settings
from schoolgate.core.enums import ModuleName, Role, UserStatus
from schoolgate.models.audit_log import AuditLog
from schoolgate.models.user import User

API = settings.API_V1_PREFIX


@pytest.fixture
async def root_headers(make_user, auth_headers):
    root = await make_user(Role.SUPER_ADMIN, email="root@example.com")
    return auth_headers(root)


# ── Schools & modules ───────────────────────────────────────────────
@pytest.mark.asyncio
async def test_create_school_enables_default_modules(async_client: AsyncClient, root_headers):
    resp = await async_client.post(
        f"{API}/super-admin/schools",
        json={"name": "Greenfield High", "code": " gfh-01 "},
        headers=root_headers,
    )

    assert resp.status_code == 201
    school = resp.json()
    assert school["code"] == "GFH-01"

    modules = await async_client.get(
        f"{API}/super-admin/schools/{school['id']}/modules", headers=root_headers
    )
    assert "student_management" in modules.json()["modules"]
    assert "audit_system" in modules.json()["modules"]


@pytest.mark.asyncio
async def test_duplicate_school_code_conflicts(async_client: AsyncClient, root_headers, make_school):
    await make_school("ALPHA")

    resp = await async_client.post(
        f"{API}/super-admin/schools", json={"name": "Alpha Two", "code": "alpha"}, headers=root_headers
    )

    assert resp.status_code == 409


@pytest.mark.asyncio
async def test_replace_modules(async_client: AsyncClient, root_headers, make_school):
    school = await make_school("ALPHA")

    resp = await async_client.put(
        f"{API}/super-admin/schools/{school.id}/modules",
        json={"modules": ["event_management", "library_management", "event_management"]},
        headers=root_headers,
    )

    assert resp.status_code == 200
    assert resp.json()["modules"] == ["event_management", "library_management"]
    read = await async_client.get(
        f"{API}/super-admin/schools/{school.id}/modules", headers=root_headers
    )
    assert read.json()["modules"] == ["event_management", "library_management"]


@pytest.mark.asyncio
async def test_disabling_module_takes_effect_immediately(
    async_client: AsyncClient, root_headers, make_school, make_user, auth_headers
):
    school = await make_school("ALPHA")
    admin = await make_user(Role.SCHOOL_ADMIN, school)
    url = f"{API}/schools/{school.id}/events"
    assert (await async_client.get(url, headers=auth_headers(admin))).status_code == 200

    await async_client.put(
        f"{API}/super-admin/schools/{school.id}/modules",
        json={"modules": [ModuleName.STUDENT_MANAGEMENT.value]},
        headers=root_headers,
    )

    assert (await async_client.get(url, headers=auth_headers(admin))).status_code == 403


@pytest.mark.asyncio
async def test_super_admin_routes_reject_school_admin(
    async_client: AsyncClient, make_school, make_user, auth_headers
):
    school = await make_school("ALPHA")
    admin = await make_user(Role.SCHOOL_ADMIN, school)

    resp = await async_client.get(f"{API}/super-admin/schools", headers=auth_headers(admin))

    assert resp.status_code == 403
    assert resp.json()["message"] == "Super admin privileges required"


# ── Invite → set-password ───────────────────────────────────────────
@pytest.mark.asyncio
async def test_invite_creates_pending_admin_and_mails_link(
    async_client: AsyncClient, root_headers, make_school, session_factory, caplog
):
    school = await make_school("ALPHA")

    with caplog.at_level(logging.INFO, logger="schoolgate.core.mailer"):
        resp = await async_client.post(
            f"{API}/super-admin/schools/{school.id}/invite",
            json={"email": "Principal@Alpha.edu", "firstName": "Ada"},
            headers=root_headers,
        )

    assert resp.status_code == 200
    data = resp.json()
    assert data["email"] == "principal@alpha.edu"
    assert data["inviteEmailSent"] is True
    assert "/invite/set-password?token=" in caplog.text

    async with session_factory() as session:
        user = await session.scalar(select(User).where(User.id == data["userId"]))
    assert user.status == UserStatus.PENDING.value
    assert user.role == Role.SCHOOL_ADMIN.value
    assert user.school_id == school.id


@pytest.mark.asyncio
async def test_invite_existing_active_user_conflicts(
    async_client: AsyncClient, root_headers, make_school, make_user
):
    school = await make_school("ALPHA")
    await make_user(Role.TEACHER, school, email="busy@alpha.edu")

    resp = await async_client.post(
        f"{API}/super-admin/schools/{school.id}/invite",
        json={"email": "busy@alpha.edu"},
        headers=root_headers,
    )

    assert resp.status_code == 409


@pytest.mark.asyncio
async def test_reinvite_reuses_pending_user(
    async_client: AsyncClient, root_headers, make_school
):
    school = await make_school("ALPHA")
    url = f"{API}/super-admin/schools/{school.id}/invite"

    first = await async_client.post(url, json={"email": "p@alpha.edu"}, headers=root_headers)
    second = await async_client.post(url, json={"email": "p@alpha.edu"}, headers=root_headers)

    assert first.status_code == second.status_code == 200
    assert first.json()["userId"] == second.json()["userId"]


@pytest.mark.asyncio
async def test_set_password_activates_exactly_once(
    async_client: AsyncClient, make_school, make_user, token_service, session_factory
):
    school = await make_school("ALPHA")
    pending = await make_user(Role.SCHOOL_ADMIN, school, UserStatus.PENDING)
    invite = token_service.issue_invite(pending.id, pending.email, pending.role, school.id)

    first = await async_client.post(
        f"{API}/auth/set-password", json={"token": invite, "password": "brand-new-pass"}
    )
    second = await async_client.post(
        f"{API}/auth/set-password", json={"token": invite, "password": "another-pass"}
    )

    assert first.status_code == 200
    assert first.json()["user"]["status"] == "active"
    assert second.status_code == 400
    assert second.json()["message"] == "Account is not pending activation"

    login = await async_client.post(
        f"{API}/auth/login",
        json={"email": pending.email, "password": "brand-new-pass", "schoolCode": "ALPHA"},
    )
    assert login.status_code == 200

    async with session_factory() as session:
        entries = (
            await session.execute(select(AuditLog).where(AuditLog.action == "set_password"))
        ).scalars().all()
    assert len(entries) == 1
    assert entries[0].resource_id == pending.id


@pytest.mark.asyncio
async def test_set_password_rejects_access_token(
    async_client: AsyncClient, make_school, make_user, token_service
):
    school = await make_school("ALPHA")
    pending = await make_user(Role.SCHOOL_ADMIN, school, UserStatus.PENDING)
    pair = token_service.issue_access_and_refresh(pending)

    resp = await async_client.post(
        f"{API}/auth/set-password",
        json={"token": pair.access_token, "password": "brand-new-pass"},
    )

    assert resp.status_code == 400
    assert resp.json()["message"] == "Invalid or expired invite token"


# ── Users ───────────────────────────────────────────────────────────
@pytest.mark.asyncio
async def test_create_user_requires_school_for_tenant_roles(
    async_client: AsyncClient, root_headers
):
    resp = await async_client.post(
        f"{API}/super-admin/users",
        json={"email": "x@example.com", "password": "password123", "firstName": "X", "role": "teacher"},
        headers=root_headers,
    )

    assert resp.status_code == 400


@pytest.mark.asyncio
async def test_create_and_list_users(async_client: AsyncClient, root_headers, make_school):
    school = await make_school("ALPHA")

    created = await async_client.post(
        f"{API}/super-admin/users",
        json={
            "email": "acc@alpha.edu",
            "password": "password123",
            "firstName": "Ann",
            "role": "accountant",
            "schoolId": school.id,
        },
        headers=root_headers,
    )
    listed = await async_client.get(
        f"{API}/super-admin/users", params={"schoolId": school.id}, headers=root_headers
    )

    assert created.status_code == 201
    assert [u["email"] for u in listed.json()] == ["acc@alpha.edu"]


@pytest.mark.asyncio
async def test_deactivate_user_is_audited(
    async_client: AsyncClient, root_headers, make_school, make_user, session_factory
):
    school = await make_school("ALPHA")
    teacher = await make_user(Role.TEACHER, school)

    resp = await async_client.post(
        f"{API}/super-admin/users/{teacher.id}/status",
        json={"status": "inactive"},
        headers=root_headers,
    )

    assert resp.status_code == 200
    assert resp.json()["status"] == "inactive"
    async with session_factory() as session:
        entry = await session.scalar(select(AuditLog).where(AuditLog.resource == "user"))
    assert entry.action == "deactivate"
    assert entry.resource_id == teacher.id
    assert entry.school_id == school.id


@pytest.mark.asyncio
async def test_invite_does_not_take_over_another_schools_pending_user(
    async_client: AsyncClient, root_headers, make_school, make_user, auth_headers, session_factory
):
    school_a = await make_school("ALPHA")
    school_b = await make_school("BETA")
    admin_a = await make_user(Role.SCHOOL_ADMIN, school_a)
    student = await async_client.post(
        f"{API}/schools/{school_a.id}/students",
        json={
            "userData": {"email": "kid@alpha.edu", "firstName": "Kid"},
            "studentData": {"admissionNumber": "A-001"},
        },
        headers=auth_headers(admin_a),
    )
    assert student.json()["user"]["status"] == "pending"

    resp = await async_client.post(
        f"{API}/super-admin/schools/{school_b.id}/invite",
        json={"email": "kid@alpha.edu"},
        headers=root_headers,
    )

    assert resp.status_code == 409
    async with session_factory() as session:
        user = await session.scalar(select(User).where(User.email == "kid@alpha.edu"))
    assert user.role == Role.STUDENT.value
    assert user.school_id == school_a.id


@pytest.mark.asyncio
async def test_reinvite_for_other_school_conflicts(
    async_client: AsyncClient, root_headers, make_school
):
    school_a = await make_school("ALPHA")
    school_b = await make_school("BETA")

    first = await async_client.post(
        f"{API}/super-admin/schools/{school_a.id}/invite",
        json={"email": "p@alpha.edu"},
        headers=root_headers,
    )
    second = await async_client.post(
        f"{API}/super-admin/schools/{school_b.id}/invite",
        json={"email": "p@alpha.edu"},
        headers=root_headers,
    )

    assert first.status_code == 200
    assert second.status_code == 409


@pytest.mark.asyncio
async def test_get_user_and_missing_user(
    async_client: AsyncClient, root_headers, make_school, make_user
):
    school = await make_school("ALPHA")
    teacher = await make_user(Role.TEACHER, school)

    found = await async_client.get(f"{API}/super-admin/users/{teacher.id}", headers=root_headers)
    missing = await async_client.get(f"{API}/super-admin/users/nobody", headers=root_headers)

    assert found.status_code == 200
    assert found.json()["email"] == teacher.email
    assert missing.status_code == 404


@pytest.mark.asyncio
async def test_update_user_profile_and_password(
    async_client: AsyncClient, root_headers, make_school, make_user, session_factory
):
    school = await make_school("ALPHA")
    teacher = await make_user(Role.TEACHER, school, email="old@alpha.edu")

    resp = await async_client.put(
        f"{API}/super-admin/users/{teacher.id}",
        json={"email": "New@Alpha.edu", "phone": "555-0101", "password": "fresh-pass-1"},
        headers=root_headers,
    )

    assert resp.status_code == 200
    assert resp.json()["email"] == "new@alpha.edu"
    assert resp.json()["role"] == "teacher"

    login = await async_client.post(
        f"{API}/auth/login",
        json={"email": "new@alpha.edu", "password": "fresh-pass-1", "schoolCode": "ALPHA"},
    )
    assert login.status_code == 200

    async with session_factory() as session:
        entry = await session.scalar(
            select(AuditLog).where(AuditLog.action == "update", AuditLog.resource == "user")
        )
    assert entry.school_id == school.id
    assert json.loads(entry.old_values)["email"] == "old@alpha.edu"
    assert json.loads(entry.new_values)["password"] == "<redacted>"


@pytest.mark.asyncio
async def test_update_user_email_taken_conflicts(
    async_client: AsyncClient, root_headers, make_school, make_user
):
    school = await make_school("ALPHA")
    await make_user(Role.TEACHER, school, email="taken@alpha.edu")
    other = await make_user(Role.TEACHER, school)

    resp = await async_client.put(
        f"{API}/super-admin/users/{other.id}",
        json={"email": "taken@alpha.edu"},
        headers=root_headers,
    )

    assert resp.status_code == 409
