"""
Subject catalogue and class-subject assignment tests.
"""

import pytest
from httpx import AsyncClient

from schoolgate.core.config import settings
from schoolgate.core.enums import ModuleName, Role

API = settings.API_V1_PREFIX


@pytest.fixture
async def school_admin(make_school, make_user, auth_headers):
    school = await make_school("ALPHA")
    admin = await make_user(Role.SCHOOL_ADMIN, school)
    return school, auth_headers(admin)


async def _create_subject(client: AsyncClient, school_id: str, headers: dict, code: str = "math"):
    return await client.post(
        f"{API}/schools/{school_id}/subjects",
        json={"name": "Mathematics", "code": code},
        headers=headers,
    )


@pytest.mark.asyncio
async def test_subject_crud(async_client: AsyncClient, school_admin):
    school, headers = school_admin

    created = await _create_subject(async_client, school.id, headers)
    assert created.status_code == 201
    assert created.json()["code"] == "MATH"
    subject_id = created.json()["id"]

    updated = await async_client.put(
        f"{API}/schools/{school.id}/subjects/{subject_id}",
        json={"description": "Algebra and geometry"},
        headers=headers,
    )
    assert updated.json()["description"] == "Algebra and geometry"

    deleted = await async_client.delete(
        f"{API}/schools/{school.id}/subjects/{subject_id}", headers=headers
    )
    listed = await async_client.get(f"{API}/schools/{school.id}/subjects", headers=headers)

    assert deleted.status_code == 200
    assert listed.json() == []


@pytest.mark.asyncio
async def test_duplicate_subject_code_conflicts(async_client: AsyncClient, school_admin):
    school, headers = school_admin
    await _create_subject(async_client, school.id, headers)

    resp = await _create_subject(async_client, school.id, headers, code="MATH")

    assert resp.status_code == 409


@pytest.mark.asyncio
async def test_subjects_need_academics_module(
    async_client: AsyncClient, make_school, make_user, auth_headers
):
    modules = [m for m in ModuleName if m != ModuleName.ACADEMICS_MANAGEMENT]
    school = await make_school("ALPHA", modules=modules)
    admin = await make_user(Role.SCHOOL_ADMIN, school)

    resp = await async_client.get(
        f"{API}/schools/{school.id}/subjects", headers=auth_headers(admin)
    )

    assert resp.status_code == 403
    assert resp.json()["message"] == "Module academics_management is not enabled for this school"


@pytest.mark.asyncio
async def test_teacher_reads_but_cannot_create_subjects(
    async_client: AsyncClient, school_admin, make_user, auth_headers
):
    school, _headers = school_admin
    teacher = await make_user(Role.TEACHER, school)

    listed = await async_client.get(
        f"{API}/schools/{school.id}/subjects", headers=auth_headers(teacher)
    )
    created = await _create_subject(async_client, school.id, auth_headers(teacher))

    assert listed.status_code == 200
    assert created.status_code == 403


@pytest.mark.asyncio
async def test_assign_and_unassign_class_subject(async_client: AsyncClient, school_admin):
    school, headers = school_admin
    klass = await async_client.post(
        f"{API}/schools/{school.id}/classes",
        json={"name": "Grade 8", "grade": "8", "academicYear": "2026-2027"},
        headers=headers,
    )
    class_id = klass.json()["id"]
    subject = await _create_subject(async_client, school.id, headers)
    url = f"{API}/schools/{school.id}/classes/{class_id}/subjects"

    assigned = await async_client.post(
        url, json={"subjectId": subject.json()["id"]}, headers=headers
    )
    again = await async_client.post(
        url, json={"subjectId": subject.json()["id"]}, headers=headers
    )
    listed = await async_client.get(url, headers=headers)

    assert assigned.status_code == 201
    assert again.status_code == 409
    assert [a["subjectId"] for a in listed.json()] == [subject.json()["id"]]

    removed = await async_client.delete(f"{url}/{assigned.json()['id']}", headers=headers)
    assert removed.status_code == 200
    assert (await async_client.get(url, headers=headers)).json() == []


@pytest.mark.asyncio
async def test_cannot_assign_another_schools_subject(
    async_client: AsyncClient, school_admin, make_school, make_user, auth_headers
):
    school, headers = school_admin
    other = await make_school("BETA")
    other_admin = await make_user(Role.SCHOOL_ADMIN, other)
    foreign = await _create_subject(async_client, other.id, auth_headers(other_admin))
    klass = await async_client.post(
        f"{API}/schools/{school.id}/classes",
        json={"name": "Grade 9", "grade": "9", "academicYear": "2026-2027"},
        headers=headers,
    )

    resp = await async_client.post(
        f"{API}/schools/{school.id}/classes/{klass.json()['id']}/subjects",
        json={"subjectId": foreign.json()["id"]},
        headers=headers,
    )

    assert resp.status_code == 404
