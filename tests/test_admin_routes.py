from datetime import timedelta

import pytest

from app.core.config import settings
from app.models import Role, VisualPasswordType
from conftest import auth_headers, session_cookie

pytestmark = pytest.mark.anyio


async def _student_session(client, student) -> str:
    challenge = await client.post("/api/auth/student/challenge", json={"student_id": str(student.id)})
    resp = await client.post(
        "/api/auth/student/login",
        json={
            "student_id": str(student.id),
            "challenge_token": challenge.json()["challenge_token"],
            "visual_password": "cat",
        },
    )
    assert resp.status_code == 200
    client.cookies.clear()
    return session_cookie(resp)


async def test_admin_routes_require_a_session(client):
    resp = await client.post("/api/admin/sessions/sweep")
    assert resp.status_code == 401
    assert resp.json() == {"error": "Unauthorized"}


async def test_wrong_role_is_401_by_default(client, login_as):
    _, token = await login_as(Role.TEACHER)
    resp = await client.post("/api/admin/sessions/sweep", headers=auth_headers(token))
    assert resp.status_code == 401


async def test_wrong_role_is_403_when_distinguished(client, login_as, monkeypatch):
    monkeypatch.setattr(settings, "AUTH_DISTINGUISH_FORBIDDEN", True)
    _, token = await login_as(Role.TEACHER)

    resp = await client.post("/api/admin/sessions/sweep", headers=auth_headers(token))

    assert resp.status_code == 403
    assert resp.json() == {"error": "Forbidden"}


async def test_student_session_cannot_reach_staff_routes(client, make_student):
    student = await make_student()
    token = await _student_session(client, student)

    resp = await client.put(
        f"/api/students/{student.id}/visual-password",
        json={"type": "animal", "data": {"animal": "dog"}},
        headers=auth_headers(token),
    )
    assert resp.status_code == 401


async def test_sweep_removes_expired_rows(client, login_as, make_user, insert_session, session_row):
    _, admin_token = await login_as(Role.ADMIN)
    other = await make_user(email="other@example.com")
    stale = await insert_session(other.id, token="stale-token", expires_in=timedelta(minutes=-5))

    resp = await client.post("/api/admin/sessions/sweep", headers=auth_headers(admin_token))

    assert resp.status_code == 200
    assert resp.json() == {"expired_sessions": 1, "expired_challenges": 0}
    assert await session_row(stale) is None
    assert await session_row(admin_token) is not None


async def test_deactivating_a_user_revokes_their_sessions(client, login_as, make_user, session_row):
    _, admin_token = await login_as(Role.ADMIN)
    teacher, teacher_token = await login_as(Role.TEACHER)

    resp = await client.patch(
        f"/api/admin/users/{teacher.id}/active",
        json={"active": False},
        headers=auth_headers(admin_token),
    )

    assert resp.status_code == 200
    assert resp.json() == {"id": str(teacher.id), "active": False, "revoked_sessions": 1}
    assert await session_row(teacher_token) is None
    assert (await client.get("/api/auth/me", headers=auth_headers(teacher_token))).status_code == 401


async def test_admin_cannot_deactivate_themselves(client, login_as):
    admin, token = await login_as(Role.ADMIN)
    resp = await client.patch(
        f"/api/admin/users/{admin.id}/active",
        json={"active": False},
        headers=auth_headers(token),
    )
    assert resp.status_code == 400


async def test_deactivating_unknown_user_is_404(client, login_as):
    _, token = await login_as(Role.ADMIN)
    resp = await client.patch(
        "/api/admin/users/00000000-0000-0000-0000-000000000000/active",
        json={"active": False},
        headers=auth_headers(token),
    )
    assert resp.status_code == 404


async def test_teacher_sets_a_visual_password(client, login_as, make_student):
    student = await make_student(password_type=None, data={})
    _, token = await login_as(Role.TEACHER)

    resp = await client.put(
        f"/api/students/{student.id}/visual-password",
        json={"type": "object", "data": {"object": " Apple "}},
        headers=auth_headers(token),
    )
    assert resp.status_code == 200
    assert resp.json() == {"student_id": str(student.id), "type": "object", "configured": True}
    client.cookies.clear()

    challenge = await client.post("/api/auth/student/challenge", json={"student_id": str(student.id)})
    assert challenge.status_code == 200
    assert challenge.json()["type"] == "object"


async def test_visual_password_outside_catalog_is_rejected(client, login_as, make_student):
    student = await make_student()
    _, token = await login_as(Role.ADMIN)

    resp = await client.put(
        f"/api/students/{student.id}/visual-password",
        json={"type": "color_shape", "data": {"color": "teal", "shape": "circle"}},
        headers=auth_headers(token),
    )
    assert resp.status_code == 422


async def test_changing_password_invalidates_open_challenges(client, login_as, make_student):
    student = await make_student(password_type=VisualPasswordType.ANIMAL, data={"animal": "cat"})
    challenge = await client.post("/api/auth/student/challenge", json={"student_id": str(student.id)})
    old_token = challenge.json()["challenge_token"]

    _, token = await login_as(Role.TEACHER)
    await client.put(
        f"/api/students/{student.id}/visual-password",
        json={"type": "animal", "data": {"animal": "fox"}},
        headers=auth_headers(token),
    )
    client.cookies.clear()

    resp = await client.post(
        "/api/auth/student/login",
        json={"student_id": str(student.id), "challenge_token": old_token, "visual_password": "fox"},
    )
    assert resp.status_code == 400
