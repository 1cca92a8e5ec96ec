import pytest
from sqlalchemy import select

from campus_voice.core.exceptions import BadRequestError
from campus_voice.core.security import create_refresh_token
from campus_voice.models.activity_log import ActivityLog
from campus_voice.models.user import User, UserRole
from campus_voice.schemas.auth import UserRegisterRequest
from campus_voice.services.auth import AuthService
from conftest import TEST_PASSWORD, auth_headers

REGISTER_BODY = {
    "firstName": "Amina",
    "lastName": "Okafor",
    "email": "Amina@CampusVoice.edu",
    "password": "hunter22",
    "department": "Physics",
    "yearOfStudy": 2,
}


@pytest.mark.asyncio
async def test_register_creates_student(client, db_session):
    response = await client.post(
        "/api/v1/auth/register",
        json=REGISTER_BODY,
        headers={"User-Agent": "pytest-client"},
    )

    assert response.status_code == 201
    body = response.json()
    assert body["email"] == "amina@campusvoice.edu"
    assert body["role"] == "STUDENT"
    assert body["yearOfStudy"] == 2
    assert "passwordHash" not in body

    logs = (await db_session.execute(select(ActivityLog))).scalars().all()
    assert [log.action for log in logs] == ["register"]
    assert logs[0].user_agent == "pytest-client"


@pytest.mark.asyncio
async def test_register_duplicate_email(client):
    await client.post("/api/v1/auth/register", json=REGISTER_BODY)

    response = await client.post("/api/v1/auth/register", json=REGISTER_BODY)

    assert response.status_code == 400
    assert response.json()["detail"] == "User already exists"


@pytest.mark.asyncio
async def test_register_rejects_short_password(client):
    response = await client.post(
        "/api/v1/auth/register", json={**REGISTER_BODY, "password": "abc"}
    )

    assert response.status_code == 422


@pytest.mark.asyncio
async def test_login_issues_tokens(client, db_session, student):
    response = await client.post(
        "/api/v1/auth/login",
        json={"email": "student@campusvoice.edu", "password": TEST_PASSWORD},
    )

    assert response.status_code == 200
    body = response.json()
    assert body["tokenType"] == "bearer"
    assert body["accessToken"] and body["refreshToken"]

    me = await client.get(
        "/api/v1/auth/me", headers={"Authorization": f"Bearer {body['accessToken']}"}
    )
    assert me.json()["email"] == "student@campusvoice.edu"

    stored = await db_session.get(User, student.id, populate_existing=True)
    assert stored.last_login is not None
    actions = (await db_session.execute(select(ActivityLog.action))).scalars().all()
    assert actions == ["login"]


@pytest.mark.asyncio
async def test_login_wrong_password(client, student):
    response = await client.post(
        "/api/v1/auth/login",
        json={"email": "student@campusvoice.edu", "password": "wrong-password"},
    )

    assert response.status_code == 401
    assert response.json()["detail"] == "Invalid email or password"


@pytest.mark.asyncio
async def test_login_inactive_account(client, db_session, student):
    student.is_active = False
    await db_session.commit()

    response = await client.post(
        "/api/v1/auth/login",
        json={"email": "student@campusvoice.edu", "password": TEST_PASSWORD},
    )

    assert response.status_code == 401


@pytest.mark.asyncio
async def test_refresh(client, admin):
    response = await client.post(
        "/api/v1/auth/refresh", json={"refreshToken": create_refresh_token(admin.id)}
    )

    assert response.status_code == 200
    me = await client.get(
        "/api/v1/auth/me",
        headers={"Authorization": f"Bearer {response.json()['accessToken']}"},
    )
    assert me.json()["role"] == UserRole.ADMIN.value


@pytest.mark.asyncio
async def test_refresh_rejects_access_token(client, student):
    access = auth_headers(student)["Authorization"].removeprefix("Bearer ")

    response = await client.post("/api/v1/auth/refresh", json={"refreshToken": access})

    assert response.status_code == 401


@pytest.mark.asyncio
async def test_me_rejects_refresh_token(client, student):
    response = await client.get(
        "/api/v1/auth/me",
        headers={"Authorization": f"Bearer {create_refresh_token(student.id)}"},
    )

    assert response.status_code == 401


@pytest.mark.asyncio
async def test_register_race_on_email_maps_to_bad_request(db_session, student, monkeypatch):
    # the lookup misses the account another request created in the meantime
    async def lookup_misses(db, email):
        return None

    monkeypatch.setattr(AuthService, "get_by_email", staticmethod(lookup_misses))
    data = UserRegisterRequest(
        first_name="John",
        last_name="Again",
        email="student@campusvoice.edu",
        password="hunter22",
    )

    with pytest.raises(BadRequestError) as exc:
        await AuthService.register(db_session, data)

    assert exc.value.detail == "User already exists"
    users = (await db_session.execute(select(User))).scalars().all()
    assert [u.email for u in users] == ["student@campusvoice.edu"]
    logs = (await db_session.execute(select(ActivityLog))).scalars().all()
    assert logs == []
