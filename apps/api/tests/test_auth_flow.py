from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy.future import select

from models.user_session import UserSession
from services.crypto import hash_password, verify_password
from services.session_token import encode_session_token


SIGNUP = {
    "username": "green_gina",
    "email": "Gina@Example.com",
    "password": "hunter22",
    "full_name": "Gina Green",
}


def _bearer(token):
    return {"Authorization": f"Bearer {token}"}


def test_password_hash_roundtrip():
    encoded = hash_password("s3cret-pass")
    assert encoded.startswith("pbkdf2_sha256$")
    assert verify_password("s3cret-pass", encoded) is True
    assert verify_password("wrong-pass", encoded) is False
    assert verify_password("s3cret-pass", "not-a-hash") is False


@pytest.mark.asyncio
async def test_signup_signin_me_logout(integration_client):
    signup_resp = await integration_client.post("/auth/signup", json=SIGNUP)
    assert signup_resp.status_code == 201
    signup = signup_resp.json()
    assert signup["success"] is True
    assert signup["user"]["email"] == "gina@example.com"
    assert signup["user"]["carbon_credits"] == 0
    assert "password_hash" not in signup["user"]

    expires_at = datetime.fromisoformat(signup["expires_at"])
    assert timedelta(days=6, hours=23) < expires_at - datetime.now(timezone.utc) <= timedelta(days=7)

    signin_resp = await integration_client.post(
        "/auth/signin",
        json={"email": "gina@example.com", "password": "hunter22"},
    )
    assert signin_resp.status_code == 200
    token = signin_resp.json()["token"]

    me_resp = await integration_client.get("/auth/me", headers=_bearer(token))
    assert me_resp.status_code == 200
    assert me_resp.json()["user"]["username"] == "green_gina"

    logout_resp = await integration_client.post("/auth/logout", headers=_bearer(token))
    assert logout_resp.status_code == 200

    revoked_resp = await integration_client.get("/auth/me", headers=_bearer(token))
    assert revoked_resp.status_code == 401
    assert revoked_resp.json()["error"] == "unauthorized"

    # The signup session is independent of the revoked one.
    still_valid = await integration_client.get("/auth/me", headers=_bearer(signup["token"]))
    assert still_valid.status_code == 200


@pytest.mark.asyncio
async def test_duplicate_signup_conflicts(integration_client):
    assert (await integration_client.post("/auth/signup", json=SIGNUP)).status_code == 201
    duplicate = await integration_client.post(
        "/auth/signup",
        json={**SIGNUP, "username": "another_name"},
    )
    assert duplicate.status_code == 409
    assert duplicate.json()["error"] == "conflict"


@pytest.mark.asyncio
async def test_signin_rejects_bad_password(integration_client):
    await integration_client.post("/auth/signup", json=SIGNUP)
    resp = await integration_client.post(
        "/auth/signin",
        json={"email": "gina@example.com", "password": "wrong-password"},
    )
    assert resp.status_code == 401
    assert resp.json() == {"success": False, "error": "unauthorized", "detail": "Invalid email or password"}


@pytest.mark.asyncio
async def test_signup_validation(integration_client):
    resp = await integration_client.post(
        "/auth/signup",
        json={"username": "x", "email": "not-an-email", "password": "123"},
    )
    assert resp.status_code == 422
    body = resp.json()
    assert body["success"] is False
    assert body["error"] == "invalid_input"


@pytest.mark.asyncio
async def test_missing_and_garbage_tokens(integration_client):
    missing = await integration_client.get("/dashboard/summary")
    assert missing.status_code == 401
    garbage = await integration_client.get("/dashboard/summary", headers=_bearer("garbage"))
    assert garbage.status_code == 401
    assert garbage.json()["error"] == "unauthorized"


@pytest.mark.asyncio
async def test_expired_session_is_rejected(integration_client, session_maker):
    signup = (await integration_client.post("/auth/signup", json=SIGNUP)).json()
    async with session_maker() as db:
        result = await db.execute(select(UserSession).where(UserSession.user_id == signup["user"]["id"]))
        session_row = result.scalars().first()
        session_row.expires_at = datetime.now(timezone.utc) - timedelta(minutes=1)
        await db.commit()
        session_id = session_row.id

    # Signature still valid, but the stored session has expired.
    token = encode_session_token(
        signup["user"]["id"],
        session_id,
        datetime.now(timezone.utc) + timedelta(days=1),
    )
    resp = await integration_client.get("/auth/me", headers=_bearer(token))
    assert resp.status_code == 401
