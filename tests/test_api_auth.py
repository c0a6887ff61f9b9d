"""HTTP tests for the /auth endpoints."""

from __future__ import annotations

import pytest

from sodipas_api.config import settings
from sodipas_api.main import app
from sodipas_api.routers.auth import get_email_service


class RecordingEmailService:
    """Stands in for SMTP; keeps every code it was asked to send."""

    def __init__(self) -> None:
        self.sent: list[tuple[str, str, str]] = []

    async def send_otp(self, to_email: str, user_name: str, code: str) -> bool:
        self.sent.append((to_email, user_name, code))
        return True


@pytest.fixture
def outbox(client):
    mailer = RecordingEmailService()
    app.dependency_overrides[get_email_service] = lambda: mailer
    return mailer.sent


@pytest.mark.asyncio
async def test_full_sign_in_flow(users, client, outbox):
    resp = await client.post("/auth/login", json={"email": "Gestionnaire@sodipas.sn"})
    assert resp.status_code == 200
    body = resp.json()
    assert body["success"] is True
    assert body["requiresOtp"] is True
    assert body["user"]["email"] == "gestionnaire@sodipas.sn"
    assert body["user"]["hangar"] == "Hangar 1"
    assert "_debug_otp" not in body

    [(to_email, _, code)] = outbox
    assert to_email == "gestionnaire@sodipas.sn"

    resp = await client.post(
        "/auth/verify-otp", json={"email": "gestionnaire@sodipas.sn", "otp": code}
    )
    assert resp.status_code == 200
    token = resp.json()["token"]
    assert resp.json()["user"]["role"] == "manager"

    headers = {"Authorization": f"Bearer {token}"}
    resp = await client.get("/auth/me", headers=headers)
    assert resp.status_code == 200
    assert resp.json()["user"]["name"] == "Moussa Diop"

    resp = await client.post("/auth/logout", headers=headers)
    assert resp.json() == {"success": True, "message": "Logged out"}

    resp = await client.get("/auth/me", headers=headers)
    assert resp.status_code == 401


@pytest.mark.asyncio
async def test_dev_mode_echoes_the_code(users, client, outbox, monkeypatch):
    monkeypatch.setattr(settings, "dev_mode", True)

    resp = await client.post("/auth/login", json={"email": "admin@sodipas.sn"})
    assert resp.json()["_debug_otp"] == outbox[-1][2]

    resp = await client.post("/auth/resend-otp", json={"email": "admin@sodipas.sn"})
    assert resp.json()["message"] == "A new code has been sent"
    assert resp.json()["_debug_otp"] == outbox[-1][2]


@pytest.mark.asyncio
async def test_unknown_email_is_401(users, client, outbox):
    resp = await client.post("/auth/login", json={"email": "stranger@example.com"})
    assert resp.status_code == 401
    assert resp.json()["success"] is False
    assert resp.json()["message"]
    assert resp.headers["www-authenticate"] == "Bearer"
    assert outbox == []


@pytest.mark.asyncio
async def test_login_without_email_is_400(users, client):
    resp = await client.post("/auth/login", json={})
    assert resp.status_code == 400
    assert resp.json()["success"] is False


@pytest.mark.asyncio
async def test_wrong_then_expired_code(users, client, outbox, clock):
    await client.post("/auth/login", json={"email": "admin@sodipas.sn"})
    code = outbox[-1][2]
    wrong = "100000" if code != "100000" else "100001"

    resp = await client.post("/auth/verify-otp", json={"email": "admin@sodipas.sn", "otp": wrong})
    assert resp.status_code == 401

    clock.advance(minutes=11)
    resp = await client.post("/auth/verify-otp", json={"email": "admin@sodipas.sn", "otp": code})
    assert resp.status_code == 401

    # the expired code was removed, so the next attempt has nothing pending
    clock.advance(minutes=-11)
    resp = await client.post("/auth/verify-otp", json={"email": "admin@sodipas.sn", "otp": code})
    assert resp.status_code == 401


@pytest.mark.asyncio
async def test_logout_always_succeeds(client):
    resp = await client.post("/auth/logout")
    assert resp.status_code == 200
    resp = await client.post("/auth/logout", headers={"Authorization": "Bearer nope"})
    assert resp.status_code == 200


@pytest.mark.asyncio
async def test_me_requires_a_valid_session(users, client, auth_headers, clock):
    assert (await client.get("/auth/me")).status_code == 401
    assert (await client.get("/auth/me", headers={"Authorization": "Bearer x"})).status_code == 401

    headers = await auth_headers(users["viewer"])
    resp = await client.get("/auth/me", headers=headers)
    assert resp.status_code == 200
    assert resp.json()["user"]["role"] == "viewer"

    clock.advance(hours=25)
    resp = await client.get("/auth/me", headers=headers)
    assert resp.status_code == 401


@pytest.mark.asyncio
async def test_health(client):
    resp = await client.get("/health")
    assert resp.status_code == 200
    assert resp.json()["status"] == "healthy"


@pytest.mark.asyncio
async def test_hangars_are_listed_without_auth(client):
    resp = await client.get("/hangars")
    assert resp.json() == settings.hangars
