"""Integration tests for the OTP endpoints."""

import pytest

from conftest import sign_in


@pytest.mark.asyncio
async def test_request_otp_success(client, notifier):
    response = await client.post("/api/v1/otp", json={"name": "Alice", "email": "a@x.com"})

    assert response.status_code == 200
    assert response.json() == {"message": "OTP sent successfully"}
    assert notifier.sent[0]["to"] == "a@x.com"
    assert "otp" not in response.json()


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "payload",
    [
        {"name": "Alice", "email": "not-an-email"},
        {"name": "", "email": "a@x.com"},
        {"name": "   ", "email": "a@x.com"},
        {"email": "a@x.com"},
        {"name": "Alice"},
    ],
)
async def test_request_otp_rejects_invalid_input(client, notifier, payload):
    response = await client.post("/api/v1/otp", json=payload)

    assert response.status_code == 400
    assert response.json()["detail"]
    assert notifier.sent == []


@pytest.mark.asyncio
async def test_request_otp_notifier_failure_is_500(client, notifier):
    notifier.fail = True

    response = await client.post("/api/v1/otp", json={"name": "Alice", "email": "a@x.com"})

    assert response.status_code == 500
    assert response.json()["detail"] == "Failed to send OTP"


@pytest.mark.asyncio
async def test_verify_returns_credential_and_identity(client, notifier):
    body = await sign_in(client, notifier, "A@X.com", "Alice")

    assert body["token_type"] == "bearer"
    assert body["access_token"]
    assert body["user_id"]
    assert body["name"] == "Alice"
    assert body["email"] == "a@x.com"


@pytest.mark.asyncio
async def test_verify_twice_with_same_code_fails(client, notifier):
    await client.post("/api/v1/otp", json={"name": "Alice", "email": "a@x.com"})
    otp = notifier.last_otp("a@x.com")

    first = await client.post("/api/v1/otp/verify", json={"email": "a@x.com", "otp": otp})
    second = await client.post("/api/v1/otp/verify", json={"email": "a@x.com", "otp": otp})

    assert first.status_code == 200
    assert second.status_code == 400
    assert second.json()["detail"] == "Invalid or expired OTP"


@pytest.mark.asyncio
async def test_verify_unknown_email_is_404(client):
    response = await client.post("/api/v1/otp/verify", json={"email": "ghost@x.com", "otp": "1234"})

    assert response.status_code == 404
    assert response.json()["detail"] == "User not found"


@pytest.mark.asyncio
async def test_verify_rejects_short_otp(client):
    response = await client.post("/api/v1/otp/verify", json={"email": "a@x.com", "otp": "12"})

    assert response.status_code == 400


@pytest.mark.asyncio
async def test_health_endpoints(client):
    root = await client.get("/")
    health = await client.get("/api/health")

    assert root.status_code == 200
    assert "running" in root.json()["message"]
    assert health.json()["status"] == "healthy"
