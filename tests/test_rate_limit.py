"""Tests for the Redis-backed request rate limiter."""

import pytest
from fakeredis import aioredis

from app.core import redis_client
from app.core.config import settings
from app.core.deps import auth_rate_limiter
from app.core.redis_client import RedisService

OTP_REQUEST = {"name": "Alice", "email": "a@example.com"}


@pytest.fixture
def fake_redis():
    return aioredis.FakeRedis(decode_responses=True)


@pytest.fixture
def limited(monkeypatch, fake_redis):
    monkeypatch.setattr(settings, "RATE_LIMIT_ENABLED", True)
    monkeypatch.setattr(auth_rate_limiter, "service", RedisService(fake_redis))
    monkeypatch.setattr(auth_rate_limiter, "max_requests", 2)
    return fake_redis


@pytest.mark.asyncio
async def test_requests_over_the_limit_are_rejected(client, limited):
    responses = [await client.post("/api/v1/otp", json=OTP_REQUEST) for _ in range(3)]

    assert [r.status_code for r in responses] == [200, 200, 429]
    assert responses[-1].json()["detail"] == "Too many requests, please try again later."


@pytest.mark.asyncio
async def test_counter_expires_with_the_window(client, limited):
    await client.post("/api/v1/otp", json=OTP_REQUEST)

    keys = await limited.keys("rate_limit:auth:*")
    assert len(keys) == 1
    ttl = await limited.ttl(keys[0])
    assert 0 < ttl <= settings.RATE_LIMIT_WINDOW_SECONDS


@pytest.mark.asyncio
async def test_scopes_are_counted_separately(client, alice, limited):
    await client.post("/api/v1/otp", json=OTP_REQUEST)
    await client.post("/api/v1/otp", json=OTP_REQUEST)

    # the auth scope is exhausted, appliance routes are not
    response = await client.get("/api/v1/appliances", headers=alice)
    assert response.status_code == 200


@pytest.mark.asyncio
async def test_unavailable_redis_does_not_block(client, monkeypatch):
    monkeypatch.setattr(settings, "RATE_LIMIT_ENABLED", True)
    monkeypatch.setattr(redis_client, "redis_client", None)
    monkeypatch.setattr(auth_rate_limiter, "service", RedisService())
    monkeypatch.setattr(auth_rate_limiter, "max_requests", 1)

    responses = [await client.post("/api/v1/otp", json=OTP_REQUEST) for _ in range(3)]

    assert all(r.status_code == 200 for r in responses)


@pytest.mark.asyncio
async def test_service_follows_the_shared_connection(monkeypatch, fake_redis, caplog):
    service = RedisService()
    monkeypatch.setattr(redis_client, "redis_client", None)

    with caplog.at_level("ERROR", logger="app.core.redis_client"):
        assert await service.increment_window("rate_limit:test:1", 60) is None
    assert [r for r in caplog.records if r.levelname == "ERROR"] == []

    # a later init_redis installs a new shared client
    monkeypatch.setattr(redis_client, "redis_client", fake_redis)

    assert await service.increment_window("rate_limit:test:1", 60) == 1
    assert await service.increment_window("rate_limit:test:1", 60) == 2
