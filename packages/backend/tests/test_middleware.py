"""Tests for header middleware — security headers, request IDs, rate limits.

Learn: The lifespan never runs under ASGITransport, so app.state.redis
stays None and rate limiting is off unless a test installs a counter.
"""

import pytest


@pytest.mark.asyncio
async def test_security_headers_on_health(client):
    """Health endpoint returns security headers."""
    r = await client.get("/api/v1/health")
    assert r.status_code == 200
    assert r.headers["X-Content-Type-Options"] == "nosniff"
    assert r.headers["X-Frame-Options"] == "DENY"
    assert r.headers["Referrer-Policy"] == "strict-origin-when-cross-origin"
    assert r.headers["Cache-Control"] == "no-store"


@pytest.mark.asyncio
async def test_security_headers_on_errors(client):
    """401s carry the headers too."""
    r = await client.get("/api/v1/user")
    assert r.status_code == 401
    assert r.headers["X-Content-Type-Options"] == "nosniff"


@pytest.mark.asyncio
async def test_request_id_generated(client):
    """Each request gets a unique X-Request-ID header."""
    r1 = await client.get("/api/v1/health")
    r2 = await client.get("/api/v1/health")
    assert "X-Request-ID" in r1.headers
    assert "X-Request-ID" in r2.headers
    assert r1.headers["X-Request-ID"] != r2.headers["X-Request-ID"]


@pytest.mark.asyncio
async def test_request_id_propagated(client):
    """Incoming X-Request-ID is propagated through the response."""
    custom_id = "test-trace-12345"
    r = await client.get(
        "/api/v1/health",
        headers={"X-Request-ID": custom_id},
    )
    assert r.headers["X-Request-ID"] == custom_id


@pytest.mark.asyncio
async def test_no_hsts_on_http(client):
    """HSTS header is NOT set on HTTP connections (only HTTPS)."""
    r = await client.get("/api/v1/health")
    assert "Strict-Transport-Security" not in r.headers


# ─── Rate limiting ──────────────────────────────────────


class CountingRedis:
    """Just enough of redis.asyncio.Redis for the fixed-window counter."""

    def __init__(self, fail: bool = False):
        self.counts: dict[str, int] = {}
        self.fail = fail

    async def incr(self, key: str) -> int:
        if self.fail:
            raise ConnectionError("redis down")
        self.counts[key] = self.counts.get(key, 0) + 1
        return self.counts[key]

    async def expire(self, key: str, seconds: int) -> bool:
        return True


@pytest.mark.asyncio
async def test_rate_limit_headers(app, client):
    app.state.redis = CountingRedis()
    r = await client.get("/api/v1/health")
    assert r.headers["X-RateLimit-Limit"] == "100"
    assert r.headers["X-RateLimit-Remaining"] == "99"


@pytest.mark.asyncio
async def test_rate_limit_auth_bucket_exceeded(app, client):
    app.state.redis = CountingRedis()
    body = {"email": "nobody@example.com", "password": "nope"}
    for _ in range(10):
        r = await client.post("/api/v1/authenticate", json=body)
        assert r.status_code == 401

    r = await client.post("/api/v1/authenticate", json=body)
    assert r.status_code == 429
    assert r.headers["Retry-After"] == "60"

    # The general bucket is counted separately
    r = await client.get("/api/v1/health")
    assert r.status_code == 200


@pytest.mark.asyncio
async def test_rate_limit_skipped_when_redis_fails(app, client):
    app.state.redis = CountingRedis(fail=True)
    r = await client.get("/api/v1/health")
    assert r.status_code == 200
    assert "X-RateLimit-Limit" not in r.headers
