"""Rate limiting middleware — Redis-based fixed window per minute.

Learn: Each IP gets a counter key like "stormtask:rl:{ip}:{bucket}:{minute}".
Logging in and registering get a stricter limit (10/min by default): a
stateless token scheme has no lockout, so slowing down password guessing
happens here.

Redis is optional. The client lives on app.state.redis (set in the
lifespan); when it's missing or errors out, requests pass unlimited.
"""

import time

import structlog
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

logger = structlog.get_logger()

AUTH_PATHS = ("/api/v1/authenticate",)
REGISTER_PATH = "/api/v1/user"


def is_auth_request(request: Request) -> bool:
    path = request.url.path
    if path.startswith(AUTH_PATHS):
        return True
    return request.method == "POST" and path == REGISTER_PATH


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Redis-based rate limiting per IP per minute."""

    def __init__(self, app, default_rpm: int = 100, auth_rpm: int = 10):
        super().__init__(app)
        self.default_rpm = default_rpm
        self.auth_rpm = auth_rpm

    async def dispatch(self, request: Request, call_next) -> Response:
        redis = getattr(request.app.state, "redis", None)
        if redis is None:
            return await call_next(request)

        client_ip = request.client.host if request.client else "unknown"
        is_auth = is_auth_request(request)
        rpm = self.auth_rpm if is_auth else self.default_rpm

        window = int(time.time() // 60)
        bucket = "auth" if is_auth else "api"
        key = f"stormtask:rl:{client_ip}:{bucket}:{window}"

        try:
            count = await redis.incr(key)
            if count == 1:
                await redis.expire(key, 120)  # 2-min TTL for safety
        except Exception as e:
            logger.warning("rate_limit.redis_error", error=str(e))
            return await call_next(request)

        if count > rpm:
            logger.info("rate_limit.exceeded", client_ip=client_ip, bucket=bucket)
            return JSONResponse(
                status_code=429,
                content={"detail": "Rate limit exceeded. Try again later."},
                headers={"Retry-After": "60"},
            )

        response = await call_next(request)
        response.headers["X-RateLimit-Limit"] = str(rpm)
        response.headers["X-RateLimit-Remaining"] = str(max(0, rpm - count))
        return response
