from fastapi import Depends, Request
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from typing import Optional
import logging
import uuid

from app.core.config import settings
from app.core.exceptions import RateLimitExceeded, Unauthorized
from app.core.redis_client import RedisService, redis_service
from app.core.security import verify_token
from app.services.notifier import Notifier

logger = logging.getLogger(__name__)

# auto_error=False so a missing header is reported as 401, not 403
security = HTTPBearer(auto_error=False)


class AuthUser:
    """Identity asserted by a verified session credential"""
    def __init__(self, user_id: str, email: str):
        self.id = user_id
        self.email = email

    def __repr__(self) -> str:
        return f"<AuthUser(id={self.id}, email={self.email})>"


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security)
) -> AuthUser:
    """Authenticate the request from its bearer credential"""
    if credentials is None or not credentials.credentials:
        raise Unauthorized("Unauthorized")

    token_data = verify_token(credentials.credentials)
    if token_data is None:
        raise Unauthorized("Invalid token")

    try:
        uuid.UUID(token_data.user_id)
    except ValueError:
        raise Unauthorized("Invalid token")

    return AuthUser(user_id=token_data.user_id, email=token_data.email)


def get_notifier(request: Request) -> Notifier:
    """Email notifier installed on the application at startup"""
    notifier = getattr(request.app.state, "notifier", None)
    if notifier is None:
        raise RuntimeError("Notifier not configured")
    return notifier


class RateLimiter:
    """Fixed-window per-IP rate limiting dependency"""

    def __init__(self, scope: str, service: RedisService = redis_service):
        self.scope = scope
        self.service = service
        self.max_requests = settings.RATE_LIMIT_MAX_REQUESTS
        self.window_seconds = settings.RATE_LIMIT_WINDOW_SECONDS

    async def __call__(self, request: Request) -> None:
        if not settings.RATE_LIMIT_ENABLED:
            return

        client_ip = request.client.host if request.client else "unknown"
        key = f"rate_limit:{self.scope}:{client_ip}"

        # None means Redis is unavailable; requests are not blocked then
        current_count = await self.service.increment_window(key, self.window_seconds)
        if current_count is not None and current_count > self.max_requests:
            logger.warning(f"Rate limit exceeded for {client_ip} on {self.scope}")
            raise RateLimitExceeded()


# Rate limiter instances
auth_rate_limiter = RateLimiter("auth")
general_rate_limiter = RateLimiter("general")
