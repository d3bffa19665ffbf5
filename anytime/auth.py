"""
Session verification against the external auth provider.

Sign-up and login happen entirely at the provider. This service only turns
a bearer access token into a user id by asking the provider's ``/user``
endpoint, and caches the answer in Redis for a short while so every request
does not cost a round trip.
"""

import hashlib
import logging
from typing import Optional

import httpx
import redis.asyncio as redis
from pydantic import BaseModel, ValidationError

from anytime.config import get_settings
from anytime.errors import ExternalServiceError, ServiceUnavailableError, UnauthorizedError

logger = logging.getLogger("anytime.auth")

_CACHE_PREFIX = "auth:token:"


class AuthUser(BaseModel):
    id: str
    email: Optional[str] = None


def _cache_key(token: str) -> str:
    return f"{_CACHE_PREFIX}{hashlib.sha256(token.encode()).hexdigest()}"


async def _cached_user(redis_client: Optional[redis.Redis], token: str) -> Optional[AuthUser]:
    if redis_client is None:
        return None
    try:
        raw = await redis_client.get(_cache_key(token))
    except Exception as e:
        logger.warning("Auth cache lookup failed: %s", e)
        return None
    if not raw:
        return None
    try:
        return AuthUser.model_validate_json(raw)
    except ValidationError:
        return None


async def _cache_user(redis_client: Optional[redis.Redis], token: str, user: AuthUser, ttl: int) -> None:
    if redis_client is None or ttl <= 0:
        return
    try:
        await redis_client.setex(_cache_key(token), ttl, user.model_dump_json())
    except Exception as e:
        logger.warning("Auth cache write failed: %s", e)


async def fetch_user(token: str, transport: Optional[httpx.AsyncBaseTransport] = None) -> AuthUser:
    """Ask the auth provider who owns ``token``."""
    settings = get_settings().auth
    if not settings.configured:
        raise ServiceUnavailableError(detail="Authentication provider not configured")

    headers = {"Authorization": f"Bearer {token}"}
    if settings.api_key:
        headers["apikey"] = settings.api_key

    try:
        async with httpx.AsyncClient(timeout=settings.timeout_sec, transport=transport) as client:
            response = await client.get(f"{settings.url.rstrip('/')}/user", headers=headers)
    except httpx.HTTPError as e:
        logger.error("Auth provider request failed: %s", e)
        raise ExternalServiceError(detail="Authentication provider unavailable")

    if response.status_code in (401, 403):
        raise UnauthorizedError()
    if response.status_code != 200:
        logger.error("Auth provider returned HTTP %d", response.status_code)
        raise ExternalServiceError(detail="Authentication provider unavailable")

    try:
        payload = response.json()
        return AuthUser(id=str(payload["id"]), email=payload.get("email"))
    except (ValueError, KeyError, TypeError):
        logger.error("Auth provider returned an unexpected body")
        raise ExternalServiceError(detail="Authentication provider unavailable")


async def verify_access_token(token: str, redis_client: Optional[redis.Redis] = None) -> AuthUser:
    """Resolve a token to a user, consulting the Redis cache first."""
    user = await _cached_user(redis_client, token)
    if user is not None:
        return user
    user = await fetch_user(token)
    await _cache_user(redis_client, token, user, get_settings().auth.cache_ttl_sec)
    logger.debug("Verified session for user %s", user.id)
    return user
