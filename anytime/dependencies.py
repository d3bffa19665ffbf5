"""Dependency injection for FastAPI endpoints.

Handlers receive shared resources and the calling user through these
dependencies instead of reaching into module globals.

Usage in controllers:
    from anytime.dependencies import CurrentUser, OptionalBus

    @router.post("/things")
    async def create(user: CurrentUser, bus: OptionalBus):
        ...
"""

from typing import Annotated

import redis.asyncio as redis
from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from anytime import state
from anytime.auth import AuthUser, verify_access_token
from anytime.bus import EventBus
from anytime.config import LimitSettings, get_settings
from anytime.errors import UnauthorizedError

ACCESS_TOKEN_COOKIE = "access_token"

_bearer = HTTPBearer(auto_error=False)


def get_optional_redis() -> redis.Redis | None:
    return state.redis_client


def get_optional_event_bus() -> EventBus | None:
    return state.event_bus


def get_limits() -> LimitSettings:
    return get_settings().limits


def _extract_token(request: Request, credentials: HTTPAuthorizationCredentials | None) -> str | None:
    if credentials is not None and credentials.scheme.lower() == "bearer" and credentials.credentials:
        return credentials.credentials
    return request.cookies.get(ACCESS_TOKEN_COOKIE) or None


async def get_current_user(
    request: Request,
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(_bearer)],
    redis_client: Annotated[redis.Redis | None, Depends(get_optional_redis)],
) -> AuthUser:
    """The signed-in user behind the request.

    Raises:
        UnauthorizedError: If no token was sent or the provider rejects it.
    """
    token = _extract_token(request, credentials)
    if not token:
        raise UnauthorizedError()
    return await verify_access_token(token, redis_client)


OptionalBus = Annotated[EventBus | None, Depends(get_optional_event_bus)]
CurrentUser = Annotated[AuthUser, Depends(get_current_user)]
Limits = Annotated[LimitSettings, Depends(get_limits)]
