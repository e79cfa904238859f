"""Request dependencies: the authenticated profile and its capabilities."""

from typing import Optional

from fastapi import Depends, HTTPException, Request, status
from jose import JWTError
from sqlalchemy.ext.asyncio import AsyncSession

from salesboard.core.db import get_session
from salesboard.core.logging import user_id_ctx_var
from salesboard.core.permissions import Capabilities, capabilities_for
from salesboard.core.security import ACCESS_TOKEN_TYPE, decode_access_token
from salesboard.models import Profile


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def _bearer_token(request: Request) -> Optional[str]:
    scheme, _, token = request.headers.get("Authorization", "").partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


async def get_current_user(
    request: Request,
    session: AsyncSession = Depends(get_session),
) -> Profile:
    token = _bearer_token(request)
    if token is None:
        raise _unauthorized("Not authenticated")
    try:
        claims = decode_access_token(token)
    except JWTError:
        raise _unauthorized("Invalid token")
    if claims.get("type") != ACCESS_TOKEN_TYPE:
        raise _unauthorized("Invalid token type")

    profile = await session.get(Profile, claims.get("sub")) if claims.get("sub") else None
    if profile is None or not profile.active:
        raise _unauthorized("User inactive or not found")

    request.state.user_id = profile.id
    user_id_ctx_var.set(profile.id)
    return profile


async def get_capabilities(user: Profile = Depends(get_current_user)) -> Capabilities:
    return capabilities_for(user.role)
