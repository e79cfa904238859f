"""Password hashing and access tokens.

Bcrypt runs in a bounded worker pool (see ``salesboard.core.concurrency``).
Tokens are stateless HS256 JWTs scoped by issuer and audience; the ``type``
claim separates access tokens from anything else signed with the same key.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any, Dict

from jose import jwt
from passlib.context import CryptContext

from salesboard.core.concurrency import run_in_thread_security
from salesboard.core.config import settings

ALGORITHM = "HS256"
ACCESS_TOKEN_TYPE = "access"

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)


def get_password_hash(password: str) -> str:
    return pwd_context.hash(password)


async def verify_password_async(plain: str, hashed: str) -> bool:
    return await run_in_thread_security(verify_password, plain, hashed)


async def get_password_hash_async(plain: str) -> str:
    return await run_in_thread_security(get_password_hash, plain)


def access_token_ttl() -> timedelta:
    return timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES or 15)


def create_access_token(claims: Dict[str, Any]) -> str:
    """Sign ``claims`` with the registered claims filled in."""

    issued = datetime.now(timezone.utc)
    payload = {
        **claims,
        "exp": issued + access_token_ttl(),
        "iat": issued,
        "nbf": issued,
        "iss": settings.JWT_ISSUER,
        "aud": settings.JWT_AUDIENCE,
    }
    return jwt.encode(payload, settings.SECRET_KEY, algorithm=ALGORITHM)


def issue_access_token(user_id: str, role: str) -> str:
    return create_access_token({"sub": user_id, "role": role, "type": ACCESS_TOKEN_TYPE})


def decode_access_token(token: str) -> Dict[str, Any]:
    """Decode and validate a token; raises ``JWTError`` on failure."""

    return jwt.decode(
        token,
        settings.SECRET_KEY,
        algorithms=[ALGORITHM],
        audience=settings.JWT_AUDIENCE,
        issuer=settings.JWT_ISSUER,
    )
