from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Request, status
from loguru import logger
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from salesboard.core.audit import AuditAction, AuditEntity, client_addr, log_audit
from salesboard.core.db import get_session
from salesboard.core.deps import get_current_user
from salesboard.core.logging import user_id_ctx_var
from salesboard.core.rate_limit import limiter, login_rate
from salesboard.core.security import access_token_ttl, issue_access_token, verify_password_async
from salesboard.models import Profile
from salesboard.schemas.auth import LoginRequest, LoginResponse, ProfileOut

router = APIRouter(prefix="/auth", tags=["auth"])


async def _authenticate(session: AsyncSession, email: str, password: str) -> Optional[Profile]:
    profile = (
        await session.execute(select(Profile).where(Profile.email == email.strip().lower()))
    ).scalar_one_or_none()
    if profile is None or not profile.active:
        return None
    if not await verify_password_async(password, profile.password_hash):
        return None
    return profile


@router.post("/login", response_model=LoginResponse)
@limiter.limit(login_rate)
async def login(
    payload: LoginRequest,
    request: Request,
    session: AsyncSession = Depends(get_session),
):
    profile = await _authenticate(session, payload.email, payload.password)
    if profile is None:
        logger.bind(remote_addr=client_addr(request)).info("login_failed")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid credentials"
        )

    profile.last_login_at = datetime.now()
    await session.commit()

    request.state.user_id = profile.id
    user_id_ctx_var.set(profile.id)
    await log_audit(
        session,
        profile.id,
        AuditAction.LOGIN,
        AuditEntity.USER,
        profile.id,
        remote_addr=client_addr(request),
    )
    return LoginResponse(
        access_token=issue_access_token(profile.id, profile.role),
        expires_in=int(access_token_ttl().total_seconds()),
        user=ProfileOut.model_validate(profile),
    )


@router.post("/logout")
async def logout(
    request: Request,
    session: AsyncSession = Depends(get_session),
    user: Profile = Depends(get_current_user),
):
    # tokens are stateless; logout only leaves an audit entry
    await log_audit(
        session,
        user.id,
        AuditAction.LOGOUT,
        AuditEntity.USER,
        user.id,
        remote_addr=client_addr(request),
    )
    return {"ok": True}


@router.get("/me", response_model=ProfileOut)
async def me(user: Profile = Depends(get_current_user)):
    return user
