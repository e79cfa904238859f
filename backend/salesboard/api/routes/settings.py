from typing import List

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from salesboard.core.audit import client_addr
from salesboard.core.db import get_session
from salesboard.core.deps import get_current_user
from salesboard.models import Profile
from salesboard.schemas.settings import ThresholdOut, ThresholdsUpdate
from salesboard.services import settings as settings_service

router = APIRouter(prefix="/settings", tags=["settings"])


@router.get("/thresholds", response_model=List[ThresholdOut])
async def get_thresholds(
    session: AsyncSession = Depends(get_session),
    user: Profile = Depends(get_current_user),
):
    return await settings_service.list_thresholds(session)


@router.put("/thresholds", response_model=List[ThresholdOut])
async def update_thresholds(
    payload: ThresholdsUpdate,
    request: Request,
    session: AsyncSession = Depends(get_session),
    user: Profile = Depends(get_current_user),
):
    return await settings_service.update_thresholds(
        session, user, payload.thresholds, remote_addr=client_addr(request)
    )
