from typing import List

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from salesboard.core.db import get_session
from salesboard.core.deps import get_capabilities, get_current_user
from salesboard.core.permissions import Capabilities
from salesboard.core.rate_limit import chat_post_rate, limiter
from salesboard.models import Profile
from salesboard.schemas.chat import ChatMessageIn, ChatMessageOut, ChatStatsOut
from salesboard.services import chat as chat_service

router = APIRouter(tags=["chat"])


@router.get("/sellers/{seller_id}/chat", response_model=List[ChatMessageOut])
async def list_messages(
    seller_id: str,
    session: AsyncSession = Depends(get_session),
    user: Profile = Depends(get_current_user),
    caps: Capabilities = Depends(get_capabilities),
):
    return await chat_service.list_messages(session, user, caps, seller_id)


@router.post(
    "/sellers/{seller_id}/chat",
    response_model=ChatMessageOut,
    status_code=status.HTTP_201_CREATED,
)
@limiter.limit(chat_post_rate)
async def post_message(
    seller_id: str,
    payload: ChatMessageIn,
    request: Request,
    session: AsyncSession = Depends(get_session),
    user: Profile = Depends(get_current_user),
    caps: Capabilities = Depends(get_capabilities),
):
    return await chat_service.post_message(session, user, caps, seller_id, payload.content)


@router.get("/sellers/{seller_id}/chat/stats", response_model=ChatStatsOut)
async def chat_stats(
    seller_id: str,
    session: AsyncSession = Depends(get_session),
    user: Profile = Depends(get_current_user),
    caps: Capabilities = Depends(get_capabilities),
):
    return await chat_service.chat_stats(session, user, caps, seller_id)


@router.patch("/chat/{message_id}", response_model=ChatMessageOut)
async def edit_message(
    message_id: str,
    payload: ChatMessageIn,
    session: AsyncSession = Depends(get_session),
    user: Profile = Depends(get_current_user),
    caps: Capabilities = Depends(get_capabilities),
):
    return await chat_service.edit_message(session, user, caps, message_id, payload.content)


@router.delete("/chat/{message_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_message(
    message_id: str,
    session: AsyncSession = Depends(get_session),
    user: Profile = Depends(get_current_user),
    caps: Capabilities = Depends(get_capabilities),
):
    await chat_service.delete_message(session, user, caps, message_id)
