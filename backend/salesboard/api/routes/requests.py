from typing import Literal, Optional

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from salesboard.api.params import page_params
from salesboard.core.audit import client_addr
from salesboard.core.db import get_session
from salesboard.core.deps import get_capabilities, get_current_user
from salesboard.core.permissions import Capabilities
from salesboard.models import Profile
from salesboard.schemas.common import Page, PageParams
from salesboard.schemas.request import RequestOut
from salesboard.services import requests as requests_service

router = APIRouter(prefix="/requests", tags=["requests"])


@router.get("", response_model=Page[RequestOut])
async def list_requests(
    status: Optional[Literal["pending", "approved", "rejected"]] = None,
    page: PageParams = Depends(page_params),
    session: AsyncSession = Depends(get_session),
    user: Profile = Depends(get_current_user),
    caps: Capabilities = Depends(get_capabilities),
):
    items, total = await requests_service.list_requests(session, user, caps, page, status=status)
    return Page[RequestOut](
        items=[RequestOut.model_validate(item) for item in items],
        total=total,
        page=page.page,
        page_size=page.page_size,
    )


@router.post("/{request_id}/approve", response_model=RequestOut)
async def approve_request(
    request_id: str,
    request: Request,
    session: AsyncSession = Depends(get_session),
    user: Profile = Depends(get_current_user),
):
    return await requests_service.approve_request(
        session, user, request_id, remote_addr=client_addr(request)
    )


@router.post("/{request_id}/reject", response_model=RequestOut)
async def reject_request(
    request_id: str,
    request: Request,
    session: AsyncSession = Depends(get_session),
    user: Profile = Depends(get_current_user),
):
    return await requests_service.reject_request(
        session, user, request_id, remote_addr=client_addr(request)
    )
