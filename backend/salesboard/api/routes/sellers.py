from typing import Optional

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from salesboard.api.params import account_filters, page_params
from salesboard.core.audit import client_addr
from salesboard.core.db import get_session
from salesboard.core.deps import get_capabilities, get_current_user
from salesboard.core.permissions import Capabilities
from salesboard.models import Profile
from salesboard.schemas.common import AccountFilters, Page, PageParams
from salesboard.schemas.dashboard import SellerKpisOut
from salesboard.schemas.seller import CandidateOut, FinalizeIn, SellerBookOut, SellerOut
from salesboard.services import kpis as kpis_service
from salesboard.services import sellers as sellers_service

router = APIRouter(prefix="/sellers", tags=["sellers"])


@router.get("", response_model=Page[SellerOut])
async def list_sellers(
    division: Optional[str] = None,
    size: Optional[str] = None,
    q: Optional[str] = None,
    page: PageParams = Depends(page_params),
    session: AsyncSession = Depends(get_session),
    user: Profile = Depends(get_current_user),
    caps: Capabilities = Depends(get_capabilities),
):
    items, total = await sellers_service.list_sellers(
        session, user, caps, page, division=division, size=size, q=q
    )
    return Page[SellerOut](items=items, total=total, page=page.page, page_size=page.page_size)


@router.get("/{seller_id}", response_model=SellerOut)
async def get_seller(
    seller_id: str,
    session: AsyncSession = Depends(get_session),
    user: Profile = Depends(get_current_user),
    caps: Capabilities = Depends(get_capabilities),
):
    return await sellers_service.get_scoped_seller(session, user, caps, seller_id)


@router.get("/{seller_id}/book", response_model=SellerBookOut)
async def seller_book(
    seller_id: str,
    page: PageParams = Depends(page_params),
    session: AsyncSession = Depends(get_session),
    user: Profile = Depends(get_current_user),
    caps: Capabilities = Depends(get_capabilities),
):
    seller = await sellers_service.get_scoped_seller(session, user, caps, seller_id)
    return await sellers_service.seller_book(session, seller, page)


@router.get("/{seller_id}/candidates", response_model=Page[CandidateOut])
async def seller_candidates(
    seller_id: str,
    include_restricted: bool = False,
    available_only: bool = False,
    filters: AccountFilters = Depends(account_filters),
    page: PageParams = Depends(page_params),
    session: AsyncSession = Depends(get_session),
    user: Profile = Depends(get_current_user),
    caps: Capabilities = Depends(get_capabilities),
):
    seller = await sellers_service.get_scoped_seller(session, user, caps, seller_id)
    items, total = await sellers_service.candidates(
        session,
        seller,
        filters,
        page,
        include_restricted=include_restricted,
        available_only=available_only,
    )
    return Page[CandidateOut](items=items, total=total, page=page.page, page_size=page.page_size)


@router.put("/{seller_id}/finalized", response_model=SellerOut)
async def set_finalized(
    seller_id: str,
    payload: FinalizeIn,
    request: Request,
    session: AsyncSession = Depends(get_session),
    user: Profile = Depends(get_current_user),
    caps: Capabilities = Depends(get_capabilities),
):
    return await sellers_service.set_finalized(
        session, user, caps, seller_id, payload.finalized, remote_addr=client_addr(request)
    )


@router.get("/{seller_id}/kpis", response_model=SellerKpisOut)
async def seller_kpis(
    seller_id: str,
    session: AsyncSession = Depends(get_session),
    user: Profile = Depends(get_current_user),
    caps: Capabilities = Depends(get_capabilities),
):
    seller = await sellers_service.get_scoped_seller(session, user, caps, seller_id)
    return await kpis_service.seller_kpis(session, seller)
