from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from salesboard.api.params import account_filters, page_params
from salesboard.core.db import get_session
from salesboard.core.deps import get_current_user
from salesboard.models import Profile
from salesboard.schemas.account import AccountFilterOptions, AccountOut
from salesboard.schemas.common import AccountFilters, Page, PageParams
from salesboard.services import accounts as accounts_service

router = APIRouter(prefix="/accounts", tags=["accounts"])


@router.get("", response_model=Page[AccountOut])
async def list_accounts(
    filters: AccountFilters = Depends(account_filters),
    page: PageParams = Depends(page_params),
    session: AsyncSession = Depends(get_session),
    user: Profile = Depends(get_current_user),
):
    items, total = await accounts_service.list_accounts(session, filters, page)
    return Page[AccountOut](items=items, total=total, page=page.page, page_size=page.page_size)


@router.get("/filters", response_model=AccountFilterOptions)
async def account_filter_options(
    session: AsyncSession = Depends(get_session),
    user: Profile = Depends(get_current_user),
):
    return await accounts_service.filter_options(session)


@router.get("/{account_id}", response_model=AccountOut)
async def get_account(
    account_id: str,
    session: AsyncSession = Depends(get_session),
    user: Profile = Depends(get_current_user),
):
    return await accounts_service.get_account_out(session, account_id)
