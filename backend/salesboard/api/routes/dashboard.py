from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from salesboard.core.db import get_session
from salesboard.core.deps import get_capabilities, get_current_user
from salesboard.core.permissions import Capabilities
from salesboard.models import Profile
from salesboard.schemas.dashboard import PortfolioKpisOut
from salesboard.services import kpis as kpis_service

router = APIRouter(prefix="/dashboard", tags=["dashboard"])


@router.get("/kpis", response_model=PortfolioKpisOut)
async def dashboard_kpis(
    session: AsyncSession = Depends(get_session),
    user: Profile = Depends(get_current_user),
    caps: Capabilities = Depends(get_capabilities),
):
    """Company-wide figures for administrators, team figures for managers."""

    return await kpis_service.dashboard_kpis(session, user, caps)
