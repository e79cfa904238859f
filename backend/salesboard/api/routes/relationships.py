from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from salesboard.core.audit import client_addr
from salesboard.core.db import get_session
from salesboard.core.deps import get_capabilities, get_current_user
from salesboard.core.permissions import Capabilities
from salesboard.domain.revenue import Percentages
from salesboard.models import Profile
from salesboard.schemas.relationship import RelationshipOut, StatusChangeIn, StatusChangeOut
from salesboard.schemas.request import RequestOut
from salesboard.services import relationships as relationships_service

router = APIRouter(prefix="/relationships", tags=["relationships"])


@router.post("/status", response_model=StatusChangeOut)
async def change_status(
    payload: StatusChangeIn,
    request: Request,
    session: AsyncSession = Depends(get_session),
    user: Profile = Depends(get_current_user),
    caps: Capabilities = Depends(get_capabilities),
):
    result = await relationships_service.change_status(
        session,
        user,
        payload.seller_id,
        payload.account_id,
        payload.status,
        pcts=Percentages.of(payload),
        reason=payload.reason,
        caps=caps,
        remote_addr=client_addr(request),
    )
    return StatusChangeOut(
        outcome=result.outcome,
        relationship=(
            RelationshipOut.model_validate(result.relationship) if result.relationship else None
        ),
        request=RequestOut.model_validate(result.request) if result.request else None,
        warnings=result.warnings,
    )


@router.delete("/{seller_id}/{account_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_relationship(
    seller_id: str,
    account_id: str,
    request: Request,
    session: AsyncSession = Depends(get_session),
    user: Profile = Depends(get_current_user),
    caps: Capabilities = Depends(get_capabilities),
):
    await relationships_service.delete_relationship(
        session, user, seller_id, account_id, caps=caps, remote_addr=client_addr(request)
    )
