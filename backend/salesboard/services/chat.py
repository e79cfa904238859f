"""Per-seller chat threads between managers and administrators.

Messages are stored and polled; there is no push delivery.
"""

from __future__ import annotations

from typing import Optional

from loguru import logger
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from salesboard.core.config import settings
from salesboard.core.errors import AuthorizationError, NotFoundError, ValidationError
from salesboard.core.permissions import Capabilities, ensure_can_manage_seller
from salesboard.models import Profile, SellerChatMessage
from salesboard.models.chat import CHAT_ROLE_ADMIN, CHAT_ROLE_MANAGER
from salesboard.models.profile import ROLE_MASTER
from salesboard.schemas.chat import ChatMessageOut, ChatStatsOut
from salesboard.services.sellers import get_scoped_seller, get_seller


def _clean(content: str) -> str:
    text = content.strip()
    if not text:
        raise ValidationError("Message content cannot be empty")
    if len(text) > settings.CHAT_MESSAGE_MAX_LENGTH:
        raise ValidationError(
            f"Message is longer than {settings.CHAT_MESSAGE_MAX_LENGTH} characters"
        )
    return text


def _out(message: SellerChatMessage, author: Optional[Profile]) -> ChatMessageOut:
    out = ChatMessageOut.model_validate(message)
    out.user_name = author.name if author else "Unknown User"
    out.user_email = author.email if author else ""
    return out


async def list_messages(
    session: AsyncSession, user: Profile, caps: Capabilities, seller_id: str
) -> list[ChatMessageOut]:
    await get_scoped_seller(session, user, caps, seller_id)
    rows = await session.execute(
        select(SellerChatMessage, Profile)
        .outerjoin(Profile, Profile.id == SellerChatMessage.user_id)
        .where(SellerChatMessage.seller_id == seller_id)
        .order_by(SellerChatMessage.created_at.asc(), SellerChatMessage.id)
    )
    return [_out(message, author) for message, author in rows]


async def post_message(
    session: AsyncSession, user: Profile, caps: Capabilities, seller_id: str, content: str
) -> ChatMessageOut:
    seller = await get_scoped_seller(session, user, caps, seller_id)
    message = SellerChatMessage(
        seller_id=seller.id,
        user_id=user.id,
        role=CHAT_ROLE_ADMIN if user.role == ROLE_MASTER else CHAT_ROLE_MANAGER,
        content=_clean(content),
    )
    session.add(message)
    await session.commit()
    logger.bind(seller_id=seller.id, message_id=message.id).info("chat_message_posted")
    return _out(message, user)


async def _own_message(
    session: AsyncSession, user: Profile, caps: Capabilities, message_id: str
) -> SellerChatMessage:
    message = await session.get(SellerChatMessage, message_id)
    if message is None:
        raise NotFoundError(f"Message {message_id} not found")
    await ensure_can_manage_seller(session, user, caps, await get_seller(session, message.seller_id))
    if message.user_id != user.id and user.role != ROLE_MASTER:
        raise AuthorizationError("You can only change your own messages")
    return message


async def edit_message(
    session: AsyncSession, user: Profile, caps: Capabilities, message_id: str, content: str
) -> ChatMessageOut:
    message = await _own_message(session, user, caps, message_id)
    message.content = _clean(content)
    await session.commit()
    await session.refresh(message)
    author = await session.get(Profile, message.user_id)
    return _out(message, author)


async def delete_message(
    session: AsyncSession, user: Profile, caps: Capabilities, message_id: str
) -> None:
    message = await _own_message(session, user, caps, message_id)
    await session.delete(message)
    await session.commit()
    logger.bind(message_id=message_id).info("chat_message_deleted")


async def chat_stats(
    session: AsyncSession, user: Profile, caps: Capabilities, seller_id: str
) -> ChatStatsOut:
    await get_scoped_seller(session, user, caps, seller_id)
    total, users, last = (
        await session.execute(
            select(
                func.count(SellerChatMessage.id),
                func.count(func.distinct(SellerChatMessage.user_id)),
                func.max(SellerChatMessage.created_at),
            ).where(SellerChatMessage.seller_id == seller_id)
        )
    ).one()
    return ChatStatsOut(total_messages=total, unique_users=users, last_message_at=last)
