from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from salesboard.models._ids import new_id
from salesboard.models.base import Base

CHAT_ROLE_MANAGER = "manager"
CHAT_ROLE_ADMIN = "admin"


class SellerChatMessage(Base):
    __tablename__ = "seller_chat_messages"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    seller_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("sellers.id"), nullable=False, index=True
    )
    user_id: Mapped[str] = mapped_column(String(36), ForeignKey("profiles.id"), nullable=False)
    role: Mapped[str] = mapped_column(String(16), nullable=False)  # manager / admin
    content: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=datetime.now)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=datetime.now, onupdate=datetime.now
    )
