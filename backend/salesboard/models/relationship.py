from datetime import datetime
from decimal import Decimal
from typing import Optional

from sqlalchemy import DateTime, ForeignKey, Numeric, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from salesboard.models._ids import new_id
from salesboard.models.base import Base


class RelationshipMap(Base):
    """The single live (seller, account) assignment row."""

    __tablename__ = "relationship_maps"
    __table_args__ = (
        UniqueConstraint("seller_id", "account_id", name="uq_relationship_seller_account"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    seller_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("sellers.id"), nullable=False, index=True
    )
    account_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("accounts.id"), nullable=False, index=True
    )
    status: Mapped[str] = mapped_column(String(32), nullable=False)
    pct_esg: Mapped[Optional[Decimal]] = mapped_column(Numeric(5, 2))
    pct_gdt: Mapped[Optional[Decimal]] = mapped_column(Numeric(5, 2))
    pct_gvc: Mapped[Optional[Decimal]] = mapped_column(Numeric(5, 2))
    pct_msg_us: Mapped[Optional[Decimal]] = mapped_column(Numeric(5, 2))
    last_actor_user_id: Mapped[Optional[str]] = mapped_column(String(36))
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=datetime.now)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=datetime.now, onupdate=datetime.now
    )


class OriginalRelationship(Base):
    """Import-time snapshot; never written by user actions."""

    __tablename__ = "original_relationships"
    __table_args__ = (
        UniqueConstraint("seller_id", "account_id", name="uq_original_seller_account"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    seller_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("sellers.id"), nullable=False, index=True
    )
    account_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("accounts.id"), nullable=False, index=True
    )
    pct_esg: Mapped[Optional[Decimal]] = mapped_column(Numeric(5, 2))
    pct_gdt: Mapped[Optional[Decimal]] = mapped_column(Numeric(5, 2))
    pct_gvc: Mapped[Optional[Decimal]] = mapped_column(Numeric(5, 2))
    pct_msg_us: Mapped[Optional[Decimal]] = mapped_column(Numeric(5, 2))
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=datetime.now)
