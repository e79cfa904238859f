from datetime import datetime
from decimal import Decimal
from typing import Optional

from sqlalchemy import DateTime, ForeignKey, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from salesboard.models._ids import new_id
from salesboard.models.base import Base

REQUEST_PENDING = "pending"
REQUEST_APPROVED = "approved"
REQUEST_REJECTED = "rejected"


class ApprovalRequest(Base):
    __tablename__ = "requests"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    type: Mapped[str] = mapped_column(String(16), nullable=False)  # pin / assign / unassign
    status: Mapped[str] = mapped_column(
        String(16), nullable=False, default=REQUEST_PENDING, index=True
    )
    requester_user_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("profiles.id"), nullable=False, index=True
    )
    seller_id: Mapped[str] = mapped_column(String(36), ForeignKey("sellers.id"), nullable=False)
    account_id: Mapped[str] = mapped_column(String(36), ForeignKey("accounts.id"), nullable=False)
    target_status: Mapped[str] = mapped_column(String(32), nullable=False)
    # requested division split, applied to the relationship on approval
    pct_esg: Mapped[Optional[Decimal]] = mapped_column(Numeric(5, 2))
    pct_gdt: Mapped[Optional[Decimal]] = mapped_column(Numeric(5, 2))
    pct_gvc: Mapped[Optional[Decimal]] = mapped_column(Numeric(5, 2))
    pct_msg_us: Mapped[Optional[Decimal]] = mapped_column(Numeric(5, 2))
    reason: Mapped[Optional[str]] = mapped_column(Text)
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=datetime.now)
    decided_at: Mapped[Optional[datetime]] = mapped_column(DateTime)
    decided_by: Mapped[Optional[str]] = mapped_column(String(36))
