from datetime import datetime
from decimal import Decimal
from typing import Optional

from sqlalchemy import DateTime, Float, ForeignKey, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column

from salesboard.models._ids import new_id
from salesboard.models.base import Base


class Account(Base):
    __tablename__ = "accounts"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    name: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    city: Mapped[Optional[str]] = mapped_column(String(100))
    state: Mapped[Optional[str]] = mapped_column(String(100))
    country: Mapped[Optional[str]] = mapped_column(String(100))
    lat: Mapped[Optional[float]] = mapped_column(Float)
    lng: Mapped[Optional[float]] = mapped_column(Float)
    industry: Mapped[Optional[str]] = mapped_column(String(255))
    size: Mapped[Optional[str]] = mapped_column(String(16))
    tier: Mapped[Optional[str]] = mapped_column(String(32))
    type: Mapped[Optional[str]] = mapped_column(String(64))
    current_division: Mapped[Optional[str]] = mapped_column(String(16))
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=datetime.now)


class AccountRevenue(Base):
    __tablename__ = "account_revenues"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    account_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("accounts.id"), unique=True, nullable=False
    )
    revenue_esg: Mapped[Optional[Decimal]] = mapped_column(Numeric(18, 2))
    revenue_gdt: Mapped[Optional[Decimal]] = mapped_column(Numeric(18, 2))
    revenue_gvc: Mapped[Optional[Decimal]] = mapped_column(Numeric(18, 2))
    revenue_msg_us: Mapped[Optional[Decimal]] = mapped_column(Numeric(18, 2))
