from datetime import datetime
from decimal import Decimal

from sqlalchemy import DateTime, Integer, Numeric, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from salesboard.models._ids import new_id
from salesboard.models.base import Base


class HealthThreshold(Base):
    __tablename__ = "health_thresholds"
    __table_args__ = (UniqueConstraint("size", "seniority", name="uq_threshold_size_seniority"),)

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    size: Mapped[str] = mapped_column(String(16), nullable=False)
    seniority: Mapped[str] = mapped_column(String(16), nullable=False)  # senior / junior
    min_revenue: Mapped[Decimal] = mapped_column(Numeric(18, 2), nullable=False)
    max_revenue: Mapped[Decimal] = mapped_column(Numeric(18, 2), nullable=False)
    max_accounts: Mapped[int] = mapped_column(Integer, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=datetime.now, onupdate=datetime.now
    )
