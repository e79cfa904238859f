from datetime import datetime
from typing import Optional

from sqlalchemy import Boolean, DateTime, Float, ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from salesboard.domain.health import SENIOR_TENURE_MONTHS
from salesboard.models._ids import new_id
from salesboard.models.base import Base


class Seller(Base):
    __tablename__ = "sellers"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    division: Mapped[Optional[str]] = mapped_column(String(16))
    size: Mapped[Optional[str]] = mapped_column(String(16))  # enterprise / midmarket / no_data
    industry_specialty: Mapped[Optional[str]] = mapped_column(String(255))
    city: Mapped[Optional[str]] = mapped_column(String(100))
    state: Mapped[Optional[str]] = mapped_column(String(100))
    country: Mapped[Optional[str]] = mapped_column(String(100))
    lat: Mapped[Optional[float]] = mapped_column(Float)
    lng: Mapped[Optional[float]] = mapped_column(Float)
    tenure_months: Mapped[Optional[int]] = mapped_column(Integer)
    seniority_type: Mapped[Optional[str]] = mapped_column(String(16))
    manager_id: Mapped[Optional[str]] = mapped_column(
        String(36), ForeignKey("managers.id"), index=True
    )
    book_finalized: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=datetime.now)

    @property
    def is_senior(self) -> bool:
        return (self.tenure_months or 0) > SENIOR_TENURE_MONTHS
