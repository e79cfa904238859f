from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, field_validator

from salesboard.domain.statuses import CanonicalStatus, normalize_status


class RequestOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    type: str
    status: str
    requester_user_id: str
    seller_id: str
    account_id: str
    target_status: CanonicalStatus
    pct_esg: Optional[Decimal] = None
    pct_gdt: Optional[Decimal] = None
    pct_gvc: Optional[Decimal] = None
    pct_msg_us: Optional[Decimal] = None
    reason: Optional[str] = None
    created_at: datetime
    decided_at: Optional[datetime] = None
    decided_by: Optional[str] = None

    @field_validator("target_status", mode="before")
    @classmethod
    def _canonical(cls, value):
        return normalize_status(value)
