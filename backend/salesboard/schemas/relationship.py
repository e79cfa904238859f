from datetime import datetime
from decimal import Decimal
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from salesboard.domain.statuses import CanonicalStatus, normalize_status
from salesboard.schemas.request import RequestOut

Pct = Optional[Decimal]


class StatusChangeIn(BaseModel):
    seller_id: str = Field(min_length=1)
    account_id: str = Field(min_length=1)
    status: CanonicalStatus
    pct_esg: Pct = Field(default=None, ge=0, le=100)
    pct_gdt: Pct = Field(default=None, ge=0, le=100)
    pct_gvc: Pct = Field(default=None, ge=0, le=100)
    pct_msg_us: Pct = Field(default=None, ge=0, le=100)
    reason: Optional[str] = Field(default=None, max_length=2000)

    @field_validator("status", mode="before")
    @classmethod
    def _canonical(cls, value):
        return normalize_status(value) if isinstance(value, str) else value


class RelationshipOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    seller_id: str
    account_id: str
    status: CanonicalStatus
    pct_esg: Pct = None
    pct_gdt: Pct = None
    pct_gvc: Pct = None
    pct_msg_us: Pct = None
    last_actor_user_id: Optional[str] = None
    updated_at: Optional[datetime] = None

    @field_validator("status", mode="before")
    @classmethod
    def _canonical(cls, value):
        return normalize_status(value)


class StatusChangeOut(BaseModel):
    outcome: Literal["applied", "pending"]
    relationship: Optional[RelationshipOut] = None
    request: Optional[RequestOut] = None
    warnings: List[str] = []
