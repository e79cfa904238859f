from datetime import datetime
from typing import Any, Dict, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


class AuditLogOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    user_id: Optional[str] = None
    action: str
    entity: str
    entity_id: Optional[str] = None
    before: Optional[Dict[str, Any]] = None
    after: Optional[Dict[str, Any]] = None
    remote_addr: Optional[str] = None
    created_at: datetime


class AuditQuery(BaseModel):
    entity: Optional[str] = None
    entity_id: Optional[str] = None
    user_id: Optional[str] = None
    action: Optional[str] = None
    limit: int = Field(default=50, ge=1, le=500)
    offset: int = Field(default=0, ge=0)
    order: Literal["asc", "desc"] = "desc"


class AuditStatsOut(BaseModel):
    total_logs: int
    logs_by_action: Dict[str, int]
    logs_by_entity: Dict[str, int]
    logs_by_user: Dict[str, int]
