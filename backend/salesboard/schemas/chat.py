from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class ChatMessageIn(BaseModel):
    content: str = Field(min_length=1)


class ChatMessageOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    seller_id: str
    user_id: str
    role: str
    content: str
    created_at: datetime
    updated_at: datetime
    user_name: Optional[str] = None
    user_email: Optional[str] = None


class ChatStatsOut(BaseModel):
    total_messages: int
    unique_users: int
    last_message_at: Optional[datetime] = None
