from datetime import datetime
from enum import Enum
from typing import Optional
from pydantic import BaseModel, ConfigDict


class NotificationType(str, Enum):
    LIKE = "like"


class Notification(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    user_id: str  # recipient
    type: NotificationType
    story_id: Optional[str] = None
    read: bool = False
    created_at: datetime
