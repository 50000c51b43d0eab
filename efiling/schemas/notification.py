"""
Notification schemas
"""

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict


class NotificationResponse(BaseModel):
    id: str
    user_id: str
    file_id: Optional[str] = None
    type: str
    message: str
    priority: str
    action_required: bool
    is_read: bool
    read_at: Optional[datetime] = None
    notification_metadata: Optional[Dict[str, Any]] = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class NotificationListResponse(BaseModel):
    notifications: List[NotificationResponse]
    total: int
    unread_count: int
    limit: int
    offset: int
