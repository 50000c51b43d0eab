"""
File action schemas
Requests and responses for assignment, timeline, comments and closing
"""

from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from efiling.schemas.base import EntityId


class AssignRequest(BaseModel):
    """Forward a file to another e-filing user"""

    to_user_id: EntityId = Field(..., description="E-filing user id of the new assignee")
    remarks: Optional[str] = Field(None, max_length=5000, description="Note stored on the movement")
    expected_stage_id: Optional[EntityId] = Field(
        None, description="Stage the caller last saw; a different current stage is a conflict"
    )


class AssignResponse(BaseModel):
    success: bool
    file_id: str
    assigned_to: str
    sla_deadline: Optional[datetime] = None
    stage_id: str
    stage_name: str


class TimelineEvent(BaseModel):
    type: str
    title: str
    timestamp: datetime
    meta: Dict[str, Any] = Field(default_factory=dict)


class TimelineResponse(BaseModel):
    file_id: str
    events: List[TimelineEvent]


class CommentCreate(BaseModel):
    comment: str = Field(..., min_length=1, max_length=5000)


class CommentResponse(BaseModel):
    id: str
    file_id: str
    user_id: str
    user_name: Optional[str] = None
    comment: str
    created_at: datetime


class ClosingStatus(str, Enum):
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"


class CloseRequest(BaseModel):
    status: ClosingStatus = ClosingStatus.COMPLETED
    remarks: Optional[str] = Field(None, max_length=5000)
