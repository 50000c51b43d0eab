"""
Workflow Schemas

Pydantic models for file workflow instances
"""

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from efiling.schemas.base import EntityId


class WorkflowCreate(BaseModel):
    """Start a workflow on a file; accepts camelCase or snake_case keys"""

    file_id: EntityId = Field(..., alias="fileId")
    template_id: EntityId = Field(..., alias="templateId")
    created_by: Optional[EntityId] = Field(None, alias="createdBy")
    current_assignee_id: Optional[EntityId] = Field(None, alias="currentAssigneeId")

    model_config = ConfigDict(populate_by_name=True)


class SlaStatus(BaseModel):
    status: str
    deadline: Optional[datetime] = None
    remaining_hours: Optional[float] = None
    breached: bool = False


class WorkflowSummary(BaseModel):
    id: str
    file_id: str
    file_number: Optional[str] = None
    subject: Optional[str] = None
    template_id: str
    template_name: Optional[str] = None
    current_stage_id: Optional[str] = None
    current_stage_name: Optional[str] = None
    current_stage_order: Optional[int] = None
    current_assignee_id: Optional[str] = None
    current_assignee_name: Optional[str] = None
    workflow_status: str
    sla_deadline: Optional[datetime] = None
    sla_breached: bool = False
    sla: SlaStatus
    started_at: datetime
    completed_at: Optional[datetime] = None
    created_by: Optional[str] = None
    version: int


class WorkflowStageInfo(BaseModel):
    id: str
    stage_name: str
    stage_code: Optional[str] = None
    stage_order: int
    role_group_id: Optional[str] = None
    role_group_code: Optional[str] = None
    sla_hours: Optional[int] = None
    is_active: bool


class WorkflowActionInfo(BaseModel):
    id: str
    action_type: str
    from_stage_id: Optional[str] = None
    to_stage_id: Optional[str] = None
    performed_by: Optional[str] = None
    performer_name: Optional[str] = None
    performed_at: datetime
    sla_breached: bool
    action_data: Optional[Dict[str, Any]] = None


class WorkflowDetail(WorkflowSummary):
    stages: List[WorkflowStageInfo] = Field(default_factory=list)
    actions: List[WorkflowActionInfo] = Field(default_factory=list)


class WorkflowListResponse(BaseModel):
    workflows: List[WorkflowSummary]
    total: int
    limit: int
    offset: int
