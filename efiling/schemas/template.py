"""
Workflow template schemas
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from efiling.schemas.base import EntityId


class StageCreate(BaseModel):
    stage_name: str = Field(..., min_length=1, max_length=255)
    stage_code: Optional[str] = Field(None, max_length=100)
    stage_order: int = Field(..., ge=0)
    role_group_id: Optional[EntityId] = Field(None, description="Leave empty for an ungated stage")
    sla_hours: Optional[int] = Field(None, gt=0)
    is_active: bool = True


class TemplateCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    file_type: Optional[str] = Field(None, max_length=100)
    stages: List[StageCreate] = Field(default_factory=list)


class StageResponse(BaseModel):
    id: str
    stage_name: str
    stage_code: Optional[str] = None
    stage_order: int
    role_group_id: Optional[str] = None
    sla_hours: Optional[int] = None
    is_active: bool

    model_config = ConfigDict(from_attributes=True)


class TemplateResponse(BaseModel):
    id: str
    name: str
    description: Optional[str] = None
    file_type: Optional[str] = None
    is_active: bool
    stages: List[StageResponse] = Field(default_factory=list)
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class TransitionCreate(BaseModel):
    from_stage_id: EntityId
    to_stage_id: EntityId


class TransitionResponse(BaseModel):
    id: str
    from_stage_id: str
    to_stage_id: str
    is_active: bool

    model_config = ConfigDict(from_attributes=True)
