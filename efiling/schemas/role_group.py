"""
Role group schemas
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from efiling.schemas.base import EntityId
from efiling.services.role_matcher import normalize_role_codes


class RoleGroupLocationSchema(BaseModel):
    zone_id: Optional[EntityId] = None
    district_id: Optional[EntityId] = None
    town_id: Optional[EntityId] = None
    division_id: Optional[EntityId] = None

    model_config = ConfigDict(from_attributes=True)


class RoleGroupCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    code: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = None
    role_codes: List[str] = Field(..., description="Exact codes, 'EE*' prefixes or short codes")
    is_active: bool = True
    locations: List[RoleGroupLocationSchema] = Field(default_factory=list)

    @field_validator("role_codes", mode="before")
    @classmethod
    def normalize_codes(cls, v):
        codes = normalize_role_codes(v)
        if not codes:
            raise ValueError("At least one role code is required")
        return codes


class RoleGroupUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    role_codes: Optional[List[str]] = None
    is_active: Optional[bool] = None
    locations: Optional[List[RoleGroupLocationSchema]] = None

    @field_validator("role_codes", mode="before")
    @classmethod
    def normalize_codes(cls, v):
        if v is None:
            return v
        return normalize_role_codes(v)


class RoleGroupResponse(BaseModel):
    id: str
    name: str
    code: str
    description: Optional[str] = None
    role_codes: List[str]
    is_active: bool
    locations: List[RoleGroupLocationSchema] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)

    @field_validator("role_codes", mode="before")
    @classmethod
    def normalize_codes(cls, v):
        return normalize_role_codes(v)
