"""
Role group endpoints
Reads are geography-filtered unless the caller is privileged; writes are
limited to administrators
"""

from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status

from efiling.api.deps import RequestContext, get_request_context, require_admin
from efiling.schemas.role_group import RoleGroupCreate, RoleGroupResponse, RoleGroupUpdate
from efiling.services.geography_resolver import GeographyResolver
from efiling.services.workflow_store import WorkflowStore

router = APIRouter()


@router.get("", response_model=List[RoleGroupResponse])
async def list_role_groups(
    is_active: Optional[bool] = Query(None),
    ctx: RequestContext = Depends(get_request_context),
):
    return GeographyResolver(ctx.db).visible_role_groups(
        ctx.user, ctx.identity, is_active=is_active
    )


@router.post("", response_model=RoleGroupResponse, status_code=status.HTTP_201_CREATED)
async def create_role_group(
    payload: RoleGroupCreate,
    ctx: RequestContext = Depends(require_admin),
):
    return WorkflowStore(ctx.db).create_role_group(
        name=payload.name,
        code=payload.code,
        role_codes=payload.role_codes,
        description=payload.description,
        is_active=payload.is_active,
        locations=[location.model_dump() for location in payload.locations],
    )


@router.put("/{role_group_id}", response_model=RoleGroupResponse)
async def update_role_group(
    role_group_id: UUID,
    payload: RoleGroupUpdate,
    ctx: RequestContext = Depends(require_admin),
):
    changes = payload.model_dump(exclude_unset=True)
    return WorkflowStore(ctx.db).update_role_group(str(role_group_id), **changes)


@router.delete("/{role_group_id}", response_model=RoleGroupResponse)
async def delete_role_group(
    role_group_id: UUID,
    ctx: RequestContext = Depends(require_admin),
):
    """Deactivate a role group; stages gated by it stop accepting anyone"""
    return WorkflowStore(ctx.db).delete_role_group(str(role_group_id))
