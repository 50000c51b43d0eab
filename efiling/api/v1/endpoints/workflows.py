"""
Workflow instance endpoints
"""

from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status

from efiling.api.deps import RequestContext, get_request_context
from efiling.schemas.workflow import (
    WorkflowCreate,
    WorkflowDetail,
    WorkflowListResponse,
    WorkflowSummary,
)
from efiling.services.workflow_service import WorkflowService

router = APIRouter()


@router.get("", response_model=WorkflowListResponse)
async def list_workflows(
    user_id: Optional[UUID] = Query(None, alias="userId", description="Current assignee (e-filing user id)"),
    status_filter: Optional[str] = Query(None, alias="status", description="Workflow status, IN_PROGRESS by default"),
    department_id: Optional[UUID] = Query(None, alias="departmentId"),
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
    ctx: RequestContext = Depends(get_request_context),
):
    """List workflows with their file, stage, assignee and SLA state"""
    return await WorkflowService(ctx.db).list_workflows(
        user_id=str(user_id) if user_id else None,
        status=status_filter,
        department_id=str(department_id) if department_id else None,
        limit=limit,
        offset=offset,
    )


@router.post("", response_model=WorkflowSummary, status_code=status.HTTP_201_CREATED)
async def start_workflow(
    payload: WorkflowCreate,
    ctx: RequestContext = Depends(get_request_context),
):
    """
    Start a workflow on a file

    The file is placed at the template's first active stage with the stage's
    SLA (or the default SLA when the stage has none).
    """
    return await WorkflowService(ctx.db).start_workflow(
        file_id=payload.file_id,
        template_id=payload.template_id,
        created_by=payload.created_by,
        current_assignee_id=payload.current_assignee_id,
        actor_user_id=ctx.user_id,
    )


@router.get("/{workflow_id}", response_model=WorkflowDetail)
async def get_workflow(
    workflow_id: UUID,
    ctx: RequestContext = Depends(get_request_context),
):
    return await WorkflowService(ctx.db).get_workflow(str(workflow_id))
