"""
File workflow endpoints
Assignment, timeline, comments and closing of e-filing files
"""

from uuid import UUID

from fastapi import APIRouter, Depends, Request, status

from efiling.api.deps import RequestContext, get_request_context
from efiling.core.rate_limiting import limiter, workflow_action_limits
from efiling.schemas.file import (
    AssignRequest,
    AssignResponse,
    CloseRequest,
    CommentCreate,
    CommentResponse,
    TimelineResponse,
)
from efiling.schemas.workflow import WorkflowSummary
from efiling.services.comment_service import CommentService
from efiling.services.timeline_service import TimelineService
from efiling.services.workflow_service import WorkflowService

router = APIRouter()


@router.post("/{file_id}/assign", response_model=AssignResponse)
@limiter.limit(workflow_action_limits)
async def assign_file(
    request: Request,
    file_id: UUID,
    payload: AssignRequest,
    ctx: RequestContext = Depends(get_request_context),
):
    """
    Forward a file to another e-filing user

    The caller must be allowed to act at the file's current stage and the
    target must be eligible for one of the stages that follow it.
    """
    return await WorkflowService(ctx.db).assign(
        file_id=str(file_id),
        actor_user_id=ctx.user_id,
        target_user_id=payload.to_user_id,
        remarks=payload.remarks,
        expected_stage_id=payload.expected_stage_id,
        request_id=ctx.request_id,
        ip_address=ctx.ip_address,
    )


@router.get("/{file_id}/timeline", response_model=TimelineResponse)
async def get_file_timeline(
    file_id: UUID,
    ctx: RequestContext = Depends(get_request_context),
):
    """Chronological history of a file"""
    events = await TimelineService(ctx.db).timeline(str(file_id))
    return {"file_id": str(file_id), "events": events}


@router.post(
    "/{file_id}/comments",
    response_model=CommentResponse,
    status_code=status.HTTP_201_CREATED,
)
async def add_file_comment(
    file_id: UUID,
    payload: CommentCreate,
    ctx: RequestContext = Depends(get_request_context),
):
    return await CommentService(ctx.db).add_comment(str(file_id), ctx.user_id, payload.comment)


@router.post("/{file_id}/close", response_model=WorkflowSummary)
@limiter.limit(workflow_action_limits)
async def close_file(
    request: Request,
    file_id: UUID,
    payload: CloseRequest,
    ctx: RequestContext = Depends(get_request_context),
):
    """Complete or cancel the file's workflow"""
    return await WorkflowService(ctx.db).close_workflow(
        file_id=str(file_id),
        actor_user_id=ctx.user_id,
        status=payload.status.value,
        remarks=payload.remarks,
    )
