"""
Workflow template endpoints
"""

from uuid import UUID

from fastapi import APIRouter, Depends, status

from efiling.api.deps import RequestContext, get_request_context, require_admin
from efiling.core.exceptions import InvalidState
from efiling.schemas.template import (
    TemplateCreate,
    TemplateResponse,
    TransitionCreate,
    TransitionResponse,
)
from efiling.services.workflow_store import WorkflowStore

router = APIRouter()


@router.post("", response_model=TemplateResponse, status_code=status.HTTP_201_CREATED)
async def create_template(
    payload: TemplateCreate,
    ctx: RequestContext = Depends(require_admin),
):
    return WorkflowStore(ctx.db).create_template(
        name=payload.name,
        file_type=payload.file_type,
        description=payload.description,
        stages=[stage.model_dump() for stage in payload.stages],
    )


@router.get("/{template_id}", response_model=TemplateResponse)
async def get_template(
    template_id: UUID,
    ctx: RequestContext = Depends(get_request_context),
):
    return WorkflowStore(ctx.db).get_template(str(template_id))


@router.post(
    "/{template_id}/transitions",
    response_model=TransitionResponse,
    status_code=status.HTTP_201_CREATED,
)
async def add_transition(
    template_id: UUID,
    payload: TransitionCreate,
    ctx: RequestContext = Depends(require_admin),
):
    store = WorkflowStore(ctx.db)
    template = store.get_template(str(template_id))
    stage_ids = {stage.id for stage in template.stages}
    if payload.from_stage_id not in stage_ids:
        raise InvalidState("Stage does not belong to this template")
    return store.add_transition(payload.from_stage_id, payload.to_stage_id)
