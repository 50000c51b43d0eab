"""
File Workflow State Machine
Starts workflows on files, forwards files between stages under role-group
authorization and closes them, recording movements and workflow actions
"""

import logging
from datetime import datetime
from typing import Any, Dict, Optional

from fastapi import HTTPException
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError

from efiling.core.config import settings
from efiling.core.exceptions import (
    AssignmentFailed,
    EfilingError,
    Forbidden,
    InvalidState,
    NotFound,
)
from efiling.core.metrics import record_workflow_transition
from efiling.models.file import EfilingFile, FileMovement, FileStatus, MovementType
from efiling.models.user import EfilingUser, User
from efiling.models.workflow import (
    TERMINAL_WORKFLOW_STATUSES,
    FileWorkflow,
    WorkflowAction,
    WorkflowActionType,
    WorkflowStage,
    WorkflowStatus,
    WorkflowTemplate,
)
from efiling.services.action_logger import ActionLogger
from efiling.services.geography_resolver import GeographyResolver, location_matches
from efiling.services.notification_service import NotificationService
from efiling.services.role_matcher import matches
from efiling.services.sla import compute_deadline, is_breached, sla_status
from efiling.services.workflow_store import WorkflowStore

logger = logging.getLogger(__name__)

RECENT_ACTIONS_LIMIT = 20
ACTIVE_WORKFLOW_INDEX = "uq_file_active_workflow"


def _violates_active_workflow_index(error: IntegrityError) -> bool:
    """True when an insert collided with another in-progress workflow for the same file"""
    diag = getattr(error.orig, "diag", None)
    constraint_name = getattr(diag, "constraint_name", None)
    if constraint_name:
        return constraint_name == ACTIVE_WORKFLOW_INDEX
    # SQLite names the columns instead of the index
    message = str(error.orig)
    return ACTIVE_WORKFLOW_INDEX in message or "efiling_file_workflows.file_id" in message


class WorkflowService:
    """Service for moving e-filing files through their workflow"""

    def __init__(self, db: Session):
        self.db = db
        self.store = WorkflowStore(db)
        self.resolver = GeographyResolver(db)
        self.notifier = NotificationService(db)
        self.action_logger = ActionLogger(db)

    async def assign(
        self,
        file_id: str,
        actor_user_id: str,
        target_user_id: str,
        remarks: Optional[str] = None,
        expected_stage_id: Optional[str] = None,
        request_id: Optional[str] = None,
        ip_address: Optional[str] = None,
    ) -> Dict[str, Any]:
        """
        Forward a file to another e-filing user.

        The actor must satisfy the current stage's role group; the next stage is
        the first active transition (by stage order) whose gate accepts the
        target's role. Everything is written in one transaction.

        Args:
            file_id: File being forwarded
            actor_user_id: System user id of the caller
            target_user_id: E-filing user id of the new assignee
            remarks: Free-text note stored on the movement
            expected_stage_id: Stage the caller last saw; a mismatch is a conflict

        Returns:
            success flag, new SLA deadline and the stage the file moved to
        """
        try:
            file = self._lock_file(file_id)

            actor = self._active_profile_for_user(actor_user_id)
            if actor is None:
                raise Forbidden("You are not an active e-filing user")

            target = self._active_profile(target_user_id)
            if target is None:
                raise NotFound("Target user not found or inactive")

            actor_role = actor.role_code
            target_role = target.role_code

            workflow = self._lock_active_workflow(file.id)
            if workflow is None:
                raise InvalidState("Workflow not initialized for this file")

            if expected_stage_id and str(expected_stage_id) != str(workflow.current_stage_id):
                raise InvalidState.conflict("File has moved to another stage; reload and retry")

            current_stage = (
                self.db.query(WorkflowStage)
                .filter(WorkflowStage.id == workflow.current_stage_id)
                .first()
            )
            if current_stage is None:
                raise NotFound("Current workflow stage not found")

            patterns = self.store.role_group_patterns(current_stage)
            if patterns is not None and not matches(actor_role, patterns):
                raise Forbidden("Your role is not permitted to act at the current stage")

            actor_scope = self.resolver.scope_for(actor)
            if not self.resolver.is_privileged(actor.user, actor_scope) and not location_matches(
                file, self.resolver.scope_for(target)
            ):
                raise Forbidden("Selected user is outside the file's location")

            next_stage = self._select_next_stage(current_stage, target_role)
            if next_stage is None:
                raise Forbidden("No eligible next stage for the selected user")

            now = datetime.utcnow()
            previously_breached = is_breached(workflow.sla_deadline, workflow.workflow_status, now)
            sla_deadline = compute_deadline(next_stage.sla_hours, now)

            file.assigned_to = target.id
            file.sla_deadline = sla_deadline
            file.sla_breached = False
            file.status = FileStatus.IN_PROGRESS

            workflow.current_stage_id = next_stage.id
            workflow.current_assignee_id = target.id
            workflow.sla_deadline = sla_deadline
            workflow.sla_breached = False

            self.db.add(
                FileMovement(
                    file_id=file.id,
                    from_user_id=actor.id,
                    to_user_id=target.id,
                    from_department_id=actor.department_id,
                    to_department_id=target.department_id,
                    action_type=MovementType.ASSIGNED,
                    remarks=remarks,
                    created_at=now,
                )
            )
            self.db.add(
                WorkflowAction(
                    workflow_id=workflow.id,
                    from_stage_id=current_stage.id,
                    to_stage_id=next_stage.id,
                    action_type=WorkflowActionType.FORWARD,
                    action_data={
                        "from_user_id": actor.id,
                        "to_user_id": target.id,
                        "remarks": remarks,
                        "sla_deadline": sla_deadline.isoformat() if sla_deadline else None,
                    },
                    performed_by=actor.id,
                    performed_at=now,
                    sla_breached=previously_breached,
                )
            )

            # Version check happens here
            self.db.flush()

            self.notifier.notify_state_change(
                file.id,
                actor.id,
                [target.id],
                f"File {file.file_number} has been assigned to you",
                priority="normal",
                action_required=True,
                notification_type="file_assigned",
            )
            if file.created_by and file.created_by != target.id:
                self.notifier.notify_state_change(
                    file.id,
                    actor.id,
                    [file.created_by],
                    f"File {file.file_number} was forwarded to {target.display_name}",
                    priority="low",
                    action_required=False,
                    notification_type="workflow_action",
                )

            result = {
                "success": True,
                "file_id": file.id,
                "assigned_to": target.id,
                "sla_deadline": sla_deadline,
                "stage_id": next_stage.id,
                "stage_name": next_stage.stage_name,
            }
            self.db.commit()

        except HTTPException:
            self.db.rollback()
            record_workflow_transition("assign", "rejected")
            raise
        except StaleDataError:
            self.db.rollback()
            record_workflow_transition("assign", "conflict")
            raise InvalidState.conflict("File was changed by another request; reload and retry")
        except Exception as e:
            logger.error(f"Error assigning file {file_id}: {str(e)}")
            self.db.rollback()
            record_workflow_transition("assign", "failed")
            raise AssignmentFailed()

        logger.info(
            f"File {file_id} assigned by {actor_user_id} "
            f"to {target_user_id} at stage {result['stage_name']}"
        )
        record_workflow_transition("assign", "success")
        self.action_logger.log_action(
            "FILE_ASSIGNED",
            "efiling_file",
            file_id,
            user_id=actor_user_id,
            details={
                "to_user_id": target_user_id,
                "stage_id": result["stage_id"],
                "remarks": remarks,
            },
            request_id=request_id,
            ip_address=ip_address,
        )
        return result

    async def start_workflow(
        self,
        file_id: str,
        template_id: str,
        created_by: Optional[str] = None,
        current_assignee_id: Optional[str] = None,
        actor_user_id: Optional[str] = None,
    ) -> Dict[str, Any]:
        """Seed a file's workflow at the template's first active stage"""
        try:
            file = self._lock_file(file_id)

            template = (
                self.db.query(WorkflowTemplate)
                .filter(WorkflowTemplate.id == template_id, WorkflowTemplate.is_active == True)
                .first()
            )
            if template is None:
                raise NotFound("Workflow template not found or inactive")

            first_stage = self.store.first_stage(template.id)
            if first_stage is None:
                raise InvalidState("Workflow template has no active stages")

            if self._lock_active_workflow(file.id) is not None:
                raise InvalidState.conflict("File already has a workflow in progress")

            if created_by is None and actor_user_id is not None:
                actor = self._active_profile_for_user(actor_user_id)
                created_by = actor.id if actor else None
            elif created_by is not None and self._active_profile(created_by) is None:
                raise NotFound("Creator not found or inactive")

            if current_assignee_id is not None:
                if self._active_profile(current_assignee_id) is None:
                    raise NotFound("Assignee not found or inactive")

            now = datetime.utcnow()
            sla_hours = first_stage.sla_hours
            if sla_hours is None:
                sla_hours = settings.DEFAULT_SLA_HOURS
            sla_deadline = compute_deadline(sla_hours, now)

            workflow = FileWorkflow(
                file_id=file.id,
                template_id=template.id,
                current_stage_id=first_stage.id,
                current_assignee_id=current_assignee_id,
                workflow_status=WorkflowStatus.IN_PROGRESS,
                sla_deadline=sla_deadline,
                sla_breached=False,
                started_at=now,
                created_by=created_by,
            )
            self.db.add(workflow)
            self.db.flush()

            file.status = FileStatus.IN_PROGRESS
            file.sla_deadline = sla_deadline
            file.sla_breached = False
            if current_assignee_id is not None:
                file.assigned_to = current_assignee_id

            self.db.add(
                WorkflowAction(
                    workflow_id=workflow.id,
                    from_stage_id=None,
                    to_stage_id=first_stage.id,
                    action_type=WorkflowActionType.START,
                    action_data={"template_id": template.id, "assignee_id": current_assignee_id},
                    performed_by=created_by,
                    performed_at=now,
                )
            )
            self.db.flush()

            self.notifier.notify_state_change(
                file.id,
                created_by,
                [current_assignee_id],
                f"File {file.file_number} has been assigned to you",
                priority="normal",
                action_required=True,
                notification_type="file_assigned",
            )

            self.db.commit()
            self.db.refresh(workflow)

        except HTTPException:
            self.db.rollback()
            raise
        except IntegrityError as e:
            self.db.rollback()
            if _violates_active_workflow_index(e):
                # Lost a race with a concurrent start
                raise InvalidState.conflict("File already has a workflow in progress")
            logger.error(f"Integrity error starting workflow for file {file_id}: {str(e.orig)}")
            raise EfilingError("Failed to start workflow")
        except Exception as e:
            logger.error(f"Error starting workflow for file {file_id}: {str(e)}")
            self.db.rollback()
            raise EfilingError("Failed to start workflow")

        logger.info(f"Workflow {workflow.id} started for file {file_id} using template {template_id}")
        record_workflow_transition("start", "success")
        self.action_logger.log_action(
            "WORKFLOW_STARTED",
            "efiling_workflow",
            workflow.id,
            user_id=actor_user_id,
            details={"file_id": file_id, "template_id": template_id},
        )
        return self._serialize_workflow(workflow)

    async def list_workflows(
        self,
        user_id: Optional[str] = None,
        status: Optional[str] = None,
        department_id: Optional[str] = None,
        limit: int = 50,
        offset: int = 0,
    ) -> Dict[str, Any]:
        """In-flight workflows, newest first"""
        workflow_status = self._parse_status(status or WorkflowStatus.IN_PROGRESS.value)

        query = (
            self.db.query(FileWorkflow)
            .join(EfilingFile, FileWorkflow.file_id == EfilingFile.id)
            .filter(FileWorkflow.workflow_status == workflow_status)
        )
        if user_id:
            query = query.filter(FileWorkflow.current_assignee_id == user_id)
        if department_id:
            query = query.filter(EfilingFile.department_id == department_id)

        total = query.count()
        workflows = (
            query.order_by(FileWorkflow.started_at.desc()).offset(offset).limit(limit).all()
        )

        return {
            "workflows": [self._serialize_workflow(workflow) for workflow in workflows],
            "total": total,
            "limit": limit,
            "offset": offset,
        }

    async def get_workflow(self, workflow_id: str) -> Dict[str, Any]:
        """Workflow detail with template stages and recent actions"""
        workflow = self.db.query(FileWorkflow).filter(FileWorkflow.id == workflow_id).first()
        if workflow is None:
            raise NotFound("Workflow not found")

        detail = self._serialize_workflow(workflow)
        detail["stages"] = [
            {
                "id": stage.id,
                "stage_name": stage.stage_name,
                "stage_code": stage.stage_code,
                "stage_order": stage.stage_order,
                "role_group_id": stage.role_group_id,
                "role_group_code": stage.role_group.code if stage.role_group else None,
                "sla_hours": stage.sla_hours,
                "is_active": stage.is_active,
            }
            for stage in workflow.template.stages
        ]

        actions = (
            self.db.query(WorkflowAction)
            .filter(WorkflowAction.workflow_id == workflow.id)
            .order_by(WorkflowAction.performed_at.desc())
            .limit(RECENT_ACTIONS_LIMIT)
            .all()
        )
        detail["actions"] = [
            {
                "id": action.id,
                "action_type": action.action_type.value,
                "from_stage_id": action.from_stage_id,
                "to_stage_id": action.to_stage_id,
                "performed_by": action.performed_by,
                "performer_name": action.performer.display_name if action.performer else None,
                "performed_at": action.performed_at,
                "sla_breached": action.sla_breached,
                "action_data": action.action_data,
            }
            for action in actions
        ]
        return detail

    async def close_workflow(
        self,
        file_id: str,
        actor_user_id: str,
        status: str = WorkflowStatus.COMPLETED.value,
        remarks: Optional[str] = None,
    ) -> Dict[str, Any]:
        """Move the file's in-progress workflow to COMPLETED or CANCELLED"""
        target_status = self._parse_status(status)
        if target_status not in TERMINAL_WORKFLOW_STATUSES:
            raise InvalidState("Workflow can only be closed as COMPLETED or CANCELLED")

        try:
            file = self._lock_file(file_id)
            workflow = self._lock_active_workflow(file.id)
            if workflow is None:
                raise InvalidState("No workflow in progress for this file")

            user = self.db.query(User).filter(User.id == actor_user_id).first()
            actor = self._active_profile_for_user(actor_user_id)
            scope = self.resolver.scope_for(actor) if actor else None
            actor_id = actor.id if actor else None

            allowed = self.resolver.is_privileged(user, scope) or (
                actor_id is not None
                and actor_id in (workflow.current_assignee_id, workflow.created_by, file.created_by)
            )
            if not allowed:
                raise Forbidden("Only the assignee, the creator or an administrator can close this file")

            now = datetime.utcnow()
            workflow.sla_breached = is_breached(workflow.sla_deadline, workflow.workflow_status, now)
            workflow.workflow_status = target_status
            workflow.completed_at = now

            file.status = (
                FileStatus.COMPLETED
                if target_status == WorkflowStatus.COMPLETED
                else FileStatus.CANCELLED
            )

            self.db.add(
                WorkflowAction(
                    workflow_id=workflow.id,
                    from_stage_id=workflow.current_stage_id,
                    to_stage_id=workflow.current_stage_id,
                    action_type=(
                        WorkflowActionType.COMPLETE
                        if target_status == WorkflowStatus.COMPLETED
                        else WorkflowActionType.CANCEL
                    ),
                    action_data={"remarks": remarks},
                    performed_by=actor_id,
                    performed_at=now,
                    sla_breached=workflow.sla_breached,
                )
            )
            self.db.flush()

            self.notifier.notify_state_change(
                file.id,
                actor_id,
                [file.created_by, workflow.current_assignee_id],
                f"File {file.file_number} was marked {target_status.value.lower()}",
                priority="low",
                action_required=False,
                notification_type="workflow_action",
            )

            self.db.commit()
            self.db.refresh(workflow)

        except HTTPException:
            self.db.rollback()
            raise
        except StaleDataError:
            self.db.rollback()
            raise InvalidState.conflict("File was changed by another request; reload and retry")
        except Exception as e:
            logger.error(f"Error closing workflow for file {file_id}: {str(e)}")
            self.db.rollback()
            raise EfilingError("Failed to close workflow")

        record_workflow_transition(target_status.value.lower(), "success")
        self.action_logger.log_action(
            f"WORKFLOW_{target_status.value}",
            "efiling_workflow",
            workflow.id,
            user_id=actor_user_id,
            details={"file_id": file_id, "remarks": remarks},
        )
        return self._serialize_workflow(workflow)

    # Helper methods

    def _lock_file(self, file_id: str) -> EfilingFile:
        file = (
            self.db.query(EfilingFile)
            .filter(EfilingFile.id == file_id, EfilingFile.is_deleted == False)
            .with_for_update()
            .first()
        )
        if file is None:
            raise NotFound("File not found")
        return file

    def _lock_active_workflow(self, file_id: str) -> Optional[FileWorkflow]:
        return (
            self.db.query(FileWorkflow)
            .filter(
                FileWorkflow.file_id == file_id,
                FileWorkflow.workflow_status == WorkflowStatus.IN_PROGRESS,
            )
            .with_for_update()
            .first()
        )

    def _active_profile(self, efiling_user_id: str) -> Optional[EfilingUser]:
        return (
            self.db.query(EfilingUser)
            .filter(EfilingUser.id == efiling_user_id, EfilingUser.is_active == True)
            .first()
        )

    def _active_profile_for_user(self, user_id: str) -> Optional[EfilingUser]:
        return (
            self.db.query(EfilingUser)
            .join(User, EfilingUser.user_id == User.id)
            .filter(
                EfilingUser.user_id == user_id,
                EfilingUser.is_active == True,
                User.is_active == True,
            )
            .first()
        )

    def _select_next_stage(
        self, current_stage: WorkflowStage, target_role: str
    ) -> Optional[WorkflowStage]:
        """First transition target, by stage order, whose gate accepts the target role"""
        for transition in self.store.active_transitions(current_stage.id):
            candidate = transition.to_stage
            patterns = self.store.role_group_patterns(candidate)
            if patterns is None or matches(target_role, patterns):
                return candidate
        return None

    @staticmethod
    def _parse_status(status: str) -> WorkflowStatus:
        try:
            return WorkflowStatus(str(status).upper())
        except ValueError:
            raise InvalidState(f"Unknown workflow status '{status}'")

    def _serialize_workflow(self, workflow: FileWorkflow) -> Dict[str, Any]:
        file = workflow.file
        stage = workflow.current_stage
        assignee = workflow.current_assignee
        return {
            "id": workflow.id,
            "file_id": workflow.file_id,
            "file_number": file.file_number if file else None,
            "subject": file.subject if file else None,
            "template_id": workflow.template_id,
            "template_name": workflow.template.name if workflow.template else None,
            "current_stage_id": workflow.current_stage_id,
            "current_stage_name": stage.stage_name if stage else None,
            "current_stage_order": stage.stage_order if stage else None,
            "current_assignee_id": workflow.current_assignee_id,
            "current_assignee_name": assignee.display_name if assignee else None,
            "workflow_status": workflow.workflow_status.value,
            "sla_deadline": workflow.sla_deadline,
            "sla_breached": is_breached(workflow.sla_deadline, workflow.workflow_status),
            "sla": sla_status(workflow.sla_deadline, workflow.workflow_status),
            "started_at": workflow.started_at,
            "completed_at": workflow.completed_at,
            "created_by": workflow.created_by,
            "version": workflow.version,
        }