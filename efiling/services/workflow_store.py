"""
Workflow Template/Stage Store
Definitions the state machine reads: templates, ordered stages, stage
transitions and the role groups gating them
"""

import logging
from typing import Any, Dict, List, Optional

from fastapi import HTTPException
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from efiling.core.exceptions import EfilingError, InvalidState, NotFound
from efiling.models.geography import RoleGroupLocation
from efiling.models.workflow import (
    RoleGroup,
    StageTransition,
    WorkflowStage,
    WorkflowTemplate,
)
from efiling.services.role_matcher import normalize_role_codes

logger = logging.getLogger(__name__)

LOCATION_FIELDS = ("zone_id", "district_id", "town_id", "division_id")
ROLE_GROUP_FIELDS = ("name", "description", "role_codes", "is_active")


class WorkflowStore:
    """Template, stage, transition and role-group persistence"""

    def __init__(self, db: Session):
        self.db = db

    # Templates

    def create_template(
        self,
        name: str,
        file_type: Optional[str] = None,
        description: Optional[str] = None,
        stages: Optional[List[Dict[str, Any]]] = None,
    ) -> WorkflowTemplate:
        """Create a template with its stages in one transaction"""
        stages = stages or []
        orders = [stage["stage_order"] for stage in stages]
        if len(orders) != len(set(orders)):
            raise InvalidState("Stage order must be unique within a template")

        try:
            template = WorkflowTemplate(name=name, file_type=file_type, description=description)
            self.db.add(template)
            self.db.flush()

            for definition in stages:
                role_group_id = definition.get("role_group_id")
                if role_group_id and self.get_role_group(role_group_id) is None:
                    raise NotFound(f"Role group {role_group_id} not found")

                self.db.add(
                    WorkflowStage(
                        template_id=template.id,
                        stage_name=definition["stage_name"],
                        stage_code=definition.get("stage_code"),
                        stage_order=definition["stage_order"],
                        role_group_id=role_group_id,
                        sla_hours=definition.get("sla_hours"),
                        is_active=definition.get("is_active", True),
                    )
                )

            self.db.commit()
            self.db.refresh(template)

            logger.info(f"Created workflow template {template.id} with {len(stages)} stages")
            return template

        except HTTPException:
            self.db.rollback()
            raise
        except Exception as e:
            logger.error(f"Error creating workflow template: {str(e)}")
            self.db.rollback()
            raise EfilingError("Failed to create workflow template")

    def get_template(self, template_id: str) -> WorkflowTemplate:
        template = (
            self.db.query(WorkflowTemplate).filter(WorkflowTemplate.id == template_id).first()
        )
        if template is None:
            raise NotFound("Workflow template not found")
        return template

    def first_stage(self, template_id: str) -> Optional[WorkflowStage]:
        """Active stage with the lowest stage_order"""
        return (
            self.db.query(WorkflowStage)
            .filter(WorkflowStage.template_id == template_id, WorkflowStage.is_active == True)
            .order_by(WorkflowStage.stage_order)
            .first()
        )

    # Transitions

    def add_transition(self, from_stage_id: str, to_stage_id: str) -> StageTransition:
        """Add (or re-activate) a directed edge between two stages of one template"""
        from_stage = self.db.query(WorkflowStage).filter(WorkflowStage.id == from_stage_id).first()
        to_stage = self.db.query(WorkflowStage).filter(WorkflowStage.id == to_stage_id).first()
        if from_stage is None or to_stage is None:
            raise NotFound("Workflow stage not found")
        if from_stage.template_id != to_stage.template_id:
            raise InvalidState("Transitions must connect stages of the same template")
        if from_stage.id == to_stage.id:
            raise InvalidState("A stage cannot transition to itself")

        transition = (
            self.db.query(StageTransition)
            .filter(
                StageTransition.from_stage_id == from_stage.id,
                StageTransition.to_stage_id == to_stage.id,
            )
            .first()
        )
        if transition is None:
            transition = StageTransition(from_stage_id=from_stage.id, to_stage_id=to_stage.id)
            self.db.add(transition)
        else:
            transition.is_active = True

        self.db.commit()
        self.db.refresh(transition)
        return transition

    def active_transitions(self, stage_id: str) -> List[StageTransition]:
        """Active outgoing edges to active stages, lowest target stage_order first"""
        return (
            self.db.query(StageTransition)
            .join(WorkflowStage, StageTransition.to_stage_id == WorkflowStage.id)
            .filter(
                StageTransition.from_stage_id == stage_id,
                StageTransition.is_active == True,
                WorkflowStage.is_active == True,
            )
            .order_by(WorkflowStage.stage_order)
            .all()
        )

    def role_group_patterns(self, stage: WorkflowStage) -> Optional[List[str]]:
        """
        Patterns gating a stage.

        None means the stage is ungated. A gate pointing at a missing or
        inactive group yields no patterns, so nobody matches it.
        """
        if not stage.role_group_id:
            return None

        group = self.get_role_group(stage.role_group_id)
        if group is None or not group.is_active:
            logger.warning(
                f"Stage {stage.id} is gated by missing or inactive role group {stage.role_group_id}"
            )
            return []
        return normalize_role_codes(group.role_codes)

    # Role groups

    def get_role_group(self, role_group_id: str) -> Optional[RoleGroup]:
        return self.db.query(RoleGroup).filter(RoleGroup.id == role_group_id).first()

    def create_role_group(
        self,
        name: str,
        code: str,
        role_codes,
        description: Optional[str] = None,
        is_active: bool = True,
        locations: Optional[List[Dict[str, Any]]] = None,
    ) -> RoleGroup:
        group = RoleGroup(
            name=name,
            code=code,
            description=description,
            role_codes=normalize_role_codes(role_codes),
            is_active=is_active,
        )
        for location in locations or []:
            group.locations.append(
                RoleGroupLocation(**{key: location.get(key) for key in LOCATION_FIELDS})
            )

        try:
            self.db.add(group)
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            raise InvalidState.conflict(f"Role group code '{code}' already exists")

        self.db.refresh(group)
        logger.info(f"Created role group {group.code}")
        return group

    def update_role_group(self, role_group_id: str, **changes) -> RoleGroup:
        group = self.get_role_group(role_group_id)
        if group is None:
            raise NotFound("Role group not found")

        for key in ROLE_GROUP_FIELDS:
            if key in changes and changes[key] is not None:
                value = changes[key]
                if key == "role_codes":
                    value = normalize_role_codes(value)
                setattr(group, key, value)

        if changes.get("locations") is not None:
            group.locations = [
                RoleGroupLocation(**{key: location.get(key) for key in LOCATION_FIELDS})
                for location in changes["locations"]
            ]

        self.db.commit()
        self.db.refresh(group)
        return group

    def delete_role_group(self, role_group_id: str) -> RoleGroup:
        """Soft delete; stages gated by the group then fail closed"""
        group = self.get_role_group(role_group_id)
        if group is None:
            raise NotFound("Role group not found")

        group.is_active = False
        self.db.commit()
        self.db.refresh(group)
        logger.info(f"Deactivated role group {group.code}")
        return group
