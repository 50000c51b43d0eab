"""
Workflow Models
Templates, stages, role groups and stage transitions that define how an
e-filing file is routed, plus the live workflow instance and its action log
"""

import enum
from datetime import datetime

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    Enum,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
    text,
)
from sqlalchemy.orm import relationship

from efiling.models.base import GUID, JSON, BaseModel, RoleCodeList


class WorkflowStatus(enum.Enum):
    """Lifecycle of a file workflow instance"""

    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"


TERMINAL_WORKFLOW_STATUSES = (WorkflowStatus.COMPLETED, WorkflowStatus.CANCELLED)


class WorkflowActionType(enum.Enum):
    START = "START"
    FORWARD = "FORWARD"
    COMPLETE = "COMPLETE"
    CANCEL = "CANCEL"


class RoleGroup(BaseModel):
    """Named allow-list of role-code patterns gating one or more stages"""

    __tablename__ = "efiling_role_groups"

    name = Column(String(255), nullable=False)
    code = Column(String(100), unique=True, nullable=False)
    description = Column(Text, nullable=True)
    role_codes = Column(RoleCodeList, nullable=False, default=list)
    is_active = Column(Boolean, default=True, nullable=False)

    locations = relationship(
        "RoleGroupLocation", back_populates="role_group", cascade="all, delete-orphan"
    )

    def __repr__(self):
        return f"<RoleGroup(code='{self.code}', role_codes={self.role_codes})>"


class WorkflowTemplate(BaseModel):
    """Ordered collection of stages for a file type"""

    __tablename__ = "efiling_workflow_templates"

    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    file_type = Column(String(100), nullable=True, index=True)
    is_active = Column(Boolean, default=True, nullable=False)

    stages = relationship(
        "WorkflowStage",
        back_populates="template",
        order_by="WorkflowStage.stage_order",
    )

    def __repr__(self):
        return f"<WorkflowTemplate(name='{self.name}', file_type='{self.file_type}')>"


class WorkflowStage(BaseModel):
    """One step of a template, optionally gated by a role group"""

    __tablename__ = "efiling_workflow_stages"

    template_id = Column(
        GUID(), ForeignKey("efiling_workflow_templates.id"), nullable=False, index=True
    )
    stage_name = Column(String(255), nullable=False)
    stage_code = Column(String(100), nullable=True)
    stage_order = Column(Integer, nullable=False)

    # No role group means any active participant may act at this stage
    role_group_id = Column(GUID(), ForeignKey("efiling_role_groups.id"), nullable=True)
    sla_hours = Column(Integer, nullable=True)
    is_active = Column(Boolean, default=True, nullable=False)

    template = relationship("WorkflowTemplate", back_populates="stages")
    role_group = relationship("RoleGroup")

    __table_args__ = (
        UniqueConstraint("template_id", "stage_order", name="uq_stage_template_order"),
    )

    def __repr__(self):
        return f"<WorkflowStage(name='{self.stage_name}', order={self.stage_order})>"


class StageTransition(BaseModel):
    """Directed edge defining a legal forward move between two stages"""

    __tablename__ = "efiling_stage_transitions"

    from_stage_id = Column(
        GUID(), ForeignKey("efiling_workflow_stages.id"), nullable=False, index=True
    )
    to_stage_id = Column(
        GUID(), ForeignKey("efiling_workflow_stages.id"), nullable=False
    )
    is_active = Column(Boolean, default=True, nullable=False)

    from_stage = relationship("WorkflowStage", foreign_keys=[from_stage_id])
    to_stage = relationship("WorkflowStage", foreign_keys=[to_stage_id])

    __table_args__ = (
        UniqueConstraint("from_stage_id", "to_stage_id", name="uq_stage_transition"),
    )

    def __repr__(self):
        return f"<StageTransition({self.from_stage_id} -> {self.to_stage_id})>"


class FileWorkflow(BaseModel):
    """Live workflow instance binding a file to a template"""

    __tablename__ = "efiling_file_workflows"

    file_id = Column(GUID(), ForeignKey("efiling_files.id"), nullable=False, index=True)
    template_id = Column(
        GUID(), ForeignKey("efiling_workflow_templates.id"), nullable=False
    )
    current_stage_id = Column(
        GUID(), ForeignKey("efiling_workflow_stages.id"), nullable=True
    )
    current_assignee_id = Column(GUID(), ForeignKey("efiling_users.id"), nullable=True)

    workflow_status = Column(
        Enum(WorkflowStatus, name="workflow_status"),
        default=WorkflowStatus.IN_PROGRESS,
        nullable=False,
    )
    sla_deadline = Column(DateTime(timezone=True), nullable=True)
    sla_breached = Column(Boolean, default=False, nullable=False)

    started_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)
    completed_at = Column(DateTime(timezone=True), nullable=True)
    created_by = Column(GUID(), ForeignKey("efiling_users.id"), nullable=True)

    # Optimistic concurrency token, bumped on every UPDATE
    version = Column(Integer, nullable=False, default=1)

    file = relationship("EfilingFile", back_populates="workflows")
    template = relationship("WorkflowTemplate")
    current_stage = relationship("WorkflowStage")
    current_assignee = relationship("EfilingUser", foreign_keys=[current_assignee_id])
    actions = relationship(
        "WorkflowAction",
        back_populates="workflow",
        order_by="WorkflowAction.performed_at",
    )

    __mapper_args__ = {"version_id_col": version}

    __table_args__ = (
        Index(
            "uq_file_active_workflow",
            "file_id",
            unique=True,
            postgresql_where=text("workflow_status = 'IN_PROGRESS'"),
            sqlite_where=text("workflow_status = 'IN_PROGRESS'"),
        ),
    )

    def __repr__(self):
        return f"<FileWorkflow(file='{self.file_id}', status='{self.workflow_status}')>"


class WorkflowAction(BaseModel):
    """Append-only log of stage transitions"""

    __tablename__ = "efiling_workflow_actions"

    workflow_id = Column(
        GUID(), ForeignKey("efiling_file_workflows.id"), nullable=False, index=True
    )
    from_stage_id = Column(
        GUID(), ForeignKey("efiling_workflow_stages.id"), nullable=True
    )
    to_stage_id = Column(GUID(), ForeignKey("efiling_workflow_stages.id"), nullable=True)
    action_type = Column(Enum(WorkflowActionType, name="workflow_action_type"), nullable=False)
    action_data = Column(JSON, nullable=True)

    performed_by = Column(GUID(), ForeignKey("efiling_users.id"), nullable=True)
    performed_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)
    sla_breached = Column(Boolean, default=False, nullable=False)

    workflow = relationship("FileWorkflow", back_populates="actions")
    performer = relationship("EfilingUser")
    from_stage = relationship("WorkflowStage", foreign_keys=[from_stage_id])
    to_stage = relationship("WorkflowStage", foreign_keys=[to_stage_id])

    def __repr__(self):
        return f"<WorkflowAction(type='{self.action_type}', workflow='{self.workflow_id}')>"
