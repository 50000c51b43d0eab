# Database models package

from efiling.models.audit import UserAction
from efiling.models.base import BaseModel, TimestampMixin, UUIDMixin
from efiling.models.file import (
    DocumentSignature,
    EfilingFile,
    FileComment,
    FileMovement,
    FileStatus,
    MovementType,
)
from efiling.models.geography import (
    District,
    Division,
    EfilingRoleLocation,
    RoleGroupLocation,
    Town,
    Zone,
)
from efiling.models.notification import Notification
from efiling.models.user import Department, EfilingRole, EfilingUser, User
from efiling.models.workflow import (
    FileWorkflow,
    RoleGroup,
    StageTransition,
    WorkflowAction,
    WorkflowActionType,
    WorkflowStage,
    WorkflowStatus,
    WorkflowTemplate,
)

__all__ = [
    "BaseModel",
    "TimestampMixin",
    "UUIDMixin",
    "User",
    "Department",
    "EfilingRole",
    "EfilingUser",
    "Zone",
    "District",
    "Town",
    "Division",
    "EfilingRoleLocation",
    "RoleGroupLocation",
    "RoleGroup",
    "WorkflowTemplate",
    "WorkflowStage",
    "StageTransition",
    "FileWorkflow",
    "WorkflowAction",
    "WorkflowActionType",
    "WorkflowStatus",
    "EfilingFile",
    "FileStatus",
    "FileMovement",
    "MovementType",
    "DocumentSignature",
    "FileComment",
    "Notification",
    "UserAction",
]
