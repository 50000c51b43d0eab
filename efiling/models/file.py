"""
File Models
E-filing files and the append-only records hanging off them: movements,
signatures and comments
"""

import enum
from datetime import datetime

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    Enum,
    ForeignKey,
    String,
    Text,
)
from sqlalchemy.orm import relationship

from efiling.models.base import GUID, BaseModel


class FileStatus(enum.Enum):
    DRAFT = "DRAFT"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"


class MovementType(enum.Enum):
    ASSIGNED = "ASSIGNED"


class EfilingFile(BaseModel):
    """Unit of work routed through a workflow; soft-cancelled, never hard-deleted"""

    __tablename__ = "efiling_files"

    file_number = Column(String(100), unique=True, index=True, nullable=False)
    subject = Column(String(500), nullable=False)
    description = Column(Text, nullable=True)
    priority = Column(String(20), default="normal", nullable=False)
    status = Column(Enum(FileStatus, name="file_status"), default=FileStatus.DRAFT, nullable=False)

    # Location of the work the file concerns
    department_id = Column(GUID(), ForeignKey("efiling_departments.id"), nullable=True)
    zone_id = Column(GUID(), ForeignKey("zones.id"), nullable=True)
    district_id = Column(GUID(), ForeignKey("districts.id"), nullable=True)
    town_id = Column(GUID(), ForeignKey("towns.id"), nullable=True)
    division_id = Column(GUID(), ForeignKey("divisions.id"), nullable=True)

    created_by = Column(GUID(), ForeignKey("efiling_users.id"), nullable=True)
    assigned_to = Column(GUID(), ForeignKey("efiling_users.id"), nullable=True)

    sla_deadline = Column(DateTime(timezone=True), nullable=True)
    sla_breached = Column(Boolean, default=False, nullable=False)
    is_deleted = Column(Boolean, default=False, nullable=False)

    creator = relationship("EfilingUser", foreign_keys=[created_by])
    assignee = relationship("EfilingUser", foreign_keys=[assigned_to])
    workflows = relationship("FileWorkflow", back_populates="file")
    movements = relationship(
        "FileMovement", back_populates="file", order_by="FileMovement.created_at"
    )

    def __repr__(self):
        return f"<EfilingFile(number='{self.file_number}', status='{self.status}')>"


class FileMovement(BaseModel):
    """Append-only audit row recording one assignment"""

    __tablename__ = "efiling_file_movements"

    file_id = Column(GUID(), ForeignKey("efiling_files.id"), nullable=False, index=True)
    from_user_id = Column(GUID(), ForeignKey("efiling_users.id"), nullable=True)
    to_user_id = Column(GUID(), ForeignKey("efiling_users.id"), nullable=True)
    from_department_id = Column(GUID(), ForeignKey("efiling_departments.id"), nullable=True)
    to_department_id = Column(GUID(), ForeignKey("efiling_departments.id"), nullable=True)
    action_type = Column(
        Enum(MovementType, name="movement_type"), default=MovementType.ASSIGNED, nullable=False
    )
    remarks = Column(Text, nullable=True)

    file = relationship("EfilingFile", back_populates="movements")
    from_user = relationship("EfilingUser", foreign_keys=[from_user_id])
    to_user = relationship("EfilingUser", foreign_keys=[to_user_id])

    def __repr__(self):
        return f"<FileMovement(file='{self.file_id}', {self.from_user_id} -> {self.to_user_id})>"


class DocumentSignature(BaseModel):
    """Signature applied to a file, written by the signature collaborator"""

    __tablename__ = "efiling_document_signatures"

    file_id = Column(GUID(), ForeignKey("efiling_files.id"), nullable=False, index=True)
    user_id = Column(GUID(), ForeignKey("efiling_users.id"), nullable=True)
    user_name = Column(String(255), nullable=True)
    user_role = Column(String(100), nullable=True)
    signature_type = Column(String(50), nullable=True)  # scanned, drawn, typed
    timestamp = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)


class FileComment(BaseModel):
    __tablename__ = "efiling_comments"

    file_id = Column(GUID(), ForeignKey("efiling_files.id"), nullable=False, index=True)
    user_id = Column(GUID(), ForeignKey("efiling_users.id"), nullable=False)
    comment = Column(Text, nullable=False)
    is_deleted = Column(Boolean, default=False, nullable=False)

    author = relationship("EfilingUser")
