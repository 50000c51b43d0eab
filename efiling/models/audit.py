"""
User action log
High-level record of who did what to which e-filing entity
"""

from sqlalchemy import Column, String, Text

from efiling.models.base import GUID, JSON, BaseModel


class UserAction(BaseModel):
    __tablename__ = "efiling_user_actions"

    entity_type = Column(String(100), nullable=False, index=True)  # efiling_file, efiling_workflow
    entity_id = Column(String(100), nullable=False, index=True)
    action = Column(String(100), nullable=False, index=True)  # FILE_ASSIGNED, WORKFLOW_STARTED

    user_id = Column(GUID(), nullable=True, index=True)
    details = Column(JSON, nullable=True)

    request_id = Column(String(100), nullable=True)
    ip_address = Column(String(45), nullable=True)
    user_agent = Column(Text, nullable=True)

    def __repr__(self):
        return f"<UserAction(action='{self.action}', entity='{self.entity_type}:{self.entity_id}')>"
