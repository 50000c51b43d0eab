"""
Notification model
Rows read by polling clients; only read state is changed after insert
"""

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, String, Text
from sqlalchemy.orm import relationship

from efiling.models.base import GUID, JSON, BaseModel


class Notification(BaseModel):
    __tablename__ = "efiling_notifications"

    user_id = Column(GUID(), ForeignKey("efiling_users.id"), nullable=False, index=True)
    file_id = Column(GUID(), ForeignKey("efiling_files.id"), nullable=True, index=True)

    type = Column(String(100), nullable=False)  # file_assigned, workflow_action, comment_added
    message = Column(Text, nullable=False)
    priority = Column(String(20), default="normal", nullable=False)  # low, normal, high
    action_required = Column(Boolean, default=False, nullable=False)

    is_read = Column(Boolean, default=False, nullable=False)
    read_at = Column(DateTime(timezone=True), nullable=True)
    notification_metadata = Column(JSON, nullable=True)

    recipient = relationship("EfilingUser")
    file = relationship("EfilingFile")

    def __repr__(self):
        return f"<Notification(type='{self.type}', recipient='{self.user_id}', read={self.is_read})>"
