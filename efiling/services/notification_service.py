"""
Notification Emitter
Inserts notification rows for parties affected by a file state change.
Delivery is by client polling; nothing is pushed from here.
"""

import logging
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional

from sqlalchemy.orm import Session

from efiling.core.exceptions import NotFound
from efiling.core.metrics import record_notification_failure, record_notifications_written
from efiling.models.file import EfilingFile, FileMovement
from efiling.models.notification import Notification
from efiling.models.workflow import FileWorkflow, WorkflowStatus

logger = logging.getLogger(__name__)


def unique_recipients(actor_id: Optional[str], user_ids: Iterable[Optional[str]]) -> List[str]:
    """Drop empty ids and the actor, keep first-seen order"""
    recipients = []
    for user_id in user_ids:
        if not user_id or user_id == actor_id or user_id in recipients:
            continue
        recipients.append(user_id)
    return recipients


class NotificationService:
    def __init__(self, db: Session):
        self.db = db

    def notify_state_change(
        self,
        file_id: Optional[str],
        actor_id: Optional[str],
        affected_user_ids: Iterable[Optional[str]],
        message: str,
        priority: str = "normal",
        action_required: bool = False,
        notification_type: str = "workflow_action",
        metadata: Optional[Dict[str, Any]] = None,
    ) -> int:
        """
        Write one notification per affected user inside the caller's transaction.

        Runs in a SAVEPOINT: a failed insert is logged and counted, the
        savepoint is discarded and the caller's transaction carries on.
        Returns the number of rows written.
        """
        recipients = unique_recipients(actor_id, affected_user_ids)
        if not recipients:
            return 0

        # Pending parent writes go out before the savepoint opens
        self.db.flush()

        try:
            with self.db.begin_nested():
                for user_id in recipients:
                    self.db.add(
                        Notification(
                            user_id=user_id,
                            file_id=file_id,
                            type=notification_type,
                            message=message,
                            priority=priority,
                            action_required=action_required,
                            notification_metadata=metadata,
                        )
                    )
        except Exception as e:
            logger.error(
                f"Failed to write {notification_type} notifications for file {file_id}: {str(e)}"
            )
            record_notification_failure(notification_type)
            return 0

        record_notifications_written(notification_type, len(recipients))
        logger.debug(f"Queued {len(recipients)} {notification_type} notifications for file {file_id}")
        return len(recipients)

    def stakeholders(self, file_id: str) -> List[str]:
        """Creator, current assignee and everyone the file was ever marked to"""
        file = self.db.query(EfilingFile).filter(EfilingFile.id == file_id).first()
        if file is None:
            return []

        candidates = [file.created_by, file.assigned_to]

        workflow = (
            self.db.query(FileWorkflow)
            .filter(
                FileWorkflow.file_id == file_id,
                FileWorkflow.workflow_status == WorkflowStatus.IN_PROGRESS,
            )
            .first()
        )
        if workflow is not None:
            candidates.append(workflow.current_assignee_id)

        movements = (
            self.db.query(FileMovement.to_user_id)
            .filter(FileMovement.file_id == file_id)
            .order_by(FileMovement.created_at)
            .all()
        )
        candidates.extend(row.to_user_id for row in movements)

        return unique_recipients(None, candidates)

    async def list_for_user(
        self,
        efiling_user_id: str,
        unread_only: bool = False,
        limit: int = 50,
        offset: int = 0,
    ) -> Dict[str, Any]:
        query = self.db.query(Notification).filter(Notification.user_id == efiling_user_id)
        if unread_only:
            query = query.filter(Notification.is_read == False)

        total = query.count()
        unread_count = (
            self.db.query(Notification)
            .filter(Notification.user_id == efiling_user_id, Notification.is_read == False)
            .count()
        )
        notifications = (
            query.order_by(Notification.created_at.desc()).offset(offset).limit(limit).all()
        )

        return {
            "notifications": notifications,
            "total": total,
            "unread_count": unread_count,
            "limit": limit,
            "offset": offset,
        }

    async def mark_read(self, notification_id: str, efiling_user_id: str) -> Notification:
        """Only the recipient may change read state"""
        notification = (
            self.db.query(Notification)
            .filter(Notification.id == notification_id, Notification.user_id == efiling_user_id)
            .first()
        )
        if notification is None:
            raise NotFound("Notification not found")

        if not notification.is_read:
            notification.is_read = True
            notification.read_at = datetime.utcnow()
            self.db.commit()
            self.db.refresh(notification)

        return notification
