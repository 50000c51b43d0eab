"""
File comments
Comments feed the timeline and notify everyone involved with the file
"""

import logging
from typing import Any, Dict

from fastapi import HTTPException
from sqlalchemy.orm import Session

from efiling.core.exceptions import EfilingError, Forbidden, InvalidState, NotFound
from efiling.models.file import EfilingFile, FileComment
from efiling.models.user import EfilingUser
from efiling.services.notification_service import NotificationService

logger = logging.getLogger(__name__)


class CommentService:
    def __init__(self, db: Session):
        self.db = db
        self.notifier = NotificationService(db)

    async def add_comment(self, file_id: str, actor_user_id: str, text: str) -> Dict[str, Any]:
        try:
            actor = (
                self.db.query(EfilingUser)
                .filter(EfilingUser.user_id == actor_user_id, EfilingUser.is_active == True)
                .first()
            )
            if actor is None:
                raise Forbidden("You are not an active e-filing user")

            file = (
                self.db.query(EfilingFile)
                .filter(EfilingFile.id == file_id, EfilingFile.is_deleted == False)
                .first()
            )
            if file is None:
                raise NotFound("File not found")

            text = (text or "").strip()
            if not text:
                raise InvalidState("Comment cannot be empty")

            comment = FileComment(file_id=file.id, user_id=actor.id, comment=text)
            self.db.add(comment)
            self.db.flush()

            self.notifier.notify_state_change(
                file.id,
                actor.id,
                self.notifier.stakeholders(file.id),
                f"{actor.display_name} commented on file {file.file_number}",
                priority="low",
                action_required=False,
                notification_type="comment_added",
            )

            self.db.commit()
            self.db.refresh(comment)

        except HTTPException:
            self.db.rollback()
            raise
        except Exception as e:
            logger.error(f"Error adding comment to file {file_id}: {str(e)}")
            self.db.rollback()
            raise EfilingError("Failed to add comment")

        logger.info(f"Comment {comment.id} added to file {file_id}")
        return {
            "id": comment.id,
            "file_id": comment.file_id,
            "user_id": comment.user_id,
            "user_name": actor.display_name,
            "comment": comment.comment,
            "created_at": comment.created_at,
        }
