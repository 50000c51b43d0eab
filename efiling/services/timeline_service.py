"""
Timeline Aggregator
Chronological, read-only view of a file's history: creation, assignments,
signatures and comments
"""

import logging
from typing import Any, Callable, Dict, List

from sqlalchemy.exc import OperationalError, ProgrammingError
from sqlalchemy.orm import Session

from efiling.core.exceptions import NotFound
from efiling.models.file import DocumentSignature, EfilingFile, FileComment, FileMovement
from efiling.services.sla import naive_utc

logger = logging.getLogger(__name__)

EVENT_CREATED = "CREATED"
EVENT_ASSIGNED = "ASSIGNED"
EVENT_SIGNED = "SIGNED"
EVENT_COMMENTED = "COMMENTED"


def _event(event_type: str, title: str, timestamp, meta: Dict[str, Any]) -> Dict[str, Any]:
    return {"type": event_type, "title": title, "timestamp": timestamp, "meta": meta}


class TimelineService:
    """Builds timelines; performs no writes"""

    def __init__(self, db: Session):
        self.db = db

    async def timeline(self, file_id: str) -> List[Dict[str, Any]]:
        file = self.db.query(EfilingFile).filter(EfilingFile.id == file_id).first()
        if file is None:
            raise NotFound("File not found")

        events = [
            _event(
                EVENT_CREATED,
                "File created",
                file.created_at,
                {
                    "by": file.creator.display_name if file.creator else None,
                    "file_number": file.file_number,
                },
            )
        ]
        events.extend(self._movement_events(file.id))
        events.extend(self._optional_events("signatures", lambda: self._signature_events(file.id)))
        events.extend(self._optional_events("comments", lambda: self._comment_events(file.id)))

        # Stable sort keeps CREATED first and insertion order on equal timestamps
        indexed = list(enumerate(events))
        indexed.sort(
            key=lambda item: (
                naive_utc(item[1]["timestamp"]),
                item[1]["type"] != EVENT_CREATED,
                item[0],
            )
        )
        return [event for _, event in indexed]

    def _movement_events(self, file_id: str) -> List[Dict[str, Any]]:
        movements = (
            self.db.query(FileMovement)
            .filter(FileMovement.file_id == file_id)
            .order_by(FileMovement.created_at)
            .all()
        )

        events = []
        for movement in movements:
            from_user = movement.from_user
            to_user = movement.to_user
            to_name = to_user.display_name if to_user else None
            events.append(
                _event(
                    EVENT_ASSIGNED,
                    f"Marked to {to_name or 'user'}",
                    movement.created_at,
                    {
                        "from": from_user.display_name if from_user else None,
                        "to": to_name,
                        "to_user_id": movement.to_user_id,
                        "from_designation": from_user.designation if from_user else None,
                        "to_designation": to_user.designation if to_user else None,
                        "location": to_user.location_label if to_user else None,
                        "remarks": movement.remarks,
                        "action_type": movement.action_type.value,
                    },
                )
            )
        return events

    def _signature_events(self, file_id: str) -> List[Dict[str, Any]]:
        signatures = (
            self.db.query(DocumentSignature)
            .filter(DocumentSignature.file_id == file_id, DocumentSignature.is_active == True)
            .order_by(DocumentSignature.timestamp)
            .all()
        )
        return [
            _event(
                EVENT_SIGNED,
                f"Signed by {signature.user_name or 'user'}",
                signature.timestamp,
                {"role": signature.user_role, "sign_type": signature.signature_type},
            )
            for signature in signatures
        ]

    def _comment_events(self, file_id: str) -> List[Dict[str, Any]]:
        comments = (
            self.db.query(FileComment)
            .filter(FileComment.file_id == file_id, FileComment.is_deleted == False)
            .order_by(FileComment.created_at)
            .all()
        )
        events = []
        for comment in comments:
            author = comment.author.display_name if comment.author else None
            events.append(
                _event(
                    EVENT_COMMENTED,
                    f"Comment by {author or 'user'}",
                    comment.created_at,
                    {"user": author, "comment": comment.comment},
                )
            )
        return events

    def _optional_events(
        self, source: str, loader: Callable[[], List[Dict[str, Any]]]
    ) -> List[Dict[str, Any]]:
        """Events from a table that may not exist in every deployment"""
        try:
            with self.db.begin_nested():
                return loader()
        except (OperationalError, ProgrammingError) as e:
            logger.warning(f"Timeline skipped {source}: {str(e)}")
            return []
