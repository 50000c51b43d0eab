"""
User action logging
Best-effort record of high-level e-filing actions, written after the
business transaction has committed
"""

import logging
from typing import Any, Dict, Optional

from sqlalchemy.orm import Session

from efiling.models.audit import UserAction

logger = logging.getLogger(__name__)


class ActionLogger:
    """Writes UserAction rows; failures are logged and never propagate"""

    def __init__(self, db: Session):
        self.db = db

    def log_action(
        self,
        action: str,
        entity_type: str,
        entity_id: str,
        user_id: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
        request_id: Optional[str] = None,
        ip_address: Optional[str] = None,
        user_agent: Optional[str] = None,
    ) -> bool:
        try:
            entry = UserAction(
                action=action,
                entity_type=entity_type,
                entity_id=str(entity_id),
                user_id=user_id,
                details=details or {},
                request_id=request_id,
                ip_address=ip_address,
                user_agent=user_agent,
            )
            self.db.add(entry)
            self.db.commit()

            logger.info(f"User action logged: {action} on {entity_type}:{entity_id}")
            return True

        except Exception as e:
            logger.error(f"Failed to log user action {action}: {str(e)}")
            self.db.rollback()
            return False
