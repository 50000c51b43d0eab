"""
SLA helpers
Deadlines are stored on the file and workflow; breach state is derived on read
"""

from datetime import datetime, timedelta
from typing import Any, Dict, Optional

from efiling.models.workflow import WorkflowStatus

SLA_PENDING = "PENDING"
SLA_ACTIVE = "ACTIVE"
SLA_BREACHED = "BREACHED"
SLA_CLOSED = "CLOSED"


def naive_utc(value: Optional[datetime]) -> Optional[datetime]:
    # SQLite returns naive values, PostgreSQL aware ones
    if value is None or value.tzinfo is None:
        return value
    return value.replace(tzinfo=None) - value.utcoffset()


def _status_value(status) -> Optional[str]:
    if isinstance(status, WorkflowStatus):
        return status.value
    return status


def compute_deadline(hours: Optional[int], now: Optional[datetime] = None) -> Optional[datetime]:
    """Deadline ``hours`` after ``now``; None when the stage has no SLA"""
    if hours is None:
        return None
    return (now or datetime.utcnow()) + timedelta(hours=hours)


def is_breached(deadline: Optional[datetime], status, now: Optional[datetime] = None) -> bool:
    """A deadline counts as breached only while the workflow is still running"""
    if deadline is None or _status_value(status) != WorkflowStatus.IN_PROGRESS.value:
        return False
    return naive_utc(deadline) < (now or datetime.utcnow())


def sla_status(deadline: Optional[datetime], status, now: Optional[datetime] = None) -> Dict[str, Any]:
    """Summarize SLA state for display"""
    now = now or datetime.utcnow()
    deadline = naive_utc(deadline)

    if _status_value(status) != WorkflowStatus.IN_PROGRESS.value:
        state = SLA_CLOSED
    elif deadline is None:
        state = SLA_PENDING
    elif deadline < now:
        state = SLA_BREACHED
    else:
        state = SLA_ACTIVE

    remaining_hours = None
    if deadline is not None:
        remaining_hours = round((deadline - now).total_seconds() / 3600, 2)

    return {
        "status": state,
        "deadline": deadline,
        "remaining_hours": remaining_hours,
        "breached": state == SLA_BREACHED,
    }
