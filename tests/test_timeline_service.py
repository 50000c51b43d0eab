"""
Tests for the file timeline
"""

from datetime import datetime, timedelta
from unittest.mock import patch

import pytest
from sqlalchemy.exc import OperationalError

from efiling.core.exceptions import NotFound
from efiling.models import DocumentSignature, FileComment, FileMovement
from efiling.services.timeline_service import TimelineService
from efiling.services.workflow_service import WorkflowService


@pytest.mark.asyncio
async def test_new_file_has_only_created_event(db_session, bare_file):
    events = await TimelineService(db_session).timeline(bare_file.id)

    assert len(events) == 1
    assert events[0]["type"] == "CREATED"
    assert events[0]["meta"]["by"] == "Clerk One"
    assert events[0]["meta"]["file_number"] == "KWSC/WORKS/2026/0002"


@pytest.mark.asyncio
async def test_assignment_appends_assigned_event(db_session, review_chain):
    await WorkflowService(db_session).assign(
        review_chain.file.id,
        review_chain.clerk.user_id,
        review_chain.engineer.id,
        remarks="For technical review",
    )

    events = await TimelineService(db_session).timeline(review_chain.file.id)

    assert [e["type"] for e in events] == ["CREATED", "ASSIGNED"]
    assigned = events[-1]
    assert assigned["meta"]["to"] == "Executive Engineer"
    assert assigned["meta"]["to_user_id"] == review_chain.engineer.id
    assert assigned["meta"]["from"] == "Clerk One"
    assert assigned["meta"]["to_designation"] == "EEXEN"
    assert assigned["meta"]["remarks"] == "For technical review"
    assert assigned["meta"]["action_type"] == "ASSIGNED"
    assert assigned["timestamp"] >= events[0]["timestamp"]


@pytest.mark.asyncio
async def test_timeline_is_idempotent(db_session, review_chain):
    await WorkflowService(db_session).assign(
        review_chain.file.id, review_chain.clerk.user_id, review_chain.engineer.id
    )
    service = TimelineService(db_session)

    first = await service.timeline(review_chain.file.id)
    second = await service.timeline(review_chain.file.id)

    assert first == second


@pytest.mark.asyncio
async def test_events_are_merged_chronologically(db_session, review_chain):
    file = review_chain.file
    created = datetime(2026, 3, 1, 9, 0, 0)
    file.created_at = created
    db_session.add_all(
        [
            FileMovement(
                file_id=file.id,
                from_user_id=review_chain.clerk.id,
                to_user_id=review_chain.engineer.id,
                created_at=created + timedelta(hours=3),
            ),
            DocumentSignature(
                file_id=file.id,
                user_id=review_chain.engineer.id,
                user_name="Executive Engineer",
                user_role="EEXEN",
                signature_type="typed",
                timestamp=created + timedelta(hours=2),
            ),
            FileComment(
                file_id=file.id,
                user_id=review_chain.clerk.id,
                comment="Estimate attached",
                created_at=created + timedelta(hours=1),
            ),
        ]
    )
    db_session.commit()

    events = await TimelineService(db_session).timeline(file.id)

    assert [e["type"] for e in events] == ["CREATED", "COMMENTED", "SIGNED", "ASSIGNED"]
    assert events[1]["meta"] == {"user": "Clerk One", "comment": "Estimate attached"}
    assert events[2]["meta"] == {"role": "EEXEN", "sign_type": "typed"}
    timestamps = [e["timestamp"] for e in events]
    assert timestamps == sorted(timestamps)


@pytest.mark.asyncio
async def test_created_event_wins_timestamp_ties(db_session, review_chain):
    file = review_chain.file
    created = datetime(2026, 3, 1, 9, 0, 0)
    file.created_at = created
    db_session.add(
        FileMovement(
            file_id=file.id,
            from_user_id=review_chain.clerk.id,
            to_user_id=review_chain.engineer.id,
            created_at=created,
        )
    )
    db_session.commit()

    events = await TimelineService(db_session).timeline(file.id)

    assert [e["type"] for e in events] == ["CREATED", "ASSIGNED"]


@pytest.mark.asyncio
async def test_revoked_signatures_and_deleted_comments_are_hidden(db_session, review_chain):
    file_id = review_chain.file.id
    db_session.add_all(
        [
            DocumentSignature(file_id=file_id, user_name="Director Works", is_active=False),
            FileComment(
                file_id=file_id,
                user_id=review_chain.clerk.id,
                comment="Withdrawn",
                is_deleted=True,
            ),
        ]
    )
    db_session.commit()

    events = await TimelineService(db_session).timeline(file_id)

    assert [e["type"] for e in events] == ["CREATED"]


@pytest.mark.asyncio
async def test_missing_signature_table_is_skipped(db_session, review_chain):
    db_session.add(
        FileComment(file_id=review_chain.file.id, user_id=review_chain.clerk.id, comment="Noted")
    )
    db_session.commit()
    service = TimelineService(db_session)

    with patch.object(
        service,
        "_signature_events",
        side_effect=OperationalError("SELECT", {}, Exception("no such table")),
    ):
        events = await service.timeline(review_chain.file.id)

    assert [e["type"] for e in events] == ["CREATED", "COMMENTED"]


@pytest.mark.asyncio
async def test_unknown_file_is_not_found(db_session):
    with pytest.raises(NotFound):
        await TimelineService(db_session).timeline("00000000-0000-0000-0000-000000000000")
