"""
Tests for notification writes and polling
"""

from unittest.mock import patch

import pytest

from efiling.core.exceptions import NotFound
from efiling.models import FileComment, FileMovement, Notification
from efiling.services.notification_service import NotificationService, unique_recipients


class TestUniqueRecipients:
    def test_drops_actor_duplicates_and_empty_ids(self):
        assert unique_recipients("a", ["b", None, "a", "c", "b", ""]) == ["b", "c"]

    def test_without_actor(self):
        assert unique_recipients(None, ["x", "x"]) == ["x"]

    def test_only_actor_yields_nothing(self):
        assert unique_recipients("a", ["a"]) == []


class TestNotifyStateChange:
    def test_writes_one_row_per_recipient(self, db_session, review_chain):
        service = NotificationService(db_session)

        written = service.notify_state_change(
            review_chain.file.id,
            review_chain.clerk.id,
            [review_chain.engineer.id, review_chain.director.id, review_chain.engineer.id],
            "File moved",
            priority="high",
            action_required=True,
            metadata={"stage": "Review"},
        )
        db_session.commit()

        assert written == 2
        rows = db_session.query(Notification).all()
        assert {row.user_id for row in rows} == {review_chain.engineer.id, review_chain.director.id}
        assert all(row.priority == "high" and row.action_required for row in rows)
        assert all(row.notification_metadata == {"stage": "Review"} for row in rows)
        assert all(row.is_read is False for row in rows)

    def test_no_recipients_is_a_no_op(self, db_session, review_chain):
        written = NotificationService(db_session).notify_state_change(
            review_chain.file.id, review_chain.clerk.id, [review_chain.clerk.id, None], "Self"
        )

        assert written == 0
        assert db_session.query(Notification).count() == 0

    def test_failure_keeps_callers_pending_write(self, db_session, review_chain):
        db_session.add(
            FileComment(file_id=review_chain.file.id, user_id=review_chain.clerk.id, comment="Kept")
        )

        with patch(
            "efiling.services.notification_service.Notification",
            side_effect=RuntimeError("insert failed"),
        ):
            written = NotificationService(db_session).notify_state_change(
                review_chain.file.id, review_chain.clerk.id, [review_chain.engineer.id], "Lost"
            )
        db_session.commit()

        assert written == 0
        assert db_session.query(FileComment).filter(FileComment.comment == "Kept").count() == 1
        assert db_session.query(Notification).count() == 0


class TestStakeholders:
    def test_collects_creator_assignees_and_movement_targets(self, db_session, review_chain):
        db_session.add(
            FileMovement(
                file_id=review_chain.file.id,
                from_user_id=review_chain.clerk.id,
                to_user_id=review_chain.director.id,
            )
        )
        review_chain.workflow.current_assignee_id = review_chain.engineer.id
        db_session.commit()

        stakeholders = NotificationService(db_session).stakeholders(review_chain.file.id)

        assert stakeholders == [
            review_chain.clerk.id,
            review_chain.engineer.id,
            review_chain.director.id,
        ]

    def test_unknown_file_has_no_stakeholders(self, db_session):
        assert NotificationService(db_session).stakeholders("missing") == []


class TestPolling:
    @pytest.fixture
    def inbox(self, db_session, review_chain):
        service = NotificationService(db_session)
        service.notify_state_change(
            review_chain.file.id, review_chain.clerk.id, [review_chain.engineer.id], "First"
        )
        service.notify_state_change(
            review_chain.file.id, review_chain.clerk.id, [review_chain.engineer.id], "Second"
        )
        db_session.commit()
        return service

    @pytest.mark.asyncio
    async def test_lists_callers_notifications(self, inbox, review_chain):
        result = await inbox.list_for_user(review_chain.engineer.id)

        assert result["total"] == 2
        assert result["unread_count"] == 2
        assert {n.message for n in result["notifications"]} == {"First", "Second"}

        other = await inbox.list_for_user(review_chain.director.id)
        assert other["total"] == 0

    @pytest.mark.asyncio
    async def test_mark_read_updates_unread_count(self, inbox, review_chain):
        listing = await inbox.list_for_user(review_chain.engineer.id)
        target = listing["notifications"][0]

        marked = await inbox.mark_read(target.id, review_chain.engineer.id)

        assert marked.is_read is True
        assert marked.read_at is not None
        unread = await inbox.list_for_user(review_chain.engineer.id, unread_only=True)
        assert unread["total"] == 1
        assert unread["unread_count"] == 1

    @pytest.mark.asyncio
    async def test_other_users_cannot_mark_read(self, inbox, review_chain):
        listing = await inbox.list_for_user(review_chain.engineer.id)

        with pytest.raises(NotFound):
            await inbox.mark_read(listing["notifications"][0].id, review_chain.director.id)
