"""
Tests for template, transition and role-group persistence
"""

import pytest

from efiling.core.exceptions import InvalidState, NotFound
from efiling.models import RoleGroup, StageTransition, WorkflowStage
from efiling.services.workflow_store import WorkflowStore


class TestTemplates:
    def test_create_template_with_stages(self, db_session):
        store = WorkflowStore(db_session)

        template = store.create_template(
            "Tender approval",
            file_type="TENDER",
            stages=[
                {"stage_name": "Scrutiny", "stage_order": 2, "sla_hours": 72},
                {"stage_name": "Intake", "stage_order": 1},
            ],
        )

        assert [s.stage_name for s in template.stages] == ["Intake", "Scrutiny"]
        assert store.first_stage(template.id).stage_name == "Intake"
        assert store.get_template(template.id).file_type == "TENDER"

    def test_duplicate_stage_order_is_rejected(self, db_session):
        with pytest.raises(InvalidState):
            WorkflowStore(db_session).create_template(
                "Broken",
                stages=[
                    {"stage_name": "A", "stage_order": 1},
                    {"stage_name": "B", "stage_order": 1},
                ],
            )

    def test_unknown_role_group_is_not_found(self, db_session):
        with pytest.raises(NotFound):
            WorkflowStore(db_session).create_template(
                "Gated",
                stages=[{"stage_name": "A", "stage_order": 1, "role_group_id": "missing"}],
            )

    def test_first_stage_skips_inactive_stages(self, db_session):
        store = WorkflowStore(db_session)
        template = store.create_template(
            "Partially retired",
            stages=[
                {"stage_name": "Old intake", "stage_order": 1, "is_active": False},
                {"stage_name": "Intake", "stage_order": 2},
            ],
        )

        assert store.first_stage(template.id).stage_name == "Intake"

    def test_missing_template_is_not_found(self, db_session):
        with pytest.raises(NotFound):
            WorkflowStore(db_session).get_template("missing")


class TestTransitions:
    def test_active_transitions_are_ordered_by_target_stage(self, db_session, review_chain):
        store = WorkflowStore(db_session)
        skip = WorkflowStage(
            template_id=review_chain.template.id, stage_name="Fast track", stage_order=5
        )
        retired = WorkflowStage(
            template_id=review_chain.template.id,
            stage_name="Retired",
            stage_order=4,
            is_active=False,
        )
        db_session.add_all([skip, retired])
        db_session.commit()
        store.add_transition(review_chain.draft.id, skip.id)
        store.add_transition(review_chain.draft.id, retired.id)
        store.add_transition(review_chain.draft.id, review_chain.approved.id)

        targets = [t.to_stage.stage_name for t in store.active_transitions(review_chain.draft.id)]

        assert targets == ["Review", "Approved", "Fast track"]

    def test_add_transition_reactivates_existing_edge(self, db_session, review_chain):
        edge = (
            db_session.query(StageTransition)
            .filter(StageTransition.from_stage_id == review_chain.draft.id)
            .one()
        )
        edge.is_active = False
        db_session.commit()
        store = WorkflowStore(db_session)
        assert store.active_transitions(review_chain.draft.id) == []

        again = store.add_transition(review_chain.draft.id, review_chain.review.id)

        assert again.id == edge.id
        assert again.is_active is True
        assert db_session.query(StageTransition).count() == 2

    def test_cross_template_transition_is_rejected(self, db_session, review_chain):
        store = WorkflowStore(db_session)
        other = store.create_template("Other", stages=[{"stage_name": "Solo", "stage_order": 1}])

        with pytest.raises(InvalidState):
            store.add_transition(review_chain.draft.id, other.stages[0].id)

    def test_self_transition_is_rejected(self, db_session, review_chain):
        with pytest.raises(InvalidState):
            WorkflowStore(db_session).add_transition(review_chain.draft.id, review_chain.draft.id)

    def test_unknown_stage_is_not_found(self, db_session, review_chain):
        with pytest.raises(NotFound):
            WorkflowStore(db_session).add_transition(review_chain.draft.id, "missing")


class TestRoleGroupPatterns:
    def test_ungated_stage(self, db_session, review_chain):
        assert WorkflowStore(db_session).role_group_patterns(review_chain.draft) is None

    def test_gated_stage(self, db_session, review_chain):
        assert WorkflowStore(db_session).role_group_patterns(review_chain.review) == ["EE*"]

    def test_inactive_group_yields_no_patterns(self, db_session, review_chain):
        review_chain.engineers.is_active = False
        db_session.commit()

        assert WorkflowStore(db_session).role_group_patterns(review_chain.review) == []

    def test_missing_group_yields_no_patterns(self, db_session, review_chain):
        orphan = WorkflowStage(
            template_id=review_chain.template.id,
            stage_name="Orphan",
            stage_order=7,
            role_group_id="00000000-0000-0000-0000-000000000000",
        )

        assert WorkflowStore(db_session).role_group_patterns(orphan) == []


class TestRoleGroups:
    def test_create_normalizes_comma_separated_codes(self, db_session):
        group = WorkflowStore(db_session).create_role_group(
            "Superintending engineers", "SE_GROUP", " SE, SEEXEN ,,"
        )

        assert group.role_codes == ["SE", "SEEXEN"]
        assert group.is_active is True

    def test_create_with_locations(self, db_session):
        group = WorkflowStore(db_session).create_role_group(
            "Zonal", "ZONAL", ["DIR"], locations=[{"zone_id": "z1"}, {"town_id": "t1"}]
        )

        assert sorted((loc.zone_id or "", loc.town_id or "") for loc in group.locations) == [
            ("", "t1"),
            ("z1", ""),
        ]

    def test_duplicate_code_is_a_conflict(self, db_session):
        store = WorkflowStore(db_session)
        store.create_role_group("Directors", "DIRS", ["DIR"])

        with pytest.raises(InvalidState) as exc_info:
            store.create_role_group("Directors again", "DIRS", ["DIR*"])

        assert exc_info.value.status_code == 409

    def test_update_replaces_fields_and_locations(self, db_session):
        store = WorkflowStore(db_session)
        group = store.create_role_group(
            "Directors", "DIRS", ["DIR"], locations=[{"zone_id": "z1"}]
        )

        updated = store.update_role_group(
            group.id, role_codes="DIR, DDIR", description="Directorate", locations=[]
        )

        assert updated.role_codes == ["DIR", "DDIR"]
        assert updated.description == "Directorate"
        assert updated.locations == []
        assert updated.name == "Directors"

    def test_delete_is_soft(self, db_session):
        store = WorkflowStore(db_session)
        group = store.create_role_group("Directors", "DIRS", ["DIR"])

        store.delete_role_group(group.id)

        row = db_session.query(RoleGroup).filter(RoleGroup.id == group.id).one()
        assert row.is_active is False

    def test_update_unknown_group_is_not_found(self, db_session):
        with pytest.raises(NotFound):
            WorkflowStore(db_session).update_role_group("missing", name="x")
