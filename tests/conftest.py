"""
Pytest configuration and fixtures for the e-filing workflow tests
"""

import os
from datetime import datetime
from types import SimpleNamespace
from typing import Generator

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

# Set test environment variable before any imports
os.environ["TESTING"] = "true"

from efiling.core.security import JWTManager
from efiling.db.database import Base, enable_sqlite_savepoints, get_db
from efiling.main import app
from efiling.models import (
    EfilingFile,
    EfilingRole,
    EfilingUser,
    FileStatus,
    FileWorkflow,
    RoleGroup,
    StageTransition,
    User,
    WorkflowStage,
    WorkflowTemplate,
)

SQLALCHEMY_DATABASE_URL = "sqlite://"

engine = create_engine(
    SQLALCHEMY_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
enable_sqlite_savepoints(engine)
Base.metadata.create_all(bind=engine)

TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture(scope="function", autouse=True)
def db_session():
    """Fresh session per test; every table is emptied afterwards"""
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.rollback()
        for table in reversed(Base.metadata.sorted_tables):
            db.execute(table.delete())
        db.commit()
        db.close()


@pytest.fixture(scope="function")
def client(db_session) -> Generator:
    """Test client sharing the test's database session"""

    def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def make_participant(db_session):
    """Factory for a system user with an e-filing profile in the given role"""

    def _make(name, role_code, is_active=True, system_role=None, **profile_fields):
        role = db_session.query(EfilingRole).filter(EfilingRole.code == role_code).first()
        if role is None:
            role = EfilingRole(code=role_code, name=role_code)
            db_session.add(role)
            db_session.flush()

        user = User(
            name=name,
            email=f"{name.lower().replace(' ', '.')}@kwsc.gov.pk",
            role=system_role,
            is_active=True,
        )
        db_session.add(user)
        db_session.flush()

        participant = EfilingUser(
            user_id=user.id,
            efiling_role_id=role.id,
            designation=role_code,
            is_active=is_active,
            **profile_fields,
        )
        db_session.add(participant)
        db_session.commit()
        db_session.refresh(participant)
        return participant

    return _make


@pytest.fixture
def admin_user(db_session):
    """System administrator without an e-filing profile"""
    user = User(name="System Admin", email="admin@kwsc.gov.pk", role=1, is_active=True)
    db_session.add(user)
    db_session.commit()
    db_session.refresh(user)
    return user


@pytest.fixture
def review_chain(db_session, make_participant):
    """
    Draft (ungated) -> Review (EE*, 48h) -> Approved (DIR, 24h),
    with a file sitting at Draft assigned to its creator, a clerk
    """
    clerk = make_participant("Clerk One", "CLERK")
    engineer = make_participant("Executive Engineer", "EEXEN")
    director = make_participant("Director Works", "DIR")

    engineers = RoleGroup(name="Engineers", code="ENGINEERS", role_codes=["EE*"])
    directors = RoleGroup(name="Directors", code="DIRECTORS", role_codes=["DIR"])
    db_session.add_all([engineers, directors])
    db_session.flush()

    template = WorkflowTemplate(name="Works approval", file_type="WORKS")
    db_session.add(template)
    db_session.flush()

    draft = WorkflowStage(template_id=template.id, stage_name="Draft", stage_order=1)
    review = WorkflowStage(
        template_id=template.id,
        stage_name="Review",
        stage_order=2,
        role_group_id=engineers.id,
        sla_hours=48,
    )
    approved = WorkflowStage(
        template_id=template.id,
        stage_name="Approved",
        stage_order=3,
        role_group_id=directors.id,
        sla_hours=24,
    )
    db_session.add_all([draft, review, approved])
    db_session.flush()

    db_session.add_all(
        [
            StageTransition(from_stage_id=draft.id, to_stage_id=review.id),
            StageTransition(from_stage_id=review.id, to_stage_id=approved.id),
        ]
    )

    file = EfilingFile(
        file_number="KWSC/WORKS/2026/0001",
        subject="Replacement of sewerage line, Block 7",
        created_by=clerk.id,
        assigned_to=clerk.id,
        status=FileStatus.IN_PROGRESS,
    )
    db_session.add(file)
    db_session.flush()

    workflow = FileWorkflow(
        file_id=file.id,
        template_id=template.id,
        current_stage_id=draft.id,
        current_assignee_id=clerk.id,
        created_by=clerk.id,
        started_at=datetime.utcnow(),
    )
    db_session.add(workflow)
    db_session.commit()

    return SimpleNamespace(
        clerk=clerk,
        engineer=engineer,
        director=director,
        engineers=engineers,
        directors=directors,
        template=template,
        draft=draft,
        review=review,
        approved=approved,
        file=file,
        workflow=workflow,
    )


@pytest.fixture
def bare_file(db_session, review_chain):
    """A file with no workflow started"""
    file = EfilingFile(
        file_number="KWSC/WORKS/2026/0002",
        subject="Desilting of storm drain",
        created_by=review_chain.clerk.id,
    )
    db_session.add(file)
    db_session.commit()
    db_session.refresh(file)
    return file


@pytest.fixture
def auth_headers():
    """Bearer headers for a system user id"""

    def _headers(user_id):
        token = JWTManager.create_access_token({"sub": str(user_id)})
        return {"Authorization": f"Bearer {token}"}

    return _headers
