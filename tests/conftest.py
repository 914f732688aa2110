"""
Pytest configuration and fixtures for testing.

This file provides reusable test fixtures for:
- Database setup/teardown
- FastAPI test client
- Seeding collaborators, skills, sessions and role profiles
"""

from datetime import date, datetime, time, timedelta

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from skima.core.config import Settings
from skima.core.database import Base, get_db
from skima.crud.evolution_store import encode_profile_skills
from skima.models import Assessment, Collaborator, Criticality, EvaluationSession, Frequency, RoleProfile, Skill
from main import create_app


# Use in-memory SQLite for testing (fast, isolated)
SQLALCHEMY_TEST_DATABASE_URL = "sqlite:///:memory:"

engine = create_engine(
    SQLALCHEMY_TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

test_settings = Settings(DATABASE_URL=SQLALCHEMY_TEST_DATABASE_URL, LOG_LEVEL="WARNING", JSON_LOGS=False)
app = create_app(test_settings, engine=engine)


def months_ago(months: int, day: int = 15) -> datetime:
    """Noon on `day` of the month `months` before the current one."""
    today = date.today()
    index = today.year * 12 + (today.month - 1) - months
    year, month = divmod(index, 12)
    return datetime.combine(date(year, month + 1, day), time(12, 0))


@pytest.fixture
def db_session():
    """
    Create a fresh database session for each test.
    Tables are dropped after the test completes.
    """
    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def client(db_session):
    """
    FastAPI test client with overridden database dependency.
    """
    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


@pytest.fixture
def skill(db_session):
    """A single active skill (id=1)"""
    skill = Skill(id=1, name="JavaScript", category="Technical")
    db_session.add(skill)
    db_session.commit()
    return skill


@pytest.fixture
def make_collaborator(db_session):
    """Factory for collaborators"""
    def _make(name="Test User", role="Developer", is_active=True, joined_at=datetime(2023, 1, 1)):
        collaborator = Collaborator(name=name, role=role, is_active=is_active, joined_at=joined_at)
        db_session.add(collaborator)
        db_session.commit()
        return collaborator
    return _make


@pytest.fixture
def evaluate(db_session):
    """
    Factory recording an evaluation session.

    `levels` maps skill id to level; the role snapshot defaults to the
    collaborator's current role.
    """
    def _evaluate(collaborator, evaluated_at, levels, role=None):
        session = EvaluationSession(
            collaborator_id=collaborator.id,
            collaborator_name=collaborator.name,
            collaborator_role=role or collaborator.role,
            evaluated_at=evaluated_at,
        )
        session.assessments = [
            Assessment(
                collaborator_id=collaborator.id,
                skill_id=skill_id,
                level=level,
                criticality=Criticality.CRITICAL,
                frequency=Frequency.DAILY,
            )
            for skill_id, level in levels.items()
        ]
        db_session.add(session)
        db_session.commit()
        return session
    return _evaluate


@pytest.fixture
def make_role_profile(db_session):
    """Factory for role profiles; created long before any test session by default"""
    def _make(role, skills, created_at=datetime(2000, 1, 1)):
        profile = RoleProfile(role=role, skills=encode_profile_skills(skills), created_at=created_at)
        db_session.add(profile)
        db_session.commit()
        return profile
    return _make


@pytest.fixture
def one_month_ago():
    return months_ago(1)


@pytest.fixture
def yesterday():
    return datetime.combine(date.today() - timedelta(days=1), time(12, 0))
