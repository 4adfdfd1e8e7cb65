import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from trajectory.core.db import Base
from trajectory.models import case_study, path_selection, user_profile  # noqa: F401
from trajectory.models.user_profile import CareerStage
from trajectory.repositories import ProfileStore


@pytest.fixture
def engine():
    # One shared in-memory database per test
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def db_session(engine):
    TestingSession = sessionmaker(bind=engine, autoflush=False, autocommit=False)
    session = TestingSession()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def sales_profile(db_session):
    return ProfileStore(db_session).create(
        {
            "name": "Jordan",
            "current_status": "Business student",
            "interests": "sales, business development",
            "location": "Chicago",
            "timeline": "6 months",
            "stage": CareerStage.STUDENT,
            "extra_info": None,
        }
    )
