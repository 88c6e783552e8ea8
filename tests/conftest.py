# Shared fixtures: a throwaway SQLite file per test, catalog/ledger factories
# and a TestClient wired to the same database.
import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from finquest.api.deps import get_challenge_engine
from finquest.core.challenge_engine import ChallengeEngine
from finquest.db.base import Base
from finquest.db.models import Challenge, Enrollment, Expense
from finquest.db.session import get_db
from finquest.main import app

from tests.helpers import DAY0, USER_ID


@pytest.fixture
def db_engine(tmp_path):
    engine = create_engine(
        f"sqlite:///{tmp_path / 'finquest_test.db'}",
        connect_args={"check_same_thread": False},
        future=True,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(db_engine):
    return sessionmaker(bind=db_engine, autocommit=False, autoflush=False, expire_on_commit=False, future=True)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def make_challenge(db):
    def _make(challenge_type="spending", category="all", target_amount=1000, duration_days=7, **extra):
        challenge = Challenge(
            title=extra.pop("title", f"{challenge_type}/{category}"),
            challenge_type=challenge_type,
            category=category,
            target_amount=target_amount,
            duration_days=duration_days,
            is_active=extra.pop("is_active", True),
            **extra,
        )
        db.add(challenge)
        db.commit()
        return challenge
    return _make


@pytest.fixture
def enroll(db):
    def _enroll(challenge, user_id=USER_ID, started_at=DAY0, status="active", **extra):
        enrollment = Enrollment(
            user_id=user_id,
            challenge_id=challenge.id,
            current_amount=extra.pop("current_amount", 0.0),
            status=status,
            started_at=started_at,
            **extra,
        )
        db.add(enrollment)
        db.commit()
        return enrollment
    return _enroll


@pytest.fixture
def add_expense(db):
    def _add(amount, expense_date, category="food", user_id=USER_ID, location_name=None, lat=None, lng=None):
        expense = Expense(
            user_id=user_id,
            amount=amount,
            category=category,
            expense_date=expense_date,
            location_name=location_name,
            location_lat=lat,
            location_lng=lng,
        )
        db.add(expense)
        db.commit()
        return expense
    return _add


@pytest.fixture
def reload(session_factory):
    """Read an enrollment back through a fresh session"""
    def _reload(enrollment_id):
        session = session_factory()
        try:
            return session.get(Enrollment, enrollment_id)
        finally:
            session.close()
    return _reload


@pytest.fixture
def run_tracker(session_factory):
    def _run(tracker_cls, now, user_id=USER_ID):
        session = session_factory()
        try:
            return tracker_cls(session, user_id, now=now).track()
        finally:
            session.close()
    return _run


@pytest.fixture
def challenge_engine(session_factory):
    return ChallengeEngine(session_factory, timezone_name="UTC")


@pytest.fixture
def client(session_factory, challenge_engine):
    def _get_db():
        session = session_factory()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    app.dependency_overrides[get_db] = _get_db
    app.dependency_overrides[get_challenge_engine] = lambda: challenge_engine
    yield TestClient(app)
    app.dependency_overrides.clear()
