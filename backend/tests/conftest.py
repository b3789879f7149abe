from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient

from huddy_gate.core.config import Settings
from huddy_gate.db.base import Base
from huddy_gate.db.session import build_engine, make_session_factory
from huddy_gate.main import create_app
from huddy_gate.models.attendee import Attendee

BASE_TIME = datetime(2025, 3, 1, 9, 0, tzinfo=timezone.utc)


@pytest.fixture
def settings():
    return Settings(DATABASE_URL="sqlite://", LOG_FILE=None, DB_STATEMENT_TIMEOUT_MS=None)


@pytest.fixture
def engine(settings):
    engine = build_engine(settings)
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return make_session_factory(engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


def _add(session, code, email, name="Guest", entered=False, gifted=False, minutes=0):
    attendee = Attendee(
        name=name,
        email=email,
        unique_code=code,
        is_entered=entered,
        is_gifted=gifted,
        created_at=BASE_TIME + timedelta(minutes=minutes),
    )
    session.add(attendee)
    session.commit()
    return attendee


@pytest.fixture
def add_attendee(db):
    """Insert an attendee straight into the registry"""
    def add(code, email, **kwargs):
        return _add(db, code, email, **kwargs)
    return add


@pytest.fixture
def client(settings):
    app = create_app(settings, configure_logging=False)
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def client_add_attendee(client):
    """Insert an attendee into the database behind the test client"""
    def add(code, email, **kwargs):
        session = client.app.state.session_factory()
        try:
            return _add(session, code, email, **kwargs)
        finally:
            session.close()
    return add
