import threading
from collections import Counter

import pytest

from huddy_gate.core.config import Settings
from huddy_gate.db.base import Base
from huddy_gate.db.session import build_engine, make_session_factory
from huddy_gate.models.attendee import Attendee
from huddy_gate.services.claims import claim_entry, claim_gift


@pytest.fixture
def file_session_factory(tmp_path):
    settings = Settings(
        DATABASE_URL=f"sqlite:///{tmp_path / 'race.db'}",
        DB_CONNECT_TIMEOUT_SECONDS=30,
        LOG_FILE=None,
    )
    engine = build_engine(settings)
    Base.metadata.create_all(bind=engine)
    yield make_session_factory(engine)
    engine.dispose()


def run_concurrently(factory, claim, codes):
    barrier = threading.Barrier(len(codes))
    outcomes = []
    errors = []
    lock = threading.Lock()

    def worker(code):
        session = factory()
        try:
            barrier.wait()
            result = claim(session, code)
            with lock:
                outcomes.append(result)
        except Exception as e:  # surfaced through the assertion below
            with lock:
                errors.append(e)
        finally:
            session.close()

    threads = [threading.Thread(target=worker, args=(code,)) for code in codes]
    for t in threads:
        t.start()
    for t in threads:
        t.join(timeout=60)

    assert not errors, errors
    return outcomes


def seed(factory, rows):
    session = factory()
    try:
        for code, email, entered in rows:
            session.add(Attendee(name="Racer", email=email, unique_code=code, is_entered=entered))
        session.commit()
    finally:
        session.close()


def test_concurrent_gift_claims_on_two_codes_succeed_once(file_session_factory):
    seed(file_session_factory, [("R1", "race@example.com", True), ("R2", "race@example.com", True)])

    outcomes = run_concurrently(file_session_factory, claim_gift, ["R1", "R2", "R1", "R2", "R1", "R2"])

    tally = Counter(o.status if o.status == "success" else o.reason for o in outcomes)
    assert tally == {"success": 1, "already_taken": 5}


def test_concurrent_entry_claims_all_succeed(file_session_factory):
    seed(file_session_factory, [("S1", "same@example.com", False), ("S2", "same@example.com", False)])

    outcomes = run_concurrently(file_session_factory, claim_entry, ["S1", "S2", "S1", "S2"])

    assert all(o.status == "success" for o in outcomes)
    assert all(o.updated_count == 2 for o in outcomes)
