"""
Registry store access.

Every read and write against the attendees table goes through this module.
Callers wrap store calls in `store_errors()` so that driver and connection
failures surface as StoreUnavailable and the session is left clean.
"""

import logging
from contextlib import contextmanager
from typing import Iterator, List, Optional, Tuple

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from huddy_gate.core.exceptions import StoreUnavailable
from huddy_gate.models.attendee import Attendee
from huddy_gate.schemas import UpdatedRecord

logger = logging.getLogger(__name__)

RETURNED_COLUMNS = (
    Attendee.id,
    Attendee.unique_code,
    Attendee.name,
    Attendee.email,
    Attendee.is_entered,
    Attendee.is_gifted,
)


@contextmanager
def store_errors(session: Session, operation: str) -> Iterator[None]:
    """Roll back and re-raise any SQLAlchemy error as StoreUnavailable."""
    try:
        yield
    except SQLAlchemyError as e:
        try:
            session.rollback()
        except SQLAlchemyError as rollback_error:
            logger.warning(f"⚠️ Rollback after failed {operation} also failed: {rollback_error}")
        logger.error(f"❌ Store error during {operation}: {e}")
        raise StoreUnavailable(operation, e.__class__.__name__) from e


def get_by_code(session: Session, code: str) -> Optional[Attendee]:
    return session.scalars(
        select(Attendee).where(Attendee.unique_code == code).limit(1)
    ).first()


def get_group(session: Session, email: str) -> List[Attendee]:
    """All records registered under one (normalized) email."""
    return list(
        session.scalars(
            select(Attendee).where(Attendee.email == email).order_by(Attendee.id)
        )
    )


def _apply(session: Session, statement) -> List[UpdatedRecord]:
    result = session.execute(
        statement.returning(*RETURNED_COLUMNS).execution_options(synchronize_session=False)
    )
    rows = [UpdatedRecord.model_validate(dict(row._mapping)) for row in result]
    session.commit()
    return sorted(rows, key=lambda r: r.id)


def mark_group_entered(session: Session, email: str) -> List[UpdatedRecord]:
    """Set is_entered on every record of the group and commit."""
    return _apply(
        session,
        update(Attendee).where(Attendee.email == email).values(is_entered=True),
    )


def mark_group_gifted(session: Session, email: str) -> List[UpdatedRecord]:
    """
    Conditionally set is_gifted on the group and commit.

    Only rows that are entered and not yet gifted match, and the predicate is
    evaluated by the same UPDATE that flips the flag. Of two racing claims
    only one can see is_gifted = false; the other gets an empty list back.
    """
    return _apply(
        session,
        update(Attendee)
        .where(
            Attendee.email == email,
            Attendee.is_entered.is_(True),
            Attendee.is_gifted.is_(False),
        )
        .values(is_gifted=True),
    )


def upsert_attendee(session: Session, name: str, email: str, code: str) -> Tuple[Attendee, bool]:
    """
    Insert a record or, when the code is already registered, update its
    name and email. Claim flags and created_at are never touched here.

    Returns (attendee, created).
    """
    existing = get_by_code(session, code)
    if existing is not None:
        existing.name = name
        existing.email = email
        session.commit()
        return existing, False

    attendee = Attendee(name=name, email=email, unique_code=code)
    session.add(attendee)
    try:
        session.commit()
        return attendee, True
    except IntegrityError:
        # Lost an insert race on the same code; fall back to update
        session.rollback()
        logger.info(f"Code {code} registered concurrently, updating instead")
        existing = get_by_code(session, code)
        if existing is None:
            raise
        existing.name = name
        existing.email = email
        session.commit()
        return existing, False
