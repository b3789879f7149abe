"""
Dashboard listings over distinct emails.

Duplicate registrations mean a plain row query would list the same person
twice, so every listing pages over the set of qualifying emails and then
picks one representative record per email on the page. `total_count` is
always the number of distinct qualifying emails.
"""

import logging
from typing import List

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from huddy_gate.core.config import settings
from huddy_gate.core.exceptions import InvalidListingQuery
from huddy_gate.models.attendee import Attendee
from huddy_gate.schemas import AttendeeResult, DashboardSummary, Listing
from huddy_gate.services import registry

logger = logging.getLogger(__name__)

SORT_COLUMNS = {
    "created_at": Attendee.created_at,
    "name": Attendee.name,
    "email": Attendee.email,
    "unique_code": Attendee.unique_code,
    "id": Attendee.id,
}

# Column names the scanner dashboard sends
SORT_ALIASES = {
    "uniqueId": "unique_code",
    "uniqueCode": "unique_code",
    "createdAt": "created_at",
}


def _validate(page: int, page_size: int, sort_key: str, order: str):
    if page < 1:
        raise InvalidListingQuery("page", "must be 1 or greater")
    if page_size < 1 or page_size > settings.MAX_PAGE_SIZE:
        raise InvalidListingQuery("page_size", f"must be between 1 and {settings.MAX_PAGE_SIZE}")
    sort_key = SORT_ALIASES.get(sort_key, sort_key)
    if sort_key not in SORT_COLUMNS:
        raise InvalidListingQuery("sort_by", f"unknown column '{sort_key}'")
    order = (order or "").lower()
    if order not in ("asc", "desc"):
        raise InvalidListingQuery("order", "must be 'asc' or 'desc'")
    return SORT_COLUMNS[sort_key], order


def _first_per_email(records: List[Attendee]) -> List[Attendee]:
    seen = set()
    unique = []
    for record in records:
        if record.email in seen:
            continue
        seen.add(record.email)
        unique.append(record)
    return unique


def _list_distinct(session: Session, flag, page: int, page_size: int, sort_key: str, order: str) -> Listing:
    sort_column, order = _validate(page, page_size, sort_key, order)

    qualifying = select(Attendee.email).where(flag.is_(True)).group_by(Attendee.email)

    with registry.store_errors(session, "dashboard listing"):
        total = session.scalar(select(func.count()).select_from(qualifying.subquery())) or 0
        if total == 0:
            return Listing(records=[], total_count=0, page=page, page_size=page_size)

        # Newest person first; email breaks ties so pages never overlap
        page_emails = list(
            session.scalars(
                qualifying.order_by(func.max(Attendee.created_at).desc(), Attendee.email)
                .offset((page - 1) * page_size)
                .limit(page_size)
            )
        )
        if not page_emails:
            return Listing(records=[], total_count=total, page=page, page_size=page_size)

        direction = sort_column.asc() if order == "asc" else sort_column.desc()
        rows = list(
            session.scalars(
                select(Attendee)
                .where(flag.is_(True), Attendee.email.in_(page_emails))
                .order_by(direction, Attendee.id)
            )
        )

    records = _first_per_email(rows)
    return Listing(
        records=[AttendeeResult.model_validate(r) for r in records],
        total_count=total,
        page=page,
        page_size=page_size,
    )


def list_entered(session: Session, page: int = 1, page_size: int = None,
                 sort_key: str = "created_at", order: str = "desc") -> Listing:
    return _list_distinct(session, Attendee.is_entered, page,
                          settings.DEFAULT_PAGE_SIZE if page_size is None else page_size, sort_key, order)


def list_gifted(session: Session, page: int = 1, page_size: int = None,
                sort_key: str = "created_at", order: str = "desc") -> Listing:
    return _list_distinct(session, Attendee.is_gifted, page,
                          settings.DEFAULT_PAGE_SIZE if page_size is None else page_size, sort_key, order)


def summary(session: Session) -> DashboardSummary:
    def distinct_emails(*criteria):
        return select(func.count(func.distinct(Attendee.email))).where(*criteria)

    with registry.store_errors(session, "dashboard summary"):
        return DashboardSummary(
            entered=session.scalar(distinct_emails(Attendee.is_entered.is_(True))) or 0,
            gifted=session.scalar(distinct_emails(Attendee.is_gifted.is_(True))) or 0,
            registered=session.scalar(distinct_emails()) or 0,
            total_rows=session.scalar(select(func.count(Attendee.id))) or 0,
        )


def export_rows(session: Session, kind: str) -> List[dict]:
    """
    One row per email for the check-in ("entered") or check-out ("gifted")
    export. Check-out requires both flags; the lowest id represents the email.
    """
    if kind == "entered":
        criteria = (Attendee.is_entered.is_(True),)
    elif kind == "gifted":
        criteria = (Attendee.is_entered.is_(True), Attendee.is_gifted.is_(True))
    else:
        raise InvalidListingQuery("kind", "must be 'entered' or 'gifted'")

    with registry.store_errors(session, f"{kind} export"):
        rows = list(session.scalars(select(Attendee).where(*criteria).order_by(Attendee.id)))

    logger.info(f"📄 Exporting {kind} list: {len(rows)} row(s)")
    return [
        {
            "id": record.id,
            "name": record.name,
            "email": record.email,
            "unique_code": record.unique_code,
        }
        for record in _first_per_email(rows)
    ]
