"""
Entry and gift claims.

Both claims address an attendee by email group rather than by a single row:
a person who registered twice can use either code, and whichever code is
scanned the whole group moves together. The group is resolved once, by
`resolve_group`, for both claims.

Outcomes that are part of normal gate operation (unknown code, gift before
entry, gift already handed out) come back as denied ClaimResults. Only store
failures raise, as StoreUnavailable, and the scanner is expected to re-send
the same claim; both claims are safe to repeat.
"""

import logging
from dataclasses import dataclass
from typing import List, Optional

from sqlalchemy.orm import Session

from huddy_gate.core.config import settings
from huddy_gate.models.attendee import Attendee
from huddy_gate.schemas import ClaimResult
from huddy_gate.services import registry
from huddy_gate.utils.codes import validate_scanned_code

logger = logging.getLogger(__name__)

MESSAGES = {
    "not_found": "User does not exist, please register.",
    "not_entered": "Entry not recorded yet. Please check in at the entrance first.",
    "already_taken": "Sorry, the huddy has already been claimed.",
}


@dataclass
class AttendeeGroup:
    email: str
    name: Optional[str]
    members: List[Attendee]

    @property
    def any_entered(self) -> bool:
        return any(member.is_entered for member in self.members)


def resolve_group(session: Session, code: str) -> Optional[AttendeeGroup]:
    """code -> scanned record -> every record sharing its email"""
    scanned = registry.get_by_code(session, code)
    if scanned is None:
        return None
    members = registry.get_group(session, scanned.email)
    return AttendeeGroup(email=scanned.email, name=scanned.name, members=members)


def _denied(reason: str, group: AttendeeGroup = None) -> ClaimResult:
    return ClaimResult(
        status="denied",
        reason=reason,
        message=MESSAGES[reason],
        email=group.email if group else None,
        name=group.name if group else None,
    )


def claim_entry(session: Session, code) -> ClaimResult:
    """
    Mark the scanned attendee's whole email group as entered.

    Idempotent: a repeated scan succeeds again and reports the same group.
    """
    code = validate_scanned_code(code, settings.MAX_CODE_LENGTH)

    with registry.store_errors(session, "entry claim"):
        group = resolve_group(session, code)
        if group is None:
            logger.info(f"🚫 Entry denied for {code}: not_found")
            return _denied("not_found")

        updated = registry.mark_group_entered(session, group.email)

    if not updated:
        # Group vanished between resolution and update
        logger.info(f"🚫 Entry denied for {code}: group for {group.email} is empty")
        return _denied("not_found")

    logger.info(f"✅ Entry granted for {group.email} via {code} ({len(updated)} record(s))")
    return ClaimResult(
        status="success",
        message=f"Hey {group.name}, welcome to the event!" if group.name else "Welcome! Access granted.",
        email=group.email,
        name=group.name,
        updated_count=len(updated),
        updated_records=updated,
    )


def claim_gift(session: Session, code) -> ClaimResult:
    """
    Hand out the huddy once per email group.

    Denial reasons, in priority order: not_found, not_entered, already_taken.
    The decision between success and already_taken is made by the
    conditional UPDATE alone; the group snapshot is only used to tell
    not_entered apart.
    """
    code = validate_scanned_code(code, settings.MAX_CODE_LENGTH)

    with registry.store_errors(session, "gift claim"):
        group = resolve_group(session, code)
        if group is None or not group.members:
            logger.info(f"🚫 Gift denied for {code}: not_found")
            return _denied("not_found")

        if not group.any_entered:
            logger.info(f"🚫 Gift denied for {group.email} via {code}: not_entered")
            return _denied("not_entered", group)

        updated = registry.mark_group_gifted(session, group.email)

    if not updated:
        logger.info(f"🚫 Gift denied for {group.email} via {code}: already_taken")
        return _denied("already_taken", group)

    logger.info(f"🎁 Gift claimed for {group.email} via {code} ({len(updated)} record(s))")
    return ClaimResult(
        status="success",
        message=f"Get your huddy, {group.name}. Enjoy!" if group.name else "Get your huddy. Enjoy!",
        email=group.email,
        name=group.name,
        updated_count=len(updated),
        updated_records=updated,
    )
