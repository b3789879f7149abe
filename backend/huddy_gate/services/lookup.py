import logging

from sqlalchemy.orm import Session

from huddy_gate.core.config import settings
from huddy_gate.core.exceptions import AttendeeNotFound
from huddy_gate.models.attendee import Attendee
from huddy_gate.services import registry
from huddy_gate.utils.codes import validate_scanned_code

logger = logging.getLogger(__name__)

def lookup(session: Session, code, max_code_length: int = None) -> Attendee:
    """
    Resolve a scanned code to its attendee record. Read-only.

    Raises:
        InvalidScanPayload: empty or non-string code
        AttendeeNotFound: no record carries the code
        StoreUnavailable: the store could not answer; retry, do not re-register
    """
    code = validate_scanned_code(code, max_code_length or settings.MAX_CODE_LENGTH)

    with registry.store_errors(session, "lookup"):
        attendee = registry.get_by_code(session, code)

    if attendee is None:
        logger.info(f"🔍 Lookup miss for code {code}")
        raise AttendeeNotFound(code)
    return attendee
