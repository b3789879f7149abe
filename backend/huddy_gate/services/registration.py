import csv
import io
import logging
from typing import Optional, Tuple

from pydantic import EmailStr, TypeAdapter, ValidationError
from sqlalchemy.orm import Session

from huddy_gate.core.config import settings
from huddy_gate.core.exceptions import InvalidRegistration
from huddy_gate.models.attendee import Attendee
from huddy_gate.schemas import CSVRowResult, CSVUploadResponse
from huddy_gate.services import registry
from huddy_gate.utils.codes import generate_unique_code, normalize_email

logger = logging.getLogger(__name__)

_email_adapter = TypeAdapter(EmailStr)

CODE_HEADERS = ("unique_code", "code", "uniqueid")


def register_attendee(session: Session, name: str, email: str,
                      unique_code: Optional[str] = None) -> Tuple[Attendee, bool]:
    """
    Register an attendee, idempotent on the code.

    Submitting a code that already exists updates that record's name and email
    instead of creating a duplicate. Several codes may share one email.
    Returns (attendee, created).
    """
    name = (name or "").strip()
    if not name:
        raise InvalidRegistration("name", "must not be empty")
    try:
        email = normalize_email(_email_adapter.validate_python((email or "").strip()))
    except ValidationError:
        raise InvalidRegistration("email", f"'{email}' is not a valid email address")

    if unique_code is not None:
        unique_code = unique_code.strip()
        if not unique_code:
            raise InvalidRegistration("unique_code", "must not be blank")
        if len(unique_code) > settings.MAX_CODE_LENGTH:
            raise InvalidRegistration("unique_code", f"longer than {settings.MAX_CODE_LENGTH} characters")
        if "/" in unique_code:
            raise InvalidRegistration("unique_code", "must not contain '/'")
    else:
        unique_code = generate_unique_code(settings.UNIQUE_CODE_PREFIX)

    with registry.store_errors(session, "registration"):
        attendee, created = registry.upsert_attendee(session, name, email, unique_code)

    action = "Registered" if created else "Updated"
    logger.info(f"✅ {action} {attendee.email} with code {attendee.unique_code}")
    return attendee, created


def import_csv(session: Session, content: str) -> CSVUploadResponse:
    """
    Bulk pre-registration.

    Required CSV header: 'email'. Optional: 'name', and a code column
    ('unique_code', 'code' or 'uniqueId'). Rows with a code upsert on it.
    Rows without one are skipped when their email is already registered, so
    re-uploading the same list does not duplicate people.
    """
    reader = csv.DictReader(io.StringIO(content))
    headers = [h.lower().strip() for h in reader.fieldnames or []]
    if "email" not in headers:
        raise InvalidRegistration("csv", f"missing required 'email' column. Found: {headers}")

    results = []
    skipped_emails = []

    for row in reader:
        clean_row = {k.lower().strip(): (v or "").strip() for k, v in row.items() if k}

        email = clean_row.get("email")
        name = clean_row.get("name") or "Unknown"
        code = next((clean_row[h] for h in CODE_HEADERS if clean_row.get(h)), None)

        if not email:
            continue

        if code is None:
            with registry.store_errors(session, "csv import"):
                already = registry.get_group(session, normalize_email(email))
            if already:
                skipped_emails.append(email)
                continue

        try:
            attendee, created = register_attendee(session, name, email, code)
        except InvalidRegistration as e:
            logger.warning(f"⚠️ Skipping CSV row for {email}: {e.message}")
            skipped_emails.append(email)
            continue

        results.append(CSVRowResult(
            name=attendee.name,
            email=attendee.email,
            unique_code=attendee.unique_code,
            created=created,
        ))

    created_count = sum(1 for r in results if r.created)
    logger.info(f"✅ [Admin] Batch Import: {created_count} created, "
                f"{len(results) - created_count} updated, {len(skipped_emails)} skipped.")

    return CSVUploadResponse(
        total_processed=len(results) + len(skipped_emails),
        created_count=created_count,
        updated_count=len(results) - created_count,
        skipped_emails=skipped_emails,
        results=results,
    )
