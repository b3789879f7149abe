import secrets
import string
import time

from huddy_gate.core.exceptions import InvalidScanPayload

BASE36_ALPHABET = string.digits + string.ascii_lowercase

def normalize_email(email: str) -> str:
    """Trim and lower-case an email so duplicate registrations group together"""
    return email.strip().lower()

def generate_unique_code(prefix: str = "USER") -> str:
    """Generate an attendee code such as USER-1718012345678-k3j9x0a2b"""
    suffix = "".join(secrets.choice(BASE36_ALPHABET) for _ in range(9))
    return f"{prefix}-{int(time.time() * 1000)}-{suffix}"

def validate_scanned_code(code, max_length: int = 128) -> str:
    """
    Reject malformed scan payloads before they reach the store.
    Surrounding whitespace from the scanner is stripped; the rest must match
    a stored code exactly.
    """
    if not isinstance(code, str):
        raise InvalidScanPayload("code must be a string")
    cleaned = code.strip()
    if not cleaned:
        raise InvalidScanPayload("code is empty")
    if len(cleaned) > max_length:
        raise InvalidScanPayload(f"code longer than {max_length} characters")
    return cleaned
