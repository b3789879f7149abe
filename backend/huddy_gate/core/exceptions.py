"""
Error taxonomy for the check-in core.

Store errors never leave the service layer raw: they are mapped to
StoreUnavailable at the transaction boundary. Denials that are part of
normal gate operation (not_entered, already_taken) are returned as
ClaimResult values, not raised.
"""


class HuddyGateException(Exception):
    """Base exception carrying a stable error code for the HTTP layer."""

    status_code = 500

    def __init__(self, message: str, error_code: str = None):
        super().__init__(message)
        self.message = message
        self.error_code = error_code

    def __str__(self) -> str:
        if self.error_code:
            return f"[{self.error_code}] {self.message}"
        return self.message


class AttendeeNotFound(HuddyGateException):
    """No attendee carries the scanned code. User-facing: please register."""

    status_code = 404

    def __init__(self, code: str):
        super().__init__(f"No attendee registered with code '{code}'", "NOT_FOUND")
        self.code = code


class StoreUnavailable(HuddyGateException):
    """
    The registry store could not be reached or the statement did not
    complete. Safe to retry; must never be shown as "not found".
    """

    status_code = 503

    def __init__(self, operation: str, detail: str = None):
        message = f"Registry store unavailable during {operation}"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message, "TRANSIENT_FAILURE")
        self.operation = operation


class InvalidScanPayload(HuddyGateException):
    """Scanned payload rejected before any store call."""

    status_code = 422

    def __init__(self, reason: str):
        super().__init__(f"Invalid scan payload: {reason}", "VALIDATION_ERROR")
        self.reason = reason


class InvalidListingQuery(HuddyGateException):
    """Bad page, page size, sort key or order on a dashboard listing."""

    status_code = 422

    def __init__(self, field: str, reason: str):
        super().__init__(f"Invalid '{field}': {reason}", "VALIDATION_ERROR")
        self.field = field


class InvalidRegistration(HuddyGateException):
    status_code = 422

    def __init__(self, field: str, reason: str):
        super().__init__(f"Invalid '{field}': {reason}", "VALIDATION_ERROR")
        self.field = field
