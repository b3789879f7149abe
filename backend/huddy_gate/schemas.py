from pydantic import BaseModel, EmailStr, ConfigDict, Field
from typing import Optional, List, Literal
from datetime import datetime

class AttendeeResult(BaseModel):
    id: int
    name: str
    email: str
    unique_code: str
    is_entered: bool
    is_gifted: bool
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)

class UpdatedRecord(BaseModel):
    """A row as returned by a claim's UPDATE ... RETURNING"""
    id: int
    unique_code: str
    name: str
    email: str
    is_entered: bool
    is_gifted: bool

    model_config = ConfigDict(from_attributes=True)

# ------------------------------------------------------------------
# Claims
# ------------------------------------------------------------------

DenialReason = Literal["not_found", "not_entered", "already_taken"]

class ClaimRequest(BaseModel):
    code: str  # The scanned QR payload

class ClaimResult(BaseModel):
    status: Literal["success", "denied"]
    reason: Optional[DenialReason] = None
    message: str
    email: Optional[str] = None
    name: Optional[str] = None
    updated_count: int = 0
    updated_records: List[UpdatedRecord] = []

# ------------------------------------------------------------------
# Registration
# ------------------------------------------------------------------

class RegistrationRequest(BaseModel):
    name: str = Field(min_length=1)
    email: EmailStr
    unique_code: Optional[str] = None  # generated when omitted

class RegistrationResponse(BaseModel):
    status: str
    message: str
    created: bool
    attendee: AttendeeResult
    qr_url: str

class CSVRowResult(BaseModel):
    name: str
    email: str
    unique_code: str
    created: bool

class CSVUploadResponse(BaseModel):
    total_processed: int
    created_count: int
    updated_count: int
    skipped_emails: List[str]
    results: List[CSVRowResult]

# ------------------------------------------------------------------
# Dashboard
# ------------------------------------------------------------------

class Listing(BaseModel):
    records: List[AttendeeResult]
    total_count: int  # distinct emails, not rows
    page: int
    page_size: int

class DashboardSummary(BaseModel):
    entered: int
    gifted: int
    registered: int
    total_rows: int
