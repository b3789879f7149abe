import logging

from fastapi import APIRouter, UploadFile, File, Depends, HTTPException, status
from sqlalchemy.orm import Session

from huddy_gate.api.deps import get_db, get_settings
from huddy_gate.core.config import Settings
from huddy_gate.schemas import CSVUploadResponse
from huddy_gate.services.registration import import_csv

router = APIRouter()
logger = logging.getLogger(__name__)

# ==============================================================================
# BATCH CSV PRE-REGISTRATION
# ==============================================================================
@router.post(
    "/upload-csv",
    response_model=CSVUploadResponse,
)
def upload_csv(
    file: UploadFile = File(...),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings)
):
    """
    Bulk import attendees.
    Required CSV Header: 'email'
    Optional CSV Headers: 'name', 'code' / 'unique_code'
    """
    # 1. Validate File Type
    if not (file.filename or "").lower().endswith('.csv'):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid file format. Please upload a .csv file."
        )

    # 2. Read File (bounded, never more than the limit plus one byte)
    limit = settings.MAX_UPLOAD_SIZE_MB * 1024 * 1024
    content = file.file.read(limit + 1)
    if len(content) > limit:
        raise HTTPException(
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            detail=f"CSV larger than {settings.MAX_UPLOAD_SIZE_MB}MB."
        )
    try:
        decoded_content = content.decode('utf-8-sig')
    except UnicodeDecodeError as e:
        logger.error(f"CSV Reading Error: {e}")
        raise HTTPException(status_code=400, detail="Could not read or decode CSV file.")

    # 3. Import rows
    return import_csv(db, decoded_content)
