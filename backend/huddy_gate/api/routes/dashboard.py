import csv
import io
import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import StreamingResponse
from sqlalchemy.orm import Session

from huddy_gate.api.deps import get_db
from huddy_gate.schemas import DashboardSummary, Listing
from huddy_gate.services import reporting

router = APIRouter()
logger = logging.getLogger(__name__)

# ==============================================================================
# 1. PAGINATED LISTINGS (one row per email)
# ==============================================================================

@router.get("/dashboard/entered", response_model=Listing)
def entered(
    page: int = 1,
    page_size: Optional[int] = None,
    sort_by: str = "created_at",
    order: str = Query("desc"),
    db: Session = Depends(get_db)
):
    return reporting.list_entered(db, page, page_size, sort_by, order)


@router.get("/dashboard/gifted", response_model=Listing)
def gifted(
    page: int = 1,
    page_size: Optional[int] = None,
    sort_by: str = "created_at",
    order: str = Query("desc"),
    db: Session = Depends(get_db)
):
    return reporting.list_gifted(db, page, page_size, sort_by, order)


@router.get("/dashboard/summary", response_model=DashboardSummary)
def summary(db: Session = Depends(get_db)):
    return reporting.summary(db)

# ==============================================================================
# 2. CHECK-IN / CHECK-OUT CSV EXPORT
# ==============================================================================

def _csv_response(rows, filename: str) -> StreamingResponse:
    buffer = io.StringIO()
    writer = csv.DictWriter(buffer, fieldnames=["id", "name", "email", "unique_code"])
    writer.writeheader()
    writer.writerows(rows)
    buffer.seek(0)
    return StreamingResponse(
        buffer,
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'}
    )


@router.get("/dashboard/entered.csv")
def export_entered(db: Session = Depends(get_db)):
    """Check-in list: everyone who passed the entry gate"""
    return _csv_response(reporting.export_rows(db, "entered"), "checkin.csv")


@router.get("/dashboard/gifted.csv")
def export_gifted(db: Session = Depends(get_db)):
    """Check-out list: entered and collected the huddy"""
    return _csv_response(reporting.export_rows(db, "gifted"), "checkout.csv")
