from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
import logging

from huddy_gate.api.deps import get_db
from huddy_gate.schemas import ClaimRequest, ClaimResult
from huddy_gate.services.claims import claim_entry, claim_gift

router = APIRouter()
logger = logging.getLogger(__name__)

# Denials are normal gate outcomes and come back as 200 with status="denied".
# A 503 means the store did not answer: re-send the same scan.

@router.post("/claims/entry", response_model=ClaimResult)
def entry(payload: ClaimRequest, db: Session = Depends(get_db)):
    """Entry gate: mark the scanned attendee (and their duplicate registrations) as entered"""
    return claim_entry(db, payload.code)

@router.post("/claims/gift", response_model=ClaimResult)
def gift(payload: ClaimRequest, db: Session = Depends(get_db)):
    """Huddy counter: hand out the gift once per attendee"""
    return claim_gift(db, payload.code)
