from fastapi import APIRouter, Depends, Request, Response
from sqlalchemy.orm import Session
import logging

from huddy_gate.api.deps import get_db, get_settings
from huddy_gate.core.config import Settings
from huddy_gate.schemas import AttendeeResult, RegistrationRequest, RegistrationResponse
from huddy_gate.services.lookup import lookup
from huddy_gate.services.registration import register_attendee
from huddy_gate.utils.qr import render_qr_png

router = APIRouter()
logger = logging.getLogger(__name__)

@router.post("/register", response_model=RegistrationResponse)
def register(payload: RegistrationRequest, request: Request, db: Session = Depends(get_db)):
    """
    Register an attendee and hand back the code to encode in their QR.
    Re-submitting an existing code updates that registration.
    """
    attendee, created = register_attendee(db, payload.name, payload.email, payload.unique_code)

    return RegistrationResponse(
        status="success",
        message=f"Welcome {attendee.name}, registration complete!",
        created=created,
        attendee=AttendeeResult.model_validate(attendee),
        qr_url=str(request.url_for("attendee_qr", code=attendee.unique_code)),
    )

@router.get("/attendees/{code}", response_model=AttendeeResult)
def get_attendee(code: str, db: Session = Depends(get_db)):
    """Read-only lookup of a scanned code"""
    return lookup(db, code)

@router.get("/attendees/{code}/qr.png", name="attendee_qr")
def attendee_qr(code: str, db: Session = Depends(get_db), settings: Settings = Depends(get_settings)):
    """QR image whose payload is exactly the attendee's code"""
    attendee = lookup(db, code)
    png = render_qr_png(attendee.unique_code, settings.QR_BOX_SIZE, settings.QR_BORDER)
    return Response(content=png, media_type="image/png")
