from huddy_gate.models.attendee import Attendee

__all__ = ["Attendee"]
