from fastapi import Request

from huddy_gate.core.config import Settings
from huddy_gate.db.session import get_db

__all__ = ["get_db", "get_settings"]

def get_settings(request: Request) -> Settings:
    """Settings the running app was built with"""
    return request.app.state.settings
