"""Appointments domain - Inquiry booking workflow"""

from .router import router

__all__ = ["router"]
