"""Availability domain - Timeslot generation and capacity queries"""

from .router import router

__all__ = ["router"]
