"""Availability router - FastAPI endpoints for timeslot management"""

import logging
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...database import get_db
from ...shared.responses import unwrap
from .schemas import (
    AvailabilityResult,
    AvailabilitySettings,
    CleanupTimeslotsRequest,
    InitializeTimeslotsRequest,
    TimeslotOption,
    TimeslotResponse,
)
from .service import AvailabilityService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/availability", tags=["Availability"])


def get_availability_service(db: Session = Depends(get_db)) -> AvailabilityService:
    """Dependency injection for AvailabilityService"""
    return AvailabilityService(db)


@router.post("/initialize", response_model=AvailabilityResult)
async def initialize_timeslots(
    data: InitializeTimeslotsRequest,
    service: AvailabilityService = Depends(get_availability_service),
):
    """Generate available slots for a date range from working-hours settings"""
    result = unwrap(service.initialize_timeslots(data.startDate, data.endDate, data.settings))
    return AvailabilityResult(success=True, message=result["message"])


@router.post("/cleanup", response_model=AvailabilityResult)
async def cleanup_timeslots(
    data: CleanupTimeslotsRequest,
    service: AvailabilityService = Depends(get_availability_service),
):
    """Remove upcoming available slots on non-working days"""
    result = unwrap(service.cleanup_timeslots(data.workingDays))
    return AvailabilityResult(success=True, message=result["message"])


@router.post("/update-duration", response_model=AvailabilityResult)
async def update_duration(
    settings: AvailabilitySettings,
    service: AvailabilityService = Depends(get_availability_service),
):
    """Regenerate the upcoming window with a new slot duration"""
    result = unwrap(service.update_timeslots_for_new_duration(settings))
    return AvailabilityResult(success=True, message=result["message"])


@router.get("/timeslots", response_model=list[TimeslotResponse])
async def get_timeslots(
    day: Optional[date] = Query(None, alias="date"),
    isAvailable: Optional[bool] = Query(None),
    meetingType: Optional[str] = Query(None),
    service: AvailabilityService = Depends(get_availability_service),
):
    """List stored slots sorted by date and time"""
    result = unwrap(service.get_timeslots(day, isAvailable, meetingType))
    return result["timeslots"]


@router.get("/timeslots/available", response_model=list[TimeslotOption])
async def get_available_timeslots(
    day: date = Query(..., alias="date"),
    service: AvailabilityService = Depends(get_availability_service),
):
    """Bookable times for a date"""
    result = unwrap(service.get_available_timeslots(day))
    return result["timeslots"]
