"""Appointment router - FastAPI endpoints for the inquiry booking workflow"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ...database import get_db
from ...shared.responses import unwrap
from .schemas import (
    AppointmentStats,
    BatchDeleteRequest,
    BatchDeleteResponse,
    CancelInquiryRequest,
    InquiryCreate,
    InquiryResponse,
    RescheduleInquiryRequest,
)
from .service import AppointmentService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/appointments", tags=["Appointments"])


def get_appointment_service(db: Session = Depends(get_db)) -> AppointmentService:
    """Dependency injection for AppointmentService"""
    return AppointmentService(db)


# ============================================================================
# INQUIRIES
# ============================================================================


@router.get("/inquiries", response_model=list[InquiryResponse])
async def get_inquiries(service: AppointmentService = Depends(get_appointment_service)):
    """Get all inquiries, newest first"""
    return unwrap(service.get_inquiries())["inquiries"]


@router.post("/inquiries", response_model=InquiryResponse, status_code=201)
async def submit_inquiry(
    data: InquiryCreate,
    service: AppointmentService = Depends(get_appointment_service),
):
    """Submit a consultation request (public booking form)"""
    return unwrap(service.submit_inquiry(data))["inquiry"]


@router.post("/inquiries/batch-delete", response_model=BatchDeleteResponse)
async def batch_delete_inquiries(
    data: BatchDeleteRequest,
    service: AppointmentService = Depends(get_appointment_service),
):
    """Delete several inquiries and free their timeslots"""
    result = unwrap(service.delete_inquiries(data.inquiryIds))
    return BatchDeleteResponse(
        success=True, message=result["message"], deletedCount=result["deletedCount"]
    )


@router.get("/inquiries/{inquiry_id}", response_model=InquiryResponse)
async def get_inquiry(
    inquiry_id: int,
    service: AppointmentService = Depends(get_appointment_service),
):
    return unwrap(service.get_inquiry(inquiry_id))["inquiry"]


# ============================================================================
# TRANSITIONS
# ============================================================================


@router.post("/inquiries/{inquiry_id}/confirm", response_model=InquiryResponse)
async def confirm_inquiry(
    inquiry_id: int,
    service: AppointmentService = Depends(get_appointment_service),
):
    """Confirm an inquiry and reserve its requested slot"""
    return unwrap(service.confirm_inquiry(inquiry_id))["inquiry"]


@router.post("/inquiries/{inquiry_id}/cancel", response_model=InquiryResponse)
async def cancel_inquiry(
    inquiry_id: int,
    data: Optional[CancelInquiryRequest] = None,
    service: AppointmentService = Depends(get_appointment_service),
):
    reason = data.reason if data else None
    return unwrap(service.cancel_inquiry(inquiry_id, reason))["inquiry"]


@router.post("/inquiries/{inquiry_id}/reschedule", response_model=InquiryResponse)
async def reschedule_inquiry(
    inquiry_id: int,
    data: RescheduleInquiryRequest,
    service: AppointmentService = Depends(get_appointment_service),
):
    """Move a booked appointment to another slot"""
    return unwrap(
        service.reschedule_inquiry(inquiry_id, data.newDate, data.newTime, data.notes)
    )["inquiry"]


@router.post("/inquiries/{inquiry_id}/complete", response_model=InquiryResponse)
async def complete_inquiry(
    inquiry_id: int,
    service: AppointmentService = Depends(get_appointment_service),
):
    return unwrap(service.complete_inquiry(inquiry_id))["inquiry"]


@router.get("/stats", response_model=AppointmentStats)
async def get_appointment_stats(service: AppointmentService = Depends(get_appointment_service)):
    """Counts for the admin appointment badges"""
    return unwrap(service.get_appointment_stats())["stats"]
