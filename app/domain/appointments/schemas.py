"""Appointment domain schemas - Pydantic models for validation"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel


class DesignInfo(BaseModel):
    """Design package the client is enquiring about"""

    id: str
    name: str
    price: Optional[float] = None
    square_meters: Optional[float] = None


class InquiryCreate(BaseModel):
    """
    Schema for a consultation request from the public site.
    Field rules are enforced by the service so the caller gets the
    form-level error message.
    """

    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    message: Optional[str] = None
    design: Optional[DesignInfo] = None
    preferredDate: Optional[str] = None
    preferredTime: Optional[str] = None
    meetingType: Optional[str] = None
    userId: Optional[str] = None


class CancelInquiryRequest(BaseModel):
    reason: Optional[str] = None


class RescheduleInquiryRequest(BaseModel):
    newDate: str
    newTime: str
    notes: Optional[str] = None


class BatchDeleteRequest(BaseModel):
    """Schema for batch delete operation"""

    inquiryIds: list[int]


class InquiryResponse(BaseModel):
    """Schema for inquiry response"""

    id: int
    name: str
    email: str
    phone: str
    message: str
    design: dict
    preferredDate: str
    preferredTime: str
    meetingType: str
    status: str
    notes: Optional[str] = None
    cancellationReason: Optional[str] = None
    rescheduleNotes: Optional[str] = None
    userId: Optional[str] = None
    userType: str
    submittedAt: Optional[datetime] = None
    updatedAt: Optional[datetime] = None


class AppointmentStats(BaseModel):
    pendingCount: int
    upcomingCount: int
    confirmedCount: int
    cancelledCount: int
    rescheduledCount: int
    completedCount: int
    totalCount: int


class BatchDeleteResponse(BaseModel):
    success: bool
    message: str
    deletedCount: int
