"""Availability domain schemas - Pydantic models for validation"""

from datetime import date
from typing import Optional

from pydantic import BaseModel, field_validator, model_validator

from ...shared.validators import validate_hhmm, validate_working_days
from ...utils.clock import to_minutes


class BreakPeriod(BaseModel):
    """Half-open break window [start, end) during which no slot starts"""

    start: str
    end: str

    @field_validator("start", "end")
    @classmethod
    def validate_time(cls, v):
        return validate_hhmm(v)

    @model_validator(mode="after")
    def validate_order(self):
        if to_minutes(self.start) >= to_minutes(self.end):
            raise ValueError("Break start must be before break end")
        return self


class AvailabilitySettings(BaseModel):
    """Working hours configuration used to generate timeslots"""

    workingDays: list[int]
    startTime: str
    endTime: str
    slotDuration: int
    breaks: list[BreakPeriod] = []

    @field_validator("workingDays")
    @classmethod
    def validate_days(cls, v):
        return validate_working_days(v)

    @field_validator("startTime", "endTime")
    @classmethod
    def validate_time(cls, v):
        return validate_hhmm(v)

    @field_validator("slotDuration")
    @classmethod
    def validate_duration(cls, v):
        if v < 5:
            raise ValueError("Slot duration must be at least 5 minutes")
        return v

    @model_validator(mode="after")
    def validate_hours(self):
        if to_minutes(self.startTime) >= to_minutes(self.endTime):
            raise ValueError("Start time must be before end time")
        return self


class InitializeTimeslotsRequest(BaseModel):
    startDate: date
    endDate: date
    settings: AvailabilitySettings

    @model_validator(mode="after")
    def validate_range(self):
        if self.startDate > self.endDate:
            raise ValueError("Start date must be on or before end date")
        return self


class CleanupTimeslotsRequest(BaseModel):
    workingDays: list[int]

    @field_validator("workingDays")
    @classmethod
    def validate_days(cls, v):
        return validate_working_days(v)


class TimeslotResponse(BaseModel):
    """Schema for a stored timeslot"""

    id: int
    date: str
    time: str
    isAvailable: bool
    inquiryId: Optional[int] = None
    meetingType: Optional[str] = None


class TimeslotOption(BaseModel):
    """Selectable slot rendered for the booking form"""

    value: str
    label: str
    enabled: bool = True


class AvailabilityResult(BaseModel):
    success: bool
    message: Optional[str] = None
