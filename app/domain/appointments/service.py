"""Appointment service - Inquiry booking workflow"""

import logging
from typing import Optional

from sqlalchemy.orm import Session

from ...models import Inquiry
from ...services.outbox import record_event
from ...services.status_automation import validate_status_transition
from ...shared.validators import (
    validate_email,
    validate_hhmm,
    validate_iso_date,
    validate_meeting_type,
)
from ...utils.clock import Clock, now, today
from ..availability.repository import TimeslotRepository
from .repository import InquiryRepository
from .schemas import InquiryCreate

logger = logging.getLogger(__name__)


def serialize_inquiry(inquiry: Inquiry) -> dict:
    return {
        "id": inquiry.id,
        "name": inquiry.name,
        "email": inquiry.email,
        "phone": inquiry.phone,
        "message": inquiry.message,
        "design": inquiry.design,
        "preferredDate": inquiry.preferred_date.isoformat(),
        "preferredTime": inquiry.preferred_time,
        "meetingType": inquiry.meeting_type,
        "status": inquiry.status,
        "notes": inquiry.notes,
        "cancellationReason": inquiry.cancellation_reason,
        "rescheduleNotes": inquiry.reschedule_notes,
        "userId": inquiry.user_id,
        "userType": "registered" if inquiry.user_id else "guest",
        "submittedAt": inquiry.submitted_at,
        "updatedAt": inquiry.updated_at,
    }


def event_payload(inquiry: Inquiry, **extra) -> dict:
    """Snapshot of the inquiry carried by appointment events"""
    payload = {
        "inquiry_id": inquiry.id,
        "name": inquiry.name,
        "email": inquiry.email,
        "phone": inquiry.phone,
        "message": inquiry.message,
        "design": inquiry.design,
        "preferred_date": inquiry.preferred_date.isoformat(),
        "preferred_time": inquiry.preferred_time,
        "meeting_type": inquiry.meeting_type,
        "user_id": inquiry.user_id,
    }
    payload.update(extra)
    return payload


def _failure(error: str, code: str) -> dict:
    return {"success": False, "error": error, "code": code}


class AppointmentService:
    """
    Service layer for the inquiry state machine.

    Every transition runs in one transaction: the timeslot write, the inquiry
    write and the outbox event commit together or not at all.
    """

    def __init__(self, db: Session, clock: Clock = now):
        self.db = db
        self.clock = clock
        self.repo = InquiryRepository()
        self.slots = TimeslotRepository()

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_inquiries(self) -> dict:
        try:
            inquiries = self.repo.get_inquiries(self.db)
            return {"success": True, "inquiries": [serialize_inquiry(i) for i in inquiries]}
        except Exception as e:
            logger.error(f"❌ Error fetching inquiries: {e}")
            return _failure("Failed to fetch inquiries", "error")

    def get_inquiry(self, inquiry_id: int) -> dict:
        try:
            inquiry = self.repo.get_inquiry_by_id(self.db, inquiry_id)
            if not inquiry:
                return _failure("Inquiry not found", "not_found")
            return {"success": True, "inquiry": serialize_inquiry(inquiry)}
        except Exception as e:
            logger.error(f"❌ Error fetching inquiry {inquiry_id}: {e}")
            return _failure("Failed to fetch inquiry", "error")

    def get_appointment_stats(self) -> dict:
        """Badge counts; upcoming = confirmed or rescheduled on or after today"""
        try:
            counts = self.repo.count_by_status(self.db)
            upcoming = self.repo.count_upcoming(self.db, today(self.clock))
            stats = {
                "pendingCount": counts.get(Inquiry.STATUS_PENDING, 0),
                "upcomingCount": upcoming or 0,
                "confirmedCount": counts.get(Inquiry.STATUS_CONFIRMED, 0),
                "cancelledCount": counts.get(Inquiry.STATUS_CANCELLED, 0),
                "rescheduledCount": counts.get(Inquiry.STATUS_RESCHEDULED, 0),
                "completedCount": counts.get(Inquiry.STATUS_COMPLETED, 0),
                "totalCount": sum(counts.values()),
            }
            return {"success": True, "stats": stats}
        except Exception as e:
            logger.error(f"❌ Error fetching appointment stats: {e}")
            return _failure("Failed to fetch appointment statistics", "error")

    # ------------------------------------------------------------------
    # Submission
    # ------------------------------------------------------------------

    def submit_inquiry(self, data: InquiryCreate) -> dict:
        """Record a new pending inquiry; no timeslot is reserved until confirmation"""
        required = [
            data.name,
            data.email,
            data.phone,
            data.message,
            data.preferredDate,
            data.preferredTime,
            data.meetingType,
        ]
        if any(not (value or "").strip() for value in required) or not data.design:
            return _failure("All fields are required", "validation")

        try:
            email = validate_email(data.email)
            preferred_date = validate_iso_date(data.preferredDate)
            preferred_time = validate_hhmm(data.preferredTime)
            meeting_type = validate_meeting_type(data.meetingType)
        except ValueError as e:
            return _failure(str(e), "validation")

        try:
            moment = self.clock()
            inquiry = self.repo.create_inquiry(
                self.db,
                name=data.name.strip(),
                email=email,
                phone=data.phone.strip(),
                message=data.message.strip(),
                design=data.design.model_dump(),
                preferred_date=preferred_date,
                preferred_time=preferred_time,
                meeting_type=meeting_type,
                status=Inquiry.STATUS_PENDING,
                user_id=data.userId,
                submitted_at=moment,
                updated_at=moment,
            )
            record_event(
                self.db,
                "inquiry_submitted",
                "inquiry",
                inquiry.id,
                event_payload(inquiry),
                created_at=moment,
            )
            self.db.commit()
            self.db.refresh(inquiry)

            logger.info(f"📥 Inquiry {inquiry.id} submitted by {inquiry.email}")
            return {"success": True, "inquiry": serialize_inquiry(inquiry)}
        except Exception as e:
            self.db.rollback()
            logger.error(f"❌ Error submitting inquiry: {e}")
            return _failure("Failed to submit inquiry", "error")

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    def _load(self, inquiry_id: int, action: str, target_status: str):
        """Return (inquiry, None) or (None, failure result)"""
        inquiry = self.repo.get_inquiry_by_id(self.db, inquiry_id)
        if not inquiry:
            return None, _failure("Inquiry not found", "not_found")
        if not validate_status_transition(inquiry.status, target_status):
            logger.warning(
                f"⚠️ Rejected {action} for inquiry {inquiry_id}: status is {inquiry.status}"
            )
            return None, _failure(
                f"Cannot {action} an inquiry that is {inquiry.status}", "validation"
            )
        return inquiry, None

    def _commit(self, inquiry: Inquiry) -> dict:
        self.db.commit()
        self.db.refresh(inquiry)
        return {"success": True, "inquiry": serialize_inquiry(inquiry)}

    def confirm_inquiry(self, inquiry_id: int) -> dict:
        """Reserve the requested slot and confirm the appointment"""
        try:
            inquiry, failure = self._load(inquiry_id, "confirm", Inquiry.STATUS_CONFIRMED)
            if failure:
                return failure

            moment = self.clock()
            claimed = self.slots.claim(
                self.db,
                inquiry.preferred_date,
                inquiry.preferred_time,
                inquiry.id,
                inquiry.meeting_type,
                moment,
            )
            if not claimed:
                self.db.rollback()
                logger.warning(
                    f"⚠️ Slot {inquiry.preferred_date} {inquiry.preferred_time} already booked"
                )
                return _failure("This time slot is already booked", "conflict")

            inquiry.status = Inquiry.STATUS_CONFIRMED
            inquiry.updated_at = moment
            record_event(
                self.db,
                "appointment_confirmed",
                "inquiry",
                inquiry.id,
                event_payload(inquiry),
                created_at=moment,
            )
            result = self._commit(inquiry)
            logger.info(f"✅ Inquiry {inquiry_id} confirmed")
            return result
        except Exception as e:
            self.db.rollback()
            logger.error(f"❌ Error confirming inquiry {inquiry_id}: {e}")
            return _failure("Failed to confirm inquiry", "error")

    def cancel_inquiry(self, inquiry_id: int, reason: Optional[str] = None) -> dict:
        """Cancel and free any slot the inquiry holds"""
        try:
            inquiry, failure = self._load(inquiry_id, "cancel", Inquiry.STATUS_CANCELLED)
            if failure:
                return failure

            moment = self.clock()
            self.slots.release(self.db, inquiry.id, moment)

            inquiry.status = Inquiry.STATUS_CANCELLED
            inquiry.cancellation_reason = reason
            inquiry.updated_at = moment
            record_event(
                self.db,
                "appointment_cancelled",
                "inquiry",
                inquiry.id,
                event_payload(inquiry, reason=reason),
                created_at=moment,
            )
            result = self._commit(inquiry)
            logger.info(f"✅ Inquiry {inquiry_id} cancelled")
            return result
        except Exception as e:
            self.db.rollback()
            logger.error(f"❌ Error cancelling inquiry {inquiry_id}: {e}")
            return _failure("Failed to cancel inquiry", "error")

    def reschedule_inquiry(
        self, inquiry_id: int, new_date, new_time: str, notes: Optional[str] = None
    ) -> dict:
        """Move a booked appointment to another slot"""
        try:
            day = validate_iso_date(new_date)
            time = validate_hhmm(new_time)
        except ValueError as e:
            return _failure(str(e), "validation")

        try:
            inquiry, failure = self._load(inquiry_id, "reschedule", Inquiry.STATUS_RESCHEDULED)
            if failure:
                return failure

            moment = self.clock()
            original_date = inquiry.preferred_date.isoformat()
            original_time = inquiry.preferred_time

            self.slots.release(self.db, inquiry.id, moment)
            claimed = self.slots.claim(
                self.db, day, time, inquiry.id, inquiry.meeting_type, moment
            )
            if not claimed:
                # Restores the original slot binding
                self.db.rollback()
                logger.warning(f"⚠️ Reschedule target {day} {time} already booked")
                return _failure("The selected time slot is already booked", "conflict")

            inquiry.preferred_date = day
            inquiry.preferred_time = time
            inquiry.status = Inquiry.STATUS_RESCHEDULED
            if notes:
                inquiry.reschedule_notes = notes
            inquiry.updated_at = moment
            record_event(
                self.db,
                "appointment_rescheduled",
                "inquiry",
                inquiry.id,
                event_payload(
                    inquiry,
                    original_date=original_date,
                    original_time=original_time,
                    new_date=day.isoformat(),
                    new_time=time,
                    notes=notes,
                ),
                created_at=moment,
            )
            result = self._commit(inquiry)
            logger.info(
                f"🔄 Inquiry {inquiry_id} rescheduled: {original_date} {original_time} → {day} {time}"
            )
            return result
        except Exception as e:
            self.db.rollback()
            logger.error(f"❌ Error rescheduling inquiry {inquiry_id}: {e}")
            return _failure("Failed to reschedule inquiry", "error")

    def complete_inquiry(self, inquiry_id: int) -> dict:
        """Mark the consultation as held; the slot stays bound as a record of it"""
        try:
            inquiry, failure = self._load(inquiry_id, "complete", Inquiry.STATUS_COMPLETED)
            if failure:
                return failure

            moment = self.clock()
            inquiry.status = Inquiry.STATUS_COMPLETED
            inquiry.updated_at = moment
            record_event(
                self.db,
                "appointment_completed",
                "inquiry",
                inquiry.id,
                event_payload(inquiry),
                created_at=moment,
            )
            result = self._commit(inquiry)
            logger.info(f"✅ Inquiry {inquiry_id} completed")
            return result
        except Exception as e:
            self.db.rollback()
            logger.error(f"❌ Error completing inquiry {inquiry_id}: {e}")
            return _failure("Failed to complete inquiry", "error")

    # ------------------------------------------------------------------
    # Administration
    # ------------------------------------------------------------------

    def delete_inquiries(self, inquiry_ids: list[int]) -> dict:
        """Batch delete inquiries, releasing their slots first"""
        if not inquiry_ids:
            return _failure("No inquiry IDs provided", "validation")

        try:
            released = self.slots.release_for_inquiries(self.db, inquiry_ids, self.clock())
            deleted = self.repo.delete_by_ids(self.db, inquiry_ids)
            if deleted == 0:
                self.db.rollback()
                return _failure("No inquiries found to delete", "not_found")

            self.db.commit()
            logger.info(f"🗑️ Deleted {deleted} inquiries ({released} timeslot(s) released)")
            return {
                "success": True,
                "message": f"Successfully deleted {deleted} inquiry(s)",
                "deletedCount": deleted,
            }
        except Exception as e:
            self.db.rollback()
            logger.error(f"❌ Error deleting inquiries: {e}")
            return _failure("An unexpected error occurred while deleting inquiries", "error")
