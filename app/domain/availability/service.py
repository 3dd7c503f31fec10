"""Availability service - Timeslot generation, cleanup and slot queries"""

import logging
from datetime import date, timedelta
from typing import Optional

from sqlalchemy.orm import Session

from ...config import AVAILABILITY_WINDOW_DAYS
from ...models import Timeslot
from ...utils.clock import Clock, format_time_display, now, today
from .generator import generate_slots, weekday_number
from .repository import TimeslotRepository
from .schemas import AvailabilitySettings

logger = logging.getLogger(__name__)


def serialize_timeslot(slot: Timeslot) -> dict:
    return {
        "id": slot.id,
        "date": slot.date.isoformat(),
        "time": slot.time,
        "isAvailable": slot.is_available,
        "inquiryId": slot.inquiry_id,
        "meetingType": slot.meeting_type,
    }


class AvailabilityService:
    """Service layer for timeslot capacity"""

    def __init__(self, db: Session, clock: Clock = now):
        self.db = db
        self.clock = clock
        self.repo = TimeslotRepository()

    def _window(self) -> tuple[date, date]:
        start = today(self.clock)
        return start, start + timedelta(days=AVAILABILITY_WINDOW_DAYS)

    def initialize_timeslots(
        self, start_date: date, end_date: date, settings: AvailabilitySettings
    ) -> dict:
        """
        Regenerate available slots for [start_date, end_date].

        Existing available slots in the range are replaced; booked slots are
        kept and a generated slot that collides with one is skipped.
        """
        logger.info(
            f"📅 Initializing timeslots {start_date} → {end_date} "
            f"(days={settings.workingDays}, {settings.startTime}-{settings.endTime}, "
            f"{settings.slotDuration}min)"
        )
        try:
            removed = self.repo.delete_available_in_range(self.db, start_date, end_date)
            self.db.commit()

            slots = generate_slots(start_date, end_date, settings)
            existing = self.repo.existing_keys(self.db, start_date, end_date)
            fresh = [slot for slot in slots if slot not in existing]
            inserted = self.repo.insert_unordered(self.db, fresh, self.clock())
            self.db.commit()

            logger.info(
                f"✅ Timeslots initialized: {inserted} inserted, "
                f"{len(slots) - inserted} skipped, {removed} replaced"
            )
            return {
                "success": True,
                "message": (
                    f"Initialized {len(slots)} timeslots for {len(settings.workingDays)} "
                    f"working days with {settings.slotDuration}-minute slots"
                ),
            }
        except Exception as e:
            self.db.rollback()
            logger.error(f"❌ Error initializing timeslots: {e}")
            return {"success": False, "error": "Failed to initialize timeslots", "code": "error"}

    def cleanup_timeslots(self, working_days: list[int]) -> dict:
        """Remove available slots on days that are no longer working days"""
        try:
            start, end = self._window()
            candidates = self.repo.find_available_in_range(self.db, start, end)
            to_delete = [
                slot.id for slot in candidates if weekday_number(slot.date) not in set(working_days)
            ]
            deleted = self.repo.delete_available_by_ids(self.db, to_delete)
            self.db.commit()

            logger.info(f"🧹 Removed {deleted} timeslots from non-working days")
            return {
                "success": True,
                "message": f"Cleaned up {deleted} timeslots from non-working days",
            }
        except Exception as e:
            self.db.rollback()
            logger.error(f"❌ Error cleaning up timeslots: {e}")
            return {"success": False, "error": "Failed to cleanup timeslots", "code": "error"}

    def update_timeslots_for_new_duration(self, settings: AvailabilitySettings) -> dict:
        """Rebuild the upcoming availability window after a slot duration change"""
        try:
            start, end = self._window()
            self.repo.delete_available_in_range(self.db, start, end)
            self.db.commit()
        except Exception as e:
            self.db.rollback()
            logger.error(f"❌ Error updating timeslots for new duration: {e}")
            return {
                "success": False,
                "error": "Failed to update timeslots for new duration",
                "code": "error",
            }
        return self.initialize_timeslots(start, end, settings)

    def get_available_timeslots(self, day: date) -> dict:
        """Selectable options for a date, one per distinct time"""
        try:
            slots = self.repo.find(self.db, day=day, is_available=True)
            seen = set()
            options = []
            for slot in slots:
                if slot.time in seen:
                    continue
                seen.add(slot.time)
                options.append(
                    {"value": slot.time, "label": format_time_display(slot.time), "enabled": True}
                )
            options.sort(key=lambda option: option["value"])
            return {"success": True, "timeslots": options}
        except Exception as e:
            logger.error(f"❌ Error fetching available timeslots for {day}: {e}")
            return {"success": False, "error": "Failed to fetch available timeslots", "code": "error"}

    def get_timeslots(
        self,
        day: Optional[date] = None,
        is_available: Optional[bool] = None,
        meeting_type: Optional[str] = None,
    ) -> dict:
        try:
            slots = self.repo.find(
                self.db, day=day, is_available=is_available, meeting_type=meeting_type
            )
            return {"success": True, "timeslots": [serialize_timeslot(s) for s in slots]}
        except Exception as e:
            logger.error(f"❌ Error fetching timeslots: {e}")
            return {"success": False, "error": "Failed to fetch timeslots", "code": "error"}
