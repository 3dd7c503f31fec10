from datetime import date

import pytest
from pydantic import ValidationError
from sqlalchemy.exc import OperationalError

from app.domain.availability.generator import generate_slots, slot_times, weekday_number
from app.domain.availability.repository import TimeslotRepository
from app.domain.availability.schemas import AvailabilitySettings
from app.domain.availability.service import AvailabilityService
from app.models import Inquiry, Timeslot

from .conftest import FIXED_NOW


def settings(**overrides) -> AvailabilitySettings:
    data = {
        "workingDays": [1, 2, 3, 4, 5],
        "startTime": "09:00",
        "endTime": "12:00",
        "slotDuration": 60,
        "breaks": [],
    }
    data.update(overrides)
    return AvailabilitySettings(**data)


class TestGenerator:
    def test_weekday_number_starts_on_sunday(self):
        assert weekday_number(date(2025, 6, 1)) == 0  # Sunday
        assert weekday_number(date(2025, 6, 2)) == 1  # Monday
        assert weekday_number(date(2025, 6, 7)) == 6  # Saturday

    def test_slot_times_step_by_duration(self):
        assert slot_times(settings()) == ["09:00", "10:00", "11:00"]

    def test_trailing_partial_slot_is_dropped(self):
        assert slot_times(settings(slotDuration=45)) == ["09:00", "09:45", "10:30", "11:15"]

    def test_breaks_are_half_open(self):
        times = slot_times(
            settings(slotDuration=30, breaks=[{"start": "10:00", "end": "11:00"}])
        )
        assert times == ["09:00", "09:30", "11:00", "11:30"]

    def test_only_working_days_are_generated(self):
        slots = generate_slots(date(2025, 6, 1), date(2025, 6, 7), settings())
        days = {day for day, _ in slots}
        assert date(2025, 6, 1) not in days
        assert date(2025, 6, 7) not in days
        assert len(days) == 5
        assert len(slots) == 15

    def test_settings_reject_start_after_end(self):
        with pytest.raises(ValidationError):
            settings(startTime="13:00", endTime="09:00")

    def test_settings_reject_invalid_weekday(self):
        with pytest.raises(ValidationError):
            settings(workingDays=[1, 7])


class TestInitializeTimeslots:
    def test_creates_slots_for_working_days(self, db, clock):
        service = AvailabilityService(db, clock)
        result = service.initialize_timeslots(date(2025, 6, 2), date(2025, 6, 8), settings())

        assert result["success"] is True
        assert result["message"] == "Initialized 15 timeslots for 5 working days with 60-minute slots"
        assert TimeslotRepository.count(db, is_available=True) == 15

    def test_bulk_write_failure_returns_message(self, db, clock, monkeypatch):
        service = AvailabilityService(db, clock)

        def bulk_insert_fails(*args, **kwargs):
            raise OperationalError("INSERT INTO timeslots", {}, Exception("database is locked"))

        monkeypatch.setattr(service.repo, "insert_unordered", bulk_insert_fails)

        result = service.initialize_timeslots(date(2025, 6, 2), date(2025, 6, 8), settings())

        assert result == {
            "success": False,
            "error": "Failed to initialize timeslots",
            "code": "error",
        }
        assert TimeslotRepository.count(db) == 0

    def test_rerun_replaces_available_slots(self, db, clock):
        service = AvailabilityService(db, clock)
        service.initialize_timeslots(date(2025, 6, 2), date(2025, 6, 8), settings())
        service.initialize_timeslots(date(2025, 6, 2), date(2025, 6, 8), settings(slotDuration=90))

        times = {slot.time for slot in TimeslotRepository.find(db, day=date(2025, 6, 3))}
        assert times == {"09:00", "10:30"}

    def test_booked_slots_are_preserved(self, db, clock):
        inquiry = Inquiry(
            name="Maria",
            email="maria@example.com",
            phone="0917",
            message="Hi",
            design={"id": "D-1", "name": "Loft"},
            preferred_date=date(2025, 6, 3),
            preferred_time="10:00",
            meeting_type="video",
            status=Inquiry.STATUS_CONFIRMED,
        )
        db.add(inquiry)
        db.flush()
        db.add(
            Timeslot(
                date=date(2025, 6, 3),
                time="10:00",
                is_available=False,
                inquiry_id=inquiry.id,
                meeting_type="video",
            )
        )
        db.commit()

        service = AvailabilityService(db, clock)
        result = service.initialize_timeslots(date(2025, 6, 2), date(2025, 6, 8), settings())

        assert result["success"] is True
        assert TimeslotRepository.count(db) == 15
        booked = TimeslotRepository.find_one(db, date(2025, 6, 3), "10:00")
        assert booked.is_available is False
        assert booked.inquiry_id == inquiry.id


class TestCleanupAndDuration:
    def test_cleanup_removes_non_working_days(self, db, clock):
        service = AvailabilityService(db, clock)
        service.initialize_timeslots(
            date(2025, 6, 2), date(2025, 6, 8), settings(workingDays=[1, 2, 3, 4, 5, 6])
        )

        result = service.cleanup_timeslots([1, 2, 3, 4, 5])

        assert result["message"] == "Cleaned up 3 timeslots from non-working days"
        assert TimeslotRepository.find(db, day=date(2025, 6, 7)) == []

    def test_update_duration_rebuilds_window(self, db, clock):
        service = AvailabilityService(db, clock)
        service.initialize_timeslots(date(2025, 6, 2), date(2025, 6, 16), settings())

        result = service.update_timeslots_for_new_duration(settings(slotDuration=30))

        # 2025-06-02 through 2025-06-16 has 11 weekdays
        assert result["message"] == "Initialized 66 timeslots for 5 working days with 30-minute slots"
        assert TimeslotRepository.count(db, is_available=True) == 66


class TestAvailableTimeslots:
    def test_options_are_sorted_with_labels(self, db, clock):
        for time in ("13:30", "09:00"):
            db.add(Timeslot(date=date(2025, 6, 3), time=time, is_available=True))
        db.add(Timeslot(date=date(2025, 6, 3), time="10:00", is_available=False))
        db.commit()

        result = AvailabilityService(db, clock).get_available_timeslots(date(2025, 6, 3))

        assert result["timeslots"] == [
            {"value": "09:00", "label": "9:00 AM", "enabled": True},
            {"value": "13:30", "label": "1:30 PM", "enabled": True},
        ]

    def test_timeslot_filters(self, db, clock):
        db.add(Timeslot(date=date(2025, 6, 3), time="09:00", is_available=True))
        db.add(
            Timeslot(date=date(2025, 6, 3), time="10:00", is_available=False, meeting_type="phone")
        )
        db.add(Timeslot(date=date(2025, 6, 4), time="09:00", is_available=True))
        db.commit()

        service = AvailabilityService(db, clock)
        booked = service.get_timeslots(is_available=False)["timeslots"]
        by_day = service.get_timeslots(day=date(2025, 6, 3))["timeslots"]

        assert [slot["time"] for slot in booked] == ["10:00"]
        assert booked[0]["meetingType"] == "phone"
        assert [slot["time"] for slot in by_day] == ["09:00", "10:00"]


class TestClaim:
    def test_claim_is_exclusive_and_idempotent(self, db):
        day = FIXED_NOW.date()

        assert TimeslotRepository.claim(db, day, "09:00", 1, "onsite", FIXED_NOW) is True
        assert TimeslotRepository.claim(db, day, "09:00", 1, "onsite", FIXED_NOW) is True
        assert TimeslotRepository.claim(db, day, "09:00", 2, "onsite", FIXED_NOW) is False
        db.commit()

        assert TimeslotRepository.count(db) == 1
        slot = TimeslotRepository.find_one(db, day, "09:00")
        assert slot.inquiry_id == 1
