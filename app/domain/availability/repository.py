"""Timeslot repository - Database operations for bookable slots"""

import logging
from datetime import date, datetime
from typing import Optional

from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ...models import Timeslot

logger = logging.getLogger(__name__)


class TimeslotRepository:
    """Repository for timeslot database operations"""

    @staticmethod
    def find(
        db: Session,
        day: Optional[date] = None,
        is_available: Optional[bool] = None,
        meeting_type: Optional[str] = None,
    ) -> list[Timeslot]:
        """Find slots matching the filters, sorted by (date, time)"""
        query = db.query(Timeslot)

        if day is not None:
            query = query.filter(Timeslot.date == day)
        if is_available is not None:
            query = query.filter(Timeslot.is_available.is_(is_available))
        if meeting_type:
            query = query.filter(Timeslot.meeting_type == meeting_type)

        return query.order_by(Timeslot.date.asc(), Timeslot.time.asc()).all()

    @staticmethod
    def find_one(db: Session, day: date, time: str) -> Optional[Timeslot]:
        return db.query(Timeslot).filter(Timeslot.date == day, Timeslot.time == time).first()

    @staticmethod
    def find_available_in_range(db: Session, start: date, end: date) -> list[Timeslot]:
        return (
            db.query(Timeslot)
            .filter(Timeslot.date >= start, Timeslot.date <= end, Timeslot.is_available.is_(True))
            .all()
        )

    @staticmethod
    def delete_available_in_range(db: Session, start: date, end: date) -> int:
        """Delete unbooked slots in [start, end]; booked slots are never touched"""
        return (
            db.query(Timeslot)
            .filter(Timeslot.date >= start, Timeslot.date <= end, Timeslot.is_available.is_(True))
            .delete(synchronize_session=False)
        )

    @staticmethod
    def delete_available_by_ids(db: Session, slot_ids: list[int]) -> int:
        if not slot_ids:
            return 0
        return (
            db.query(Timeslot)
            .filter(Timeslot.id.in_(slot_ids), Timeslot.is_available.is_(True))
            .delete(synchronize_session=False)
        )

    @staticmethod
    def existing_keys(db: Session, start: date, end: date) -> set[tuple[date, str]]:
        rows = (
            db.query(Timeslot.date, Timeslot.time)
            .filter(Timeslot.date >= start, Timeslot.date <= end)
            .all()
        )
        return {(row.date, row.time) for row in rows}

    @staticmethod
    def insert_unordered(db: Session, slots: list[tuple[date, str]], now: datetime) -> int:
        """
        Insert available slots, skipping any (date, time) that already exists.

        The batch is tried in one savepoint first; if a concurrent writer
        created a conflicting row the batch falls back to one savepoint per
        slot so a duplicate never aborts the rest.
        """
        if not slots:
            return 0

        def build(day, time):
            return Timeslot(date=day, time=time, is_available=True, created_at=now, updated_at=now)

        try:
            with db.begin_nested():
                db.add_all([build(day, time) for day, time in slots])
            return len(slots)
        except IntegrityError:
            logger.warning("⚠️ Duplicate timeslots in batch insert, retrying slot by slot")

        inserted = 0
        for day, time in slots:
            try:
                with db.begin_nested():
                    db.add(build(day, time))
                inserted += 1
            except IntegrityError:
                logger.debug(f"Skipping existing timeslot {day} {time}")
        return inserted

    @staticmethod
    def claim(
        db: Session,
        day: date,
        time: str,
        inquiry_id: int,
        meeting_type: Optional[str],
        now: datetime,
    ) -> bool:
        """
        Bind the (day, time) slot to an inquiry.

        The slot row is created first when absent, then bound with a single
        conditional UPDATE that only matches a free slot or one this inquiry
        already owns. Returns False when another inquiry holds the slot.
        """
        exists = (
            db.query(Timeslot.id).filter(Timeslot.date == day, Timeslot.time == time).first()
        )
        if not exists:
            try:
                with db.begin_nested():
                    db.add(
                        Timeslot(
                            date=day, time=time, is_available=True, created_at=now, updated_at=now
                        )
                    )
            except IntegrityError:
                logger.debug(f"Timeslot {day} {time} was created concurrently")

        updated = (
            db.query(Timeslot)
            .filter(
                Timeslot.date == day,
                Timeslot.time == time,
                or_(Timeslot.is_available.is_(True), Timeslot.inquiry_id == inquiry_id),
            )
            .update(
                {
                    Timeslot.is_available: False,
                    Timeslot.inquiry_id: inquiry_id,
                    Timeslot.meeting_type: meeting_type,
                    Timeslot.updated_at: now,
                },
                synchronize_session=False,
            )
        )
        return updated == 1

    @staticmethod
    def release(
        db: Session,
        inquiry_id: int,
        now: datetime,
        day: Optional[date] = None,
        time: Optional[str] = None,
    ) -> int:
        """Free slots bound to this inquiry (optionally only the given one)"""
        query = db.query(Timeslot).filter(Timeslot.inquiry_id == inquiry_id)
        if day is not None and time is not None:
            query = query.filter(Timeslot.date == day, Timeslot.time == time)

        return query.update(
            {
                Timeslot.is_available: True,
                Timeslot.inquiry_id: None,
                Timeslot.meeting_type: None,
                Timeslot.updated_at: now,
            },
            synchronize_session=False,
        )

    @staticmethod
    def release_for_inquiries(db: Session, inquiry_ids: list[int], now: datetime) -> int:
        return (
            db.query(Timeslot)
            .filter(Timeslot.inquiry_id.in_(inquiry_ids))
            .update(
                {
                    Timeslot.is_available: True,
                    Timeslot.inquiry_id: None,
                    Timeslot.meeting_type: None,
                    Timeslot.updated_at: now,
                },
                synchronize_session=False,
            )
        )

    @staticmethod
    def count(db: Session, is_available: Optional[bool] = None) -> int:
        query = db.query(Timeslot)
        if is_available is not None:
            query = query.filter(Timeslot.is_available.is_(is_available))
        return query.count()
