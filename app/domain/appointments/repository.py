"""Inquiry repository - Database operations for consultation requests"""

from datetime import date
from typing import Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from ...models import Inquiry


class InquiryRepository:
    """Repository for inquiry database operations"""

    @staticmethod
    def get_inquiries(db: Session) -> list[Inquiry]:
        """Get all inquiries, newest first"""
        return db.query(Inquiry).order_by(Inquiry.submitted_at.desc(), Inquiry.id.desc()).all()

    @staticmethod
    def get_inquiry_by_id(db: Session, inquiry_id: int) -> Optional[Inquiry]:
        return db.query(Inquiry).filter(Inquiry.id == inquiry_id).first()

    @staticmethod
    def create_inquiry(db: Session, **inquiry_data) -> Inquiry:
        """Add an inquiry and flush so it has an id; the caller commits"""
        inquiry = Inquiry(**inquiry_data)
        db.add(inquiry)
        db.flush()
        return inquiry

    @staticmethod
    def count_by_status(db: Session) -> dict[str, int]:
        rows = db.query(Inquiry.status, func.count(Inquiry.id)).group_by(Inquiry.status).all()
        return {status: count for status, count in rows}

    @staticmethod
    def count_upcoming(db: Session, from_date: date) -> int:
        """Confirmed or rescheduled inquiries whose date is today or later"""
        return (
            db.query(func.count(Inquiry.id))
            .filter(
                Inquiry.status.in_([Inquiry.STATUS_CONFIRMED, Inquiry.STATUS_RESCHEDULED]),
                Inquiry.preferred_date >= from_date,
            )
            .scalar()
        )

    @staticmethod
    def delete_by_ids(db: Session, inquiry_ids: list[int]) -> int:
        return (
            db.query(Inquiry)
            .filter(Inquiry.id.in_(inquiry_ids))
            .delete(synchronize_session=False)
        )
