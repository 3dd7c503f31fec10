"""PDC repository - Database operations for post-dated checks"""

from datetime import date
from typing import Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from ...models_pdc import InventoryItem, PostDatedCheck


class PDCRepository:
    """Repository for PDC database operations"""

    @staticmethod
    def _newest_check_first(query):
        return query.order_by(PostDatedCheck.check_date.desc(), PostDatedCheck.created_at.desc())

    @staticmethod
    def get_all(db: Session) -> list[PostDatedCheck]:
        return db.query(PostDatedCheck).order_by(PostDatedCheck.created_at.desc()).all()

    @staticmethod
    def get_by_id(db: Session, pdc_id: str) -> Optional[PostDatedCheck]:
        return db.query(PostDatedCheck).filter(PostDatedCheck.id == pdc_id).first()

    @staticmethod
    def get_by_check_number(db: Session, check_number: str) -> Optional[PostDatedCheck]:
        return (
            db.query(PostDatedCheck).filter(PostDatedCheck.check_number == check_number).first()
        )

    @staticmethod
    def get_by_status(db: Session, status: str) -> list[PostDatedCheck]:
        query = db.query(PostDatedCheck).filter(PostDatedCheck.status == status)
        return PDCRepository._newest_check_first(query).all()

    @staticmethod
    def get_by_supplier(db: Session, supplier: str) -> list[PostDatedCheck]:
        query = db.query(PostDatedCheck).filter(PostDatedCheck.supplier == supplier)
        return PDCRepository._newest_check_first(query).all()

    @staticmethod
    def get_by_date_range(db: Session, start: date, end: date) -> list[PostDatedCheck]:
        query = db.query(PostDatedCheck).filter(
            PostDatedCheck.check_date >= start, PostDatedCheck.check_date <= end
        )
        return PDCRepository._newest_check_first(query).all()

    @staticmethod
    def search(
        db: Session,
        check_number: Optional[str] = None,
        supplier: Optional[str] = None,
        status: Optional[str] = None,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
        page: int = 1,
        limit: int = 10,
    ) -> tuple[list[PostDatedCheck], int]:
        """Case-insensitive substring search. Returns (page of results, total matches)"""
        query = db.query(PostDatedCheck)

        if check_number:
            query = query.filter(PostDatedCheck.check_number.ilike(f"%{check_number}%"))
        if supplier:
            query = query.filter(PostDatedCheck.supplier.ilike(f"%{supplier}%"))
        if status:
            query = query.filter(PostDatedCheck.status == status)
        if date_from:
            query = query.filter(PostDatedCheck.check_date >= date_from)
        if date_to:
            query = query.filter(PostDatedCheck.check_date <= date_to)

        total = query.count()
        pdcs = (
            PDCRepository._newest_check_first(query)
            .offset((page - 1) * limit)
            .limit(limit)
            .all()
        )
        return pdcs, total

    @staticmethod
    def totals_by_status(db: Session) -> list[tuple[str, int, float]]:
        """(status, count, summed amount) per status"""
        return (
            db.query(
                PostDatedCheck.status,
                func.count(PostDatedCheck.id),
                func.coalesce(func.sum(PostDatedCheck.total_amount), 0),
            )
            .group_by(PostDatedCheck.status)
            .all()
        )

    @staticmethod
    def create(db: Session, **pdc_data) -> PostDatedCheck:
        """Add a PDC and flush; the caller commits"""
        pdc = PostDatedCheck(**pdc_data)
        db.add(pdc)
        db.flush()
        return pdc

    @staticmethod
    def get_inventory_items(db: Session, product_ids: list[str]) -> list[InventoryItem]:
        if not product_ids:
            return []
        return db.query(InventoryItem).filter(InventoryItem.product_id.in_(product_ids)).all()
