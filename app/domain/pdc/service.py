"""PDC service - Post-dated check lifecycle and automatic issuing"""

import logging
from datetime import date
from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ...config import CHECK_NUMBER_PREFIX
from ...models_pdc import PostDatedCheck
from ...services.outbox import record_event
from ...services.status_automation import issue_due_checks
from ...utils.clock import Clock, now, today
from .repository import PDCRepository
from .schemas import PDCCreate, PDCStatusUpdate

logger = logging.getLogger(__name__)


def serialize_pdc(pdc: PostDatedCheck, item_details: Optional[list[dict]] = None) -> dict:
    data = {
        "pdc_id": pdc.id,
        "checkNumber": pdc.check_number,
        "checkDate": pdc.check_date,
        "supplier": pdc.supplier,
        "totalAmount": pdc.total_amount,
        "itemCount": pdc.item_count,
        "payee": pdc.payee,
        "amountInWords": pdc.amount_in_words,
        "items": pdc.items or [],
        "status": pdc.status,
        "notes": pdc.notes,
        "createdAt": pdc.created_at,
        "updatedAt": pdc.updated_at,
        "issuedAt": pdc.issued_at,
        "cancelledAt": pdc.cancelled_at,
    }
    if item_details is not None:
        data["itemDetails"] = item_details
    return data


def unknown_item(item: dict) -> dict:
    return {
        **item,
        "name": "Unknown Item",
        "category": "Unknown Category",
        "unit": "N/A",
        "description": "",
        "currentQuantity": 0,
        "currentUnitCost": item.get("unit_cost") or 0,
        "salePrice": 0,
        "location": "",
        "reorderPoint": 0,
        "totalCapital": 0,
        "totalValue": 0,
    }


def pdc_event_payload(pdc: PostDatedCheck, **extra) -> dict:
    payload = {
        "check_number": pdc.check_number,
        "supplier": pdc.supplier,
        "payee": pdc.payee,
        "total_amount": pdc.total_amount,
        "check_date": pdc.check_date.isoformat(),
    }
    payload.update(extra)
    return payload


def _failure(error: str, code: str) -> dict:
    return {"success": False, "error": error, "code": code}


class PDCService:
    """Service layer for post-dated checks"""

    def __init__(self, db: Session, clock: Clock = now):
        self.db = db
        self.clock = clock
        self.repo = PDCRepository()

    # ------------------------------------------------------------------
    # Automatic issuing
    # ------------------------------------------------------------------

    def auto_issue_due_checks(self) -> int:
        """Issue every pending check whose date has arrived. Returns the count"""
        summary = issue_due_checks(self.db, self.clock)
        if summary["issued"]:
            logger.info(f"🎯 Auto-issued {summary['issued']} PDC(s)")
        return summary["issued"]

    def run_auto_issue(self) -> dict:
        """On-demand sweep for the API; store failures come back as a result"""
        try:
            return {"success": True, "issuedCount": self.auto_issue_due_checks()}
        except Exception as e:
            logger.error(f"❌ Failed to auto-issue PDCs: {e}")
            return _failure("Failed to auto-issue PDCs", "error")

    def _sweep_before_read(self) -> None:
        """Reads show up-to-date statuses even if the scheduler has not run yet"""
        try:
            self.auto_issue_due_checks()
        except Exception as e:
            logger.error(f"❌ Failed to auto-issue PDCs before read: {e}")

    # ------------------------------------------------------------------
    # Item details
    # ------------------------------------------------------------------

    def get_item_details(self, items: list[dict]) -> list[dict]:
        """Merge each PDC line with its inventory record"""
        product_ids = [
            item.get("product_id")
            for item in items
            if isinstance(item.get("product_id"), str)
            and item.get("product_id")
            and not item["product_id"].startswith("temp-")
        ]

        try:
            inventory = {
                record.product_id: record
                for record in self.repo.get_inventory_items(self.db, product_ids)
            }
        except Exception as e:
            logger.error(f"❌ Failed to load inventory for PDC items: {e}")
            return [unknown_item(item) for item in items]

        details = []
        for item in items:
            record = inventory.get(item.get("product_id"))
            if not record:
                details.append(unknown_item(item))
                continue
            details.append(
                {
                    **item,
                    "name": record.name,
                    "category": record.category,
                    "unit": record.unit,
                    "description": record.description or "",
                    "currentQuantity": record.quantity or 0,
                    "currentUnitCost": record.unit_cost or item.get("unit_cost") or 0,
                    "salePrice": record.sale_price or 0,
                    "location": record.location or "",
                    "reorderPoint": record.reorder_point or 0,
                    "totalCapital": record.total_capital,
                    "totalValue": record.total_value,
                }
            )
        return details

    def _with_details(self, pdcs: list[PostDatedCheck]) -> list[dict]:
        return [serialize_pdc(pdc, self.get_item_details(pdc.items or [])) for pdc in pdcs]

    # ------------------------------------------------------------------
    # Create / update
    # ------------------------------------------------------------------

    def _generate_check_number(self) -> str:
        millis = str(int(self.clock().timestamp() * 1000))
        return f"{CHECK_NUMBER_PREFIX}{millis[-8:]}"

    def create_pdc(self, data: PDCCreate) -> dict:
        """
        Record a new check.

        A check dated today or earlier is issued immediately; later checks
        stay pending until the auto-issue sweep reaches their date.
        """
        check_number = (data.checkNumber or "").strip() or self._generate_check_number()

        try:
            if self.repo.get_by_check_number(self.db, check_number):
                return _failure("Check number already exists", "conflict")

            moment = self.clock()
            due = data.checkDate <= today(self.clock)
            items = [item.model_dump() for item in data.items]

            pdc = self.repo.create(
                self.db,
                check_number=check_number,
                check_date=data.checkDate,
                supplier=data.supplier,
                total_amount=data.totalAmount,
                item_count=data.itemCount if data.itemCount is not None else len(items),
                payee=data.payee,
                amount_in_words=data.amountInWords,
                items=items,
                status=PostDatedCheck.STATUS_ISSUED if due else PostDatedCheck.STATUS_PENDING,
                notes=data.notes,
                created_at=moment,
                updated_at=moment,
                issued_at=moment if due else None,
            )
            record_event(
                self.db, "pdc_created", "pdc", pdc.id, pdc_event_payload(pdc), created_at=moment
            )
            if due:
                record_event(
                    self.db,
                    "pdc_issued",
                    "pdc",
                    pdc.id,
                    pdc_event_payload(pdc, automatic=True),
                    created_at=moment,
                )
            self.db.commit()
            self.db.refresh(pdc)

            logger.info(f"✅ PDC created successfully: {pdc.check_number} with status: {pdc.status}")
            return {"success": True, "pdc": serialize_pdc(pdc)}
        except IntegrityError:
            self.db.rollback()
            logger.warning(f"⚠️ Duplicate check number on insert: {check_number}")
            return _failure("Check number already exists", "conflict")
        except Exception as e:
            self.db.rollback()
            logger.error(f"❌ Failed to create PDC: {e}")
            return _failure("Failed to create PDC record", "error")

    def update_pdc_status(self, pdc_id: str, update: PDCStatusUpdate) -> dict:
        """Manually issue or cancel a check, stamping the matching timestamp"""
        try:
            pdc = self.repo.get_by_id(self.db, pdc_id)
            if not pdc:
                return _failure("PDC not found", "not_found")
            if pdc.status == PostDatedCheck.STATUS_CANCELLED:
                return _failure("PDC is already cancelled", "validation")
            if pdc.status == update.status:
                return _failure(f"PDC is already {pdc.status}", "validation")

            moment = self.clock()
            if update.status == PostDatedCheck.STATUS_ISSUED:
                if pdc.check_date > today(self.clock):
                    return _failure("Cannot issue a check before its check date", "validation")
                pdc.issued_at = update.issuedAt or moment
            else:
                pdc.cancelled_at = update.cancelledAt or moment

            previous = pdc.status
            pdc.status = update.status
            pdc.updated_at = moment
            record_event(
                self.db,
                f"pdc_{update.status}",
                "pdc",
                pdc.id,
                pdc_event_payload(pdc, automatic=False),
                created_at=moment,
            )
            self.db.commit()
            self.db.refresh(pdc)

            logger.info(f"✅ PDC {pdc.check_number} status: {previous} → {pdc.status}")
            return {"success": True, "pdc": serialize_pdc(pdc)}
        except Exception as e:
            self.db.rollback()
            logger.error(f"❌ Failed to update PDC status: {e}")
            return _failure("Failed to update PDC status", "error")

    def delete_pdc(self, pdc_id: str) -> dict:
        """Soft delete: the check is kept as cancelled"""
        try:
            pdc = self.repo.get_by_id(self.db, pdc_id)
            if not pdc:
                return _failure("PDC not found", "not_found")

            moment = self.clock()
            if pdc.status != PostDatedCheck.STATUS_CANCELLED:
                record_event(
                    self.db,
                    "pdc_cancelled",
                    "pdc",
                    pdc.id,
                    pdc_event_payload(pdc, automatic=False),
                    created_at=moment,
                )
            pdc.status = PostDatedCheck.STATUS_CANCELLED
            pdc.cancelled_at = moment
            pdc.updated_at = moment
            self.db.commit()

            logger.info(f"🗑️ PDC {pdc.check_number} cancelled")
            return {"success": True}
        except Exception as e:
            self.db.rollback()
            logger.error(f"❌ Failed to delete PDC: {e}")
            return _failure("Failed to delete PDC record", "error")

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get_all_pdcs(self) -> dict:
        self._sweep_before_read()
        try:
            return {"success": True, "pdcs": self._with_details(self.repo.get_all(self.db))}
        except Exception as e:
            logger.error(f"❌ Failed to fetch PDCs: {e}")
            return _failure("Failed to fetch PDC records", "error")

    def get_pdc(self, pdc_id: str) -> dict:
        self._sweep_before_read()
        try:
            pdc = self.repo.get_by_id(self.db, pdc_id)
            if not pdc:
                return _failure("PDC not found", "not_found")
            return {"success": True, "pdc": self._with_details([pdc])[0]}
        except Exception as e:
            logger.error(f"❌ Failed to fetch PDC {pdc_id}: {e}")
            return _failure("Failed to fetch PDC record", "error")

    def get_pdcs_by_status(self, status: str) -> dict:
        if status == PostDatedCheck.STATUS_PENDING:
            self._sweep_before_read()
        try:
            pdcs = self.repo.get_by_status(self.db, status)
            return {"success": True, "pdcs": self._with_details(pdcs)}
        except Exception as e:
            logger.error(f"❌ Failed to fetch PDCs by status: {e}")
            return _failure("Failed to fetch PDC records", "error")

    def get_pdcs_by_supplier(self, supplier: str) -> dict:
        self._sweep_before_read()
        try:
            pdcs = self.repo.get_by_supplier(self.db, supplier)
            return {"success": True, "pdcs": self._with_details(pdcs)}
        except Exception as e:
            logger.error(f"❌ Failed to fetch PDCs by supplier: {e}")
            return _failure("Failed to fetch PDC records", "error")

    def get_pdcs_by_date_range(self, start_date: date, end_date: date) -> dict:
        self._sweep_before_read()
        try:
            pdcs = self.repo.get_by_date_range(self.db, start_date, end_date)
            return {"success": True, "pdcs": self._with_details(pdcs)}
        except Exception as e:
            logger.error(f"❌ Failed to fetch PDCs by date range: {e}")
            return _failure("Failed to fetch PDC records", "error")

    def search_pdcs(
        self,
        check_number: Optional[str] = None,
        supplier: Optional[str] = None,
        status: Optional[str] = None,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
        page: int = 1,
        limit: int = 10,
    ) -> dict:
        self._sweep_before_read()
        try:
            pdcs, total = self.repo.search(
                self.db,
                check_number=check_number,
                supplier=supplier,
                status=status,
                date_from=date_from,
                date_to=date_to,
                page=page,
                limit=limit,
            )
            return {
                "success": True,
                "pdcs": self._with_details(pdcs),
                "total": total,
                "page": page,
                "limit": limit,
            }
        except Exception as e:
            logger.error(f"❌ Failed to search PDCs: {e}")
            return _failure("Failed to search PDC records", "error")

    def get_pdc_items(self, pdc_id: str) -> dict:
        try:
            pdc = self.repo.get_by_id(self.db, pdc_id)
            if not pdc:
                return _failure("PDC not found", "not_found")
            return {"success": True, "items": self.get_item_details(pdc.items or [])}
        except Exception as e:
            logger.error(f"❌ Failed to fetch PDC items: {e}")
            return _failure("Failed to fetch PDC items", "error")

    def get_pdc_stats(self) -> dict:
        self._sweep_before_read()
        try:
            stats = {
                "total": 0,
                "pending": 0,
                "issued": 0,
                "cancelled": 0,
                "totalAmount": 0.0,
                "pendingAmount": 0.0,
                "issuedAmount": 0.0,
                "cancelledAmount": 0.0,
            }
            for status, count, amount in self.repo.totals_by_status(self.db):
                stats["total"] += count
                stats["totalAmount"] += float(amount or 0)
                if status in ("pending", "issued", "cancelled"):
                    stats[status] = count
                    stats[f"{status}Amount"] = float(amount or 0)
            return {"success": True, "stats": stats}
        except Exception as e:
            logger.error(f"❌ Failed to fetch PDC stats: {e}")
            return _failure("Failed to fetch PDC statistics", "error")
