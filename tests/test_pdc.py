from datetime import date, datetime

import pytest
from sqlalchemy.exc import OperationalError

from app.domain.pdc.schemas import PDCCreate, PDCStatusUpdate
from app.domain.pdc.service import PDCService
from app.models import DomainEvent
from app.models_pdc import InventoryItem, PostDatedCheck
from app.services.status_automation import issue_due_checks

from .conftest import FIXED_NOW


@pytest.fixture
def service(db, clock):
    return PDCService(db, clock)


def pdc_data(**overrides) -> PDCCreate:
    data = {
        "checkNumber": "CHK-0001",
        "checkDate": date(2025, 6, 10),
        "supplier": "Acme Steel",
        "totalAmount": 15000,
        "payee": "Acme Steel Corp.",
        "amountInWords": "Fifteen thousand pesos only",
        "items": [{"product_id": "P-1", "quantity": 10, "unit_cost": 1500}],
    }
    data.update(overrides)
    return PDCCreate(**data)


def create(service, **overrides) -> dict:
    result = service.create_pdc(pdc_data(**overrides))
    assert result["success"] is True, result
    return result["pdc"]


def events_for(db, pdc_id: str) -> list[str]:
    events = db.query(DomainEvent).filter(DomainEvent.aggregate_id == pdc_id).order_by(DomainEvent.id)
    return [e.event_type for e in events.all()]


class TestCreatePDC:
    def test_future_check_stays_pending(self, db, service):
        pdc = create(service)

        assert pdc["status"] == "pending"
        assert pdc["issuedAt"] is None
        assert pdc["itemCount"] == 1
        assert events_for(db, pdc["pdc_id"]) == ["pdc_created"]

    @pytest.mark.parametrize("check_date", [date(2025, 6, 1), date(2025, 6, 2)])
    def test_due_check_is_issued_immediately(self, db, service, check_date):
        pdc = create(service, checkDate=check_date)

        assert pdc["status"] == "issued"
        assert pdc["issuedAt"] == FIXED_NOW
        assert events_for(db, pdc["pdc_id"]) == ["pdc_created", "pdc_issued"]

    def test_duplicate_check_number(self, service):
        create(service)
        result = service.create_pdc(pdc_data(supplier="Other"))
        assert result == {
            "success": False,
            "error": "Check number already exists",
            "code": "conflict",
        }

    def test_generated_check_number(self, service):
        pdc = create(service, checkNumber=None)

        number = pdc["checkNumber"]
        assert number.startswith("CBC-")
        assert len(number) == 12
        assert number[4:].isdigit()

    def test_rejects_non_positive_quantity(self):
        with pytest.raises(ValueError):
            pdc_data(items=[{"product_id": "P-1", "quantity": 0, "unit_cost": 10}])


class TestAutoIssue:
    def test_sweep_issues_due_checks_once(self, db, service):
        pdc = create(service)
        create(service, checkNumber="CHK-0002", checkDate=date(2025, 7, 1))

        issue_day = datetime(2025, 6, 10, 0, 5)
        later = PDCService(db, lambda: issue_day)

        assert later.auto_issue_due_checks() == 1
        assert later.auto_issue_due_checks() == 0

        record = db.query(PostDatedCheck).filter(PostDatedCheck.id == pdc["pdc_id"]).one()
        assert record.status == "issued"
        assert record.issued_at == issue_day
        assert events_for(db, pdc["pdc_id"]) == ["pdc_created", "pdc_issued"]

    def test_sweep_summary(self, db, service):
        create(service)
        summary = issue_due_checks(db, lambda: datetime(2025, 6, 11, 8, 0))
        assert summary == {"issued": 1, "check_numbers": ["CHK-0001"]}

    def test_read_applies_due_transitions(self, db, service):
        pdc = create(service)

        result = PDCService(db, lambda: datetime(2025, 6, 11, 8, 0)).get_pdc(pdc["pdc_id"])

        assert result["pdc"]["status"] == "issued"

    def test_cancelled_checks_are_never_issued(self, db, service):
        pdc = create(service)
        service.delete_pdc(pdc["pdc_id"])

        assert PDCService(db, lambda: datetime(2025, 6, 11)).auto_issue_due_checks() == 0

    def test_run_auto_issue_reports_count(self, db, service):
        create(service)

        later = PDCService(db, lambda: datetime(2025, 6, 10, 8, 0))

        assert later.run_auto_issue() == {"success": True, "issuedCount": 1}


def database_locked(*args, **kwargs):
    raise OperationalError("UPDATE post_dated_checks", {}, Exception("database is locked"))


class TestStoreFailures:
    def test_run_auto_issue_returns_failure(self, service, monkeypatch):
        monkeypatch.setattr("app.domain.pdc.service.issue_due_checks", database_locked)

        assert service.run_auto_issue() == {
            "success": False,
            "error": "Failed to auto-issue PDCs",
            "code": "error",
        }

    def test_scheduled_sweep_still_raises(self, service, monkeypatch):
        monkeypatch.setattr("app.domain.pdc.service.issue_due_checks", database_locked)

        with pytest.raises(OperationalError):
            service.auto_issue_due_checks()

    def test_failed_sweep_does_not_break_reads(self, service, monkeypatch):
        pdc = create(service)
        monkeypatch.setattr("app.domain.pdc.service.issue_due_checks", database_locked)

        result = service.get_all_pdcs()

        assert result["success"] is True
        assert [p["pdc_id"] for p in result["pdcs"]] == [pdc["pdc_id"]]

    def test_read_failure_returns_message(self, service, monkeypatch):
        monkeypatch.setattr(service.repo, "get_all", database_locked)

        assert service.get_all_pdcs() == {
            "success": False,
            "error": "Failed to fetch PDC records",
            "code": "error",
        }


class TestUpdateStatus:
    def test_cannot_issue_before_check_date(self, service):
        pdc = create(service)

        result = service.update_pdc_status(pdc["pdc_id"], PDCStatusUpdate(status="issued"))

        assert result["code"] == "validation"
        assert result["error"] == "Cannot issue a check before its check date"
        assert service.get_pdc(pdc["pdc_id"])["pdc"]["status"] == "pending"

    def test_cancel_then_issue_is_rejected(self, db, service):
        pdc = create(service)

        cancelled = service.update_pdc_status(pdc["pdc_id"], PDCStatusUpdate(status="cancelled"))
        assert cancelled["pdc"]["status"] == "cancelled"
        assert cancelled["pdc"]["cancelledAt"] == FIXED_NOW

        result = service.update_pdc_status(pdc["pdc_id"], PDCStatusUpdate(status="issued"))
        assert result["error"] == "PDC is already cancelled"
        assert events_for(db, pdc["pdc_id"]) == ["pdc_created", "pdc_cancelled"]

    def test_issue_twice_keeps_original_issue_time(self, db, service):
        pdc = create(service, checkDate=date(2025, 6, 1))

        later = PDCService(db, lambda: datetime(2025, 6, 5, 14, 0))
        result = later.update_pdc_status(pdc["pdc_id"], PDCStatusUpdate(status="issued"))

        assert result == {"success": False, "error": "PDC is already issued", "code": "validation"}
        assert later.get_pdc(pdc["pdc_id"])["pdc"]["issuedAt"] == FIXED_NOW
        assert events_for(db, pdc["pdc_id"]) == ["pdc_created", "pdc_issued"]

    def test_unknown_status_is_rejected(self):
        with pytest.raises(ValueError):
            PDCStatusUpdate(status="bounced")

    def test_not_found(self, service):
        result = service.update_pdc_status("missing", PDCStatusUpdate(status="cancelled"))
        assert result["code"] == "not_found"


class TestDelete:
    def test_soft_delete(self, db, service):
        pdc = create(service)

        assert service.delete_pdc(pdc["pdc_id"]) == {"success": True}

        record = db.query(PostDatedCheck).filter(PostDatedCheck.id == pdc["pdc_id"]).one()
        assert record.status == "cancelled"
        assert record.cancelled_at == FIXED_NOW

    def test_delete_missing(self, service):
        assert service.delete_pdc("missing")["error"] == "PDC not found"


class TestQueries:
    def test_search_paginates(self, service):
        for n in range(12):
            create(service, checkNumber=f"ACM-{n:03d}", checkDate=date(2025, 7, n + 1))
        for n in range(3):
            create(service, checkNumber=f"BRV-{n:03d}", supplier="Bravo Cement")

        result = service.search_pdcs(supplier="acme", page=2, limit=10)

        assert result["total"] == 12
        assert len(result["pdcs"]) == 2
        assert result["page"] == 2
        # Latest check date first, so page 2 holds the two earliest
        assert {p["checkNumber"] for p in result["pdcs"]} == {"ACM-000", "ACM-001"}

    def test_search_by_partial_check_number(self, service):
        create(service, checkNumber="ACM-123")
        create(service, checkNumber="BRV-456")

        result = service.search_pdcs(check_number="m-12")

        assert [p["checkNumber"] for p in result["pdcs"]] == ["ACM-123"]

    def test_by_status_supplier_and_date_range(self, service):
        create(service, checkNumber="A-1", checkDate=date(2025, 6, 20))
        create(service, checkNumber="A-2", checkDate=date(2025, 5, 1))
        create(service, checkNumber="B-1", supplier="Bravo Cement", checkDate=date(2025, 6, 25))

        pending = service.get_pdcs_by_status("pending")["pdcs"]
        acme = service.get_pdcs_by_supplier("Acme Steel")["pdcs"]
        june = service.get_pdcs_by_date_range(date(2025, 6, 1), date(2025, 6, 30))["pdcs"]

        assert [p["checkNumber"] for p in pending] == ["B-1", "A-1"]
        assert {p["checkNumber"] for p in acme} == {"A-1", "A-2"}
        assert [p["checkNumber"] for p in june] == ["B-1", "A-1"]

    def test_stats(self, service):
        create(service, checkNumber="S-1", totalAmount=1000)
        create(service, checkNumber="S-2", totalAmount=2000)
        create(service, checkNumber="S-3", totalAmount=500, checkDate=date(2025, 6, 1))
        cancelled = create(service, checkNumber="S-4", totalAmount=300)
        service.delete_pdc(cancelled["pdc_id"])

        stats = service.get_pdc_stats()["stats"]

        assert stats == {
            "total": 4,
            "pending": 2,
            "issued": 1,
            "cancelled": 1,
            "totalAmount": 3800.0,
            "pendingAmount": 3000.0,
            "issuedAmount": 500.0,
            "cancelledAmount": 300.0,
        }


class TestItemDetails:
    def test_items_are_merged_with_inventory(self, db, service):
        db.add(
            InventoryItem(
                product_id="P-1",
                name="Rebar 10mm",
                category="Steel",
                quantity=10,
                unit="pcs",
                unit_cost=50,
                sale_price=80,
                location="Warehouse A",
            )
        )
        db.commit()
        pdc = create(
            service,
            items=[
                {"product_id": "P-1", "quantity": 5, "unit_cost": 45},
                {"product_id": "temp-123", "quantity": 1, "unit_cost": 99},
                {"product_id": "P-404", "quantity": 2, "unit_cost": 10},
            ],
        )

        details = service.get_pdc_items(pdc["pdc_id"])["items"]

        assert details[0]["name"] == "Rebar 10mm"
        assert details[0]["currentUnitCost"] == 50
        assert details[0]["totalCapital"] == 500
        assert details[0]["totalValue"] == 800
        assert details[0]["quantity"] == 5
        assert details[1]["name"] == "Unknown Item"
        assert details[1]["currentUnitCost"] == 99
        assert details[2]["name"] == "Unknown Item"
        assert details[2]["totalCapital"] == 0

    def test_items_for_missing_pdc(self, service):
        assert service.get_pdc_items("missing")["code"] == "not_found"
