from datetime import date, timedelta

from sqlalchemy.exc import OperationalError

# Routers use the wall clock, so requests use dates relative to today
BOOKING_DAY = (date.today() + timedelta(days=30)).isoformat()
OTHER_DAY = (date.today() + timedelta(days=31)).isoformat()


def inquiry_body(**overrides) -> dict:
    body = {
        "name": "Juan Dela Cruz",
        "email": "juan@example.com",
        "phone": "09171234567",
        "message": "Interested in a two-storey build",
        "design": {"id": "D-100", "name": "Modern Bungalow", "price": 2500000},
        "preferredDate": BOOKING_DAY,
        "preferredTime": "10:00",
        "meetingType": "onsite",
    }
    body.update(overrides)
    return body


def pdc_body(**overrides) -> dict:
    body = {
        "checkNumber": "CHK-1001",
        "checkDate": OTHER_DAY,
        "supplier": "Acme Steel",
        "totalAmount": 15000,
        "payee": "Acme Steel Corp.",
        "amountInWords": "Fifteen thousand pesos only",
        "items": [{"product_id": "P-1", "quantity": 10, "unit_cost": 1500}],
    }
    body.update(overrides)
    return body


def test_health(client):
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json() == {
        "status": "healthy",
        "backgroundTasks": [],
        "pendingEvents": 0,
        "availableTimeslots": 0,
    }


class TestAppointmentRoutes:
    def test_booking_flow(self, client):
        created = client.post("/appointments/inquiries", json=inquiry_body())
        assert created.status_code == 201
        inquiry_id = created.json()["id"]

        confirmed = client.post(f"/appointments/inquiries/{inquiry_id}/confirm")
        assert confirmed.status_code == 200
        assert confirmed.json()["status"] == "confirmed"

        rescheduled = client.post(
            f"/appointments/inquiries/{inquiry_id}/reschedule",
            json={"newDate": OTHER_DAY, "newTime": "15:00", "notes": "Client asked"},
        )
        assert rescheduled.status_code == 200
        assert rescheduled.json()["preferredTime"] == "15:00"

        cancelled = client.post(
            f"/appointments/inquiries/{inquiry_id}/cancel", json={"reason": "Budget"}
        )
        assert cancelled.status_code == 200
        assert cancelled.json()["cancellationReason"] == "Budget"

        again = client.post(f"/appointments/inquiries/{inquiry_id}/cancel")
        assert again.status_code == 400
        assert again.json()["detail"] == "Cannot cancel an inquiry that is cancelled"

        assert client.get("/health").json()["pendingEvents"] == 4

    def test_double_booking_returns_conflict(self, client):
        first = client.post("/appointments/inquiries", json=inquiry_body()).json()["id"]
        second = client.post(
            "/appointments/inquiries", json=inquiry_body(email="ana@example.com")
        ).json()["id"]

        assert client.post(f"/appointments/inquiries/{first}/confirm").status_code == 200
        response = client.post(f"/appointments/inquiries/{second}/confirm")

        assert response.status_code == 409
        assert response.json()["detail"] == "This time slot is already booked"

    def test_validation_error(self, client):
        response = client.post("/appointments/inquiries", json=inquiry_body(email="nope"))

        assert response.status_code == 400
        assert response.json()["detail"] == "Invalid email format"

    def test_not_found(self, client):
        assert client.get("/appointments/inquiries/999").status_code == 404

    def test_stats_and_batch_delete(self, client):
        inquiry_id = client.post("/appointments/inquiries", json=inquiry_body()).json()["id"]
        client.post(f"/appointments/inquiries/{inquiry_id}/confirm")

        stats = client.get("/appointments/stats").json()
        assert stats["confirmedCount"] == 1
        assert stats["upcomingCount"] == 1

        deleted = client.post(
            "/appointments/inquiries/batch-delete", json={"inquiryIds": [inquiry_id]}
        )
        assert deleted.json() == {
            "success": True,
            "message": "Successfully deleted 1 inquiry(s)",
            "deletedCount": 1,
        }
        assert client.get("/appointments/inquiries").json() == []


class TestAvailabilityRoutes:
    def test_initialize_and_list(self, client):
        day = date.fromisoformat(BOOKING_DAY)
        working_day = (day.weekday() + 1) % 7

        response = client.post(
            "/availability/initialize",
            json={
                "startDate": BOOKING_DAY,
                "endDate": BOOKING_DAY,
                "settings": {
                    "workingDays": [working_day],
                    "startTime": "09:00",
                    "endTime": "11:00",
                    "slotDuration": 60,
                },
            },
        )

        assert response.status_code == 200
        assert response.json()["message"] == (
            "Initialized 2 timeslots for 1 working days with 60-minute slots"
        )
        available = client.get("/availability/timeslots/available", params={"date": BOOKING_DAY})
        assert available.json() == [
            {"value": "09:00", "label": "9:00 AM", "enabled": True},
            {"value": "10:00", "label": "10:00 AM", "enabled": True},
        ]
        stored = client.get(
            "/availability/timeslots", params={"date": BOOKING_DAY, "isAvailable": "true"}
        )
        assert len(stored.json()) == 2
        assert client.get("/health").json()["availableTimeslots"] == 2

    def test_invalid_settings(self, client):
        response = client.post(
            "/availability/update-duration",
            json={"workingDays": [1], "startTime": "17:00", "endTime": "09:00", "slotDuration": 30},
        )
        assert response.status_code == 422

    def test_available_requires_date(self, client):
        assert client.get("/availability/timeslots/available").status_code == 422


class TestPDCRoutes:
    def test_lifecycle(self, client):
        created = client.post("/pdc", json=pdc_body())
        assert created.status_code == 201
        pdc_id = created.json()["pdc_id"]
        assert created.json()["status"] == "pending"

        early = client.patch(f"/pdc/{pdc_id}/status", json={"status": "issued"})
        assert early.status_code == 400

        duplicate = client.post("/pdc", json=pdc_body())
        assert duplicate.status_code == 409

        assert client.get("/pdc/stats").json()["pending"] == 1
        assert client.get("/pdc/search", params={"supplier": "acme"}).json()["total"] == 1
        assert len(client.get(f"/pdc/{pdc_id}/items").json()) == 1

        deleted = client.delete(f"/pdc/{pdc_id}")
        assert deleted.json() == {"message": "PDC cancelled"}
        assert client.get(f"/pdc/{pdc_id}").json()["status"] == "cancelled"

    def test_auto_issue_run(self, client):
        client.post("/pdc", json=pdc_body(checkDate=date.today().isoformat()))

        response = client.post("/pdc/auto-issue/run")

        assert response.json() == {"success": True, "issuedCount": 0}

    def test_auto_issue_store_failure(self, client, monkeypatch):
        def locked(*args, **kwargs):
            raise OperationalError("UPDATE post_dated_checks", {}, Exception("database is locked"))

        monkeypatch.setattr("app.domain.pdc.service.issue_due_checks", locked)

        response = client.post("/pdc/auto-issue/run")

        assert response.status_code == 500
        assert response.json() == {"detail": "Failed to auto-issue PDCs"}

    def test_unknown_pdc(self, client):
        assert client.get("/pdc/missing").status_code == 404

    def test_invalid_status(self, client):
        pdc_id = client.post("/pdc", json=pdc_body()).json()["pdc_id"]
        response = client.patch(f"/pdc/{pdc_id}/status", json={"status": "bounced"})
        assert response.status_code == 422


def test_notification_routes(client):
    assert client.get("/notifications/user/GC-0007").json() == []
    assert client.post("/notifications/999/read").status_code == 404
    assert client.post("/notifications/user/GC-0007/read-all").json() == {
        "message": "All notifications marked as read",
        "updatedCount": 0,
    }
