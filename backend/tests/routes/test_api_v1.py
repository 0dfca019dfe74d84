"""
HTTP-level tests for the v1 API using FastAPI's TestClient.

Bookings are made far enough in the future that the same-day lead time rule
never applies to them.
"""

from swiftslot.models import Vendor

DAY = "2031-06-02"
NINE_UTC = "2031-06-02T08:00:00Z"  # 09:00 Lagos
NINE_THIRTY_UTC = "2031-06-02T08:30:00Z"
TEN_UTC = "2031-06-02T09:00:00Z"


def _create_vendor(session_factory, name="Adaeze Hair Studio") -> str:
    with session_factory() as session:
        vendor = Vendor(name=name)
        session.add(vendor)
        session.commit()
        return vendor.id


def _book(client, vendor_id, start=NINE_UTC, end=NINE_THIRTY_UTC, key=None):
    headers = {"Idempotency-Key": key} if key else {}
    return client.post(
        "/api/v1/bookings",
        json={"vendor_id": vendor_id, "start_time_utc": start, "end_time_utc": end},
        headers=headers,
    )


class TestVendorRoutes:
    def test_list_vendors_ordered_by_name(self, client, session_factory):
        _create_vendor(session_factory, "Yaba Tech Repairs")
        _create_vendor(session_factory, "Ikoyi Wellness Spa")

        response = client.get("/api/v1/vendors")

        assert response.status_code == 200
        assert [v["name"] for v in response.json()] == ["Ikoyi Wellness Spa", "Yaba Tech Repairs"]

    def test_availability(self, client, session_factory):
        vendor_id = _create_vendor(session_factory)

        response = client.get(f"/api/v1/vendors/{vendor_id}/availability", params={"date": DAY})

        assert response.status_code == 200
        body = response.json()
        assert len(body["slots"]) == 16
        assert body["slots"][0] == {"start_utc": NINE_UTC, "start_local": "09:00"}

    def test_availability_requires_valid_date(self, client, session_factory):
        vendor_id = _create_vendor(session_factory)

        response = client.get(
            f"/api/v1/vendors/{vendor_id}/availability", params={"date": "02-06-2031"}
        )

        assert response.status_code == 400
        assert response.json()["detail"]["code"] == "INVALID_DATE"

    def test_availability_unknown_vendor(self, client):
        response = client.get(
            "/api/v1/vendors/01HZZZZZZZZZZZZZZZZZZZZZZZ/availability", params={"date": DAY}
        )
        assert response.status_code == 404


class TestBookingRoutes:
    def test_create_booking(self, client, session_factory):
        vendor_id = _create_vendor(session_factory)

        response = _book(client, vendor_id)

        assert response.status_code == 201
        body = response.json()
        assert body["status"] == "pending"
        assert body["start_time_utc"] == NINE_UTC
        assert body["end_time_utc"] == NINE_THIRTY_UTC

    def test_idempotent_retry_returns_identical_body(self, client, session_factory):
        vendor_id = _create_vendor(session_factory)

        first = _book(client, vendor_id, key="retry-1")
        second = _book(client, vendor_id, key="retry-1")

        assert first.status_code == 201
        assert second.status_code == 201
        assert second.content == first.content

    def test_key_reuse_with_different_body(self, client, session_factory):
        vendor_id = _create_vendor(session_factory)
        _book(client, vendor_id, key="reuse")

        response = _book(client, vendor_id, start=NINE_THIRTY_UTC, end=TEN_UTC, key="reuse")

        assert response.status_code == 400
        assert response.json()["detail"]["code"] == "IDEMPOTENCY_KEY_REUSE"

    def test_conflict_returns_409(self, client, session_factory):
        vendor_id = _create_vendor(session_factory)
        _book(client, vendor_id)

        response = _book(client, vendor_id, end=TEN_UTC)

        assert response.status_code == 409
        assert response.json()["detail"]["message"] == (
            "One or more time slots are no longer available. Please refresh and try again."
        )

    def test_missing_fields_return_400(self, client, session_factory):
        vendor_id = _create_vendor(session_factory)

        response = client.post("/api/v1/bookings", json={"vendor_id": vendor_id})

        assert response.status_code == 400
        assert response.json()["detail"]["code"] == "MISSING_FIELDS"

    def test_malformed_datetime_returns_400(self, client, session_factory):
        vendor_id = _create_vendor(session_factory)

        response = _book(client, vendor_id, start="yesterday")

        assert response.status_code == 400
        assert response.json()["detail"]["code"] == "VALIDATION_ERROR"

    def test_get_and_cancel_booking(self, client, session_factory):
        vendor_id = _create_vendor(session_factory)
        booking_id = _book(client, vendor_id).json()["id"]

        detail = client.get(f"/api/v1/bookings/{booking_id}")
        assert detail.status_code == 200
        assert detail.json()["start_time_local"] == "09:00"
        assert detail.json()["vendor"]["id"] == vendor_id

        cancelled = client.post(f"/api/v1/bookings/{booking_id}/cancel")
        assert cancelled.status_code == 200
        assert cancelled.json()["status"] == "cancelled"

        again = client.post(f"/api/v1/bookings/{booking_id}/cancel")
        assert again.status_code == 422

    def test_get_unknown_booking(self, client):
        response = client.get("/api/v1/bookings/01HZZZZZZZZZZZZZZZZZZZZZZZ")
        assert response.status_code == 404


class TestPaymentRoutes:
    def test_full_payment_flow(self, client, session_factory):
        vendor_id = _create_vendor(session_factory)
        booking_id = _book(client, vendor_id).json()["id"]

        init = client.post("/api/v1/payments/initialize", json={"booking_id": booking_id})
        assert init.status_code == 200
        reference = init.json()["reference"]
        assert init.json()["amount"] == 50.0

        webhook = {"event": "charge.success", "data": {"reference": reference}}
        first = client.post("/api/v1/payments/webhook", json=webhook)
        second = client.post("/api/v1/payments/webhook", json=webhook)

        assert first.status_code == 200
        assert first.json()["booking_status"] == "paid"
        assert first.json()["was_already_processed"] is False
        assert second.content == first.content

        status = client.get(f"/api/v1/payments/{reference}")
        assert status.status_code == 200
        assert status.json()["status"] == "success"
        assert status.json()["booking"]["status"] == "paid"

        booking = client.get(f"/api/v1/bookings/{booking_id}")
        assert booking.json()["status"] == "paid"

    def test_ignored_event(self, client):
        response = client.post(
            "/api/v1/payments/webhook",
            json={"event": "transfer.success", "data": {"reference": "pay_x"}},
        )

        assert response.status_code == 200
        assert response.json() == {
            "status": "ignored",
            "message": "Event 'transfer.success' ignored",
        }

    def test_webhook_unknown_reference(self, client):
        response = client.post(
            "/api/v1/payments/webhook",
            json={"event": "charge.success", "data": {"reference": "pay_unknown"}},
        )
        assert response.status_code == 404

    def test_initialize_unknown_booking(self, client):
        response = client.post(
            "/api/v1/payments/initialize", json={"booking_id": "01HZZZZZZZZZZZZZZZZZZZZZZZ"}
        )
        assert response.status_code == 404


class TestOperationalRoutes:
    def test_health(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    def test_prometheus_metrics(self, client, session_factory):
        vendor_id = _create_vendor(session_factory)
        _book(client, vendor_id)

        response = client.get("/metrics/prometheus")

        assert response.status_code == 200
        assert "swiftslot_bookings_total" in response.text
        assert "swiftslot_service_operations_total" in response.text
