from decimal import Decimal

import pytest
from fastapi.testclient import TestClient

from lodging.api import deps
from lodging.config.settings import settings
from lodging.main import create_app

API = settings.API_V1_STR


@pytest.fixture()
def client(db, clock, notifier, gateway):
    app = create_app()
    app.dependency_overrides[deps.get_db] = lambda: db
    app.dependency_overrides[deps.get_clock] = lambda: clock
    app.dependency_overrides[deps.get_notifier] = lambda: notifier
    app.dependency_overrides[deps.get_payment_gateway] = lambda: gateway
    # Not entered as a context manager: startup would configure logging and create tables
    return TestClient(app)


@pytest.fixture()
def deluxe(client):
    response = client.post(
        f"{API}/room-types",
        json={"name": "Deluxe", "unit_numbers": ["D1", "D2"], "base_price": "300000", "monday_price": "250000"},
    )
    assert response.status_code == 201, response.text
    return response.json()


def booking_payload(**overrides):
    payload = {
        "guest_name": "Ayu Lestari",
        "guest_email": "ayu@example.com",
        "room_type": "Deluxe",
        "check_in": "2025-06-01",
        "check_out": "2025-06-03",
        "num_guests": 2,
    }
    payload.update(overrides)
    return payload


def test_health(client):
    assert client.get("/health").json()["status"] == "ok"


def test_responses_carry_request_id(client):
    response = client.get("/health", headers={"X-Request-ID": "req-42"})

    assert response.headers["X-Request-ID"] == "req-42"


class TestRoomTypeEndpoints:
    def test_list_and_get(self, client, deluxe):
        assert [rt["name"] for rt in client.get(f"{API}/room-types").json()] == ["Deluxe"]
        assert client.get(f"{API}/room-types/{deluxe['id']}").json()["unit_numbers"] == ["D1", "D2"]

    def test_unknown_room_type_is_404(self, client):
        response = client.get(f"{API}/room-types/nope")

        assert response.status_code == 404
        assert response.json()["detail"]["code"] == "ROOM_TYPE_NOT_FOUND"

    def test_availability(self, client, deluxe):
        response = client.get(
            f"{API}/room-types/{deluxe['id']}/availability",
            params={"check_in": "2025-06-01", "check_out": "2025-06-03"},
        )

        assert response.status_code == 200
        assert response.json()["available_units"] == ["D1", "D2"]

    def test_quote(self, client, deluxe):
        client.post(
            f"{API}/room-types/{deluxe['id']}/promotions",
            json={"name": "Monday deal", "promo_price": "200000", "start_date": "2025-06-02", "end_date": "2025-06-02"},
        )

        body = client.get(
            f"{API}/room-types/{deluxe['id']}/quote",
            params={"check_in": "2025-06-01", "check_out": "2025-06-03"},
        ).json()

        assert Decimal(body["total"]) == Decimal("500000")
        assert Decimal(body["original_total"]) == Decimal("550000")
        assert Decimal(body["savings"]) == Decimal("50000")
        assert body["promo_nights_count"] == 1

    def test_nightly_price_defaults_to_today(self, client, deluxe):
        body = client.get(f"{API}/room-types/{deluxe['id']}/nightly-price").json()

        assert body["date"] == "2025-05-01"

    def test_block_and_unblock(self, client, deluxe):
        created = client.post(
            f"{API}/room-types/{deluxe['id']}/unavailable-dates",
            json={"start_date": "2025-06-01", "unit_number": "D1", "reason": "Repainting"},
        )
        assert created.status_code == 201

        availability = client.get(
            f"{API}/room-types/{deluxe['id']}/availability",
            params={"check_in": "2025-06-01", "check_out": "2025-06-02"},
        ).json()
        assert availability["available_units"] == ["D2"]

        removed = client.delete(f"{API}/unavailable-dates/{created.json()[0]['id']}")
        assert removed.status_code == 204

    def test_invalid_payload_is_422(self, client):
        response = client.post(f"{API}/room-types", json={"name": "Empty", "unit_numbers": [], "base_price": "1"})

        assert response.status_code == 422


class TestBookingEndpoints:
    def test_create_get_and_patch(self, client, deluxe, notifier):
        created = client.post(f"{API}/bookings", json=booking_payload())
        assert created.status_code == 201, created.text
        booking = created.json()
        assert booking["status"] == "pending"
        assert booking["units"][0]["unit_number"] == "D1"
        assert Decimal(booking["total_price"]) == Decimal("550000")

        by_code = client.get(f"{API}/bookings/{booking['booking_code']}")
        assert by_code.json()["id"] == booking["id"]

        patched = client.patch(f"{API}/bookings/{booking['id']}", json={"check_out": "2025-06-04"})
        assert patched.status_code == 200
        assert patched.json()["nights"] == 3
        assert notifier.names == ["booking_created", "booking_rescheduled"]

    def test_insufficient_inventory_is_409_with_details(self, client, deluxe):
        response = client.post(f"{API}/bookings", json=booking_payload(quantity=3, num_guests=1))

        assert response.status_code == 409
        error = response.json()["detail"]
        assert error["code"] == "INSUFFICIENT_INVENTORY"
        assert error["details"]["available"] == 2
        assert error["details"]["alternatives"] == ["D1", "D2"]

    def test_rooms_and_room_type_together_is_422(self, client, deluxe):
        response = client.post(
            f"{API}/bookings",
            json=booking_payload(rooms=[{"room_type": "Deluxe", "quantity": 1}]),
        )

        assert response.status_code == 422

    def test_status_actions(self, client, deluxe):
        booking = client.post(f"{API}/bookings", json=booking_payload()).json()

        confirmed = client.post(f"{API}/bookings/{booking['id']}/confirm")
        cancelled = client.post(f"{API}/bookings/{booking['id']}/cancel", json={"reason": "Change of plans"})
        again = client.post(f"{API}/bookings/{booking['id']}/check-in")

        assert confirmed.json()["status"] == "confirmed"
        assert cancelled.json()["cancellation_reason"] == "Change of plans"
        assert again.status_code == 409
        assert again.json()["detail"]["code"] == "INVALID_STATUS_TRANSITION"

    def test_unknown_booking_is_404(self, client):
        assert client.get(f"{API}/bookings/missing").status_code == 404


class TestPaymentEndpoints:
    @pytest.fixture()
    def payment(self, client, deluxe):
        booking = client.post(f"{API}/bookings", json=booking_payload()).json()
        response = client.post(f"{API}/bookings/{booking['id']}/payments")
        assert response.status_code == 201, response.text
        return booking, response.json()

    def callback(self, client, payment, secret):
        _, txn = payment
        return client.post(
            f"{API}/payments/callback",
            json={"merchant_order_id": txn["merchant_order_id"], "result": "paid", "amount": txn["amount"]},
            headers={"X-Callback-Secret": secret} if secret else {},
        )

    def test_callback_without_configured_secret_is_rejected(self, client, payment, monkeypatch):
        monkeypatch.setattr(settings, "PAYMENT_CALLBACK_SECRET", None)

        assert self.callback(client, payment, "anything").status_code == 401

    def test_callback_with_wrong_secret_is_rejected(self, client, payment, monkeypatch):
        monkeypatch.setattr(settings, "PAYMENT_CALLBACK_SECRET", "s3cret")

        assert self.callback(client, payment, "guess").status_code == 401
        assert self.callback(client, payment, None).status_code == 401

    def test_paid_callback_confirms_booking(self, client, payment, monkeypatch):
        monkeypatch.setattr(settings, "PAYMENT_CALLBACK_SECRET", "s3cret")
        booking, _ = payment

        response = self.callback(client, payment, "s3cret")

        assert response.status_code == 200, response.text
        assert response.json()["status"] == "paid"
        assert client.get(f"{API}/bookings/{booking['id']}").json()["status"] == "confirmed"


def test_maintenance_sweeps(client, deluxe):
    expired = client.post(f"{API}/maintenance/expire-pending")
    checkout = client.post(f"{API}/maintenance/auto-checkout")

    assert expired.json() == {"processed": 0, "booking_ids": []}
    assert checkout.json() == {"processed": 0, "booking_ids": []}
