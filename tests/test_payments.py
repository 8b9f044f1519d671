from datetime import date, datetime
from decimal import Decimal

import pytest

from lodging.core.exceptions import ErrorCode
from lodging.models.base.enums import BookingStatus, PaymentResult, PaymentStatus
from lodging.models.booking.booking import Booking
from lodging.repositories.booking.payment_repository import PaymentTransactionRepository
from tests.conftest import local


@pytest.fixture()
def created(make_room_type, booking_service, booking_request):
    make_room_type()
    return booking_service.create_booking(booking_request(room_type="Deluxe")).data


@pytest.fixture()
def payment(created, payment_service):
    return payment_service.start_payment(created.id).data


def reload(db, booking_id):
    db.expire_all()
    return db.get(Booking, booking_id)


class TestStartPayment:
    def test_opens_pending_transaction_for_booking_total(self, db, created, payment_service, gateway):
        result = payment_service.start_payment(created.id)

        assert result.is_success, result.error
        txn = result.data
        assert txn.status == PaymentStatus.PENDING
        assert txn.amount == Decimal("600000")
        assert txn.merchant_order_id.startswith(f"{created.booking_code}-")
        # 10:00 in Jakarta plus the 60 minute window, stored in UTC
        assert txn.expires_at.replace(tzinfo=None) == datetime(2025, 5, 1, 4, 0)
        assert txn.payment_url == f"https://pay.example.com/{txn.merchant_order_id}"
        assert txn.gateway_reference == f"ref-{txn.merchant_order_id}"
        assert gateway.calls == [(txn.merchant_order_id, Decimal("600000"))]
        assert reload(db, created.id).payment_status == PaymentStatus.PENDING

    def test_gateway_failure_keeps_transaction_without_link(self, db, created, payment_service, gateway):
        gateway.fail = True

        result = payment_service.start_payment(created.id)

        assert result.is_success
        assert result.data.payment_url is None
        latest = PaymentTransactionRepository(db).find_latest_for_booking(created.id)
        assert latest.merchant_order_id == result.data.merchant_order_id
        assert latest.status == PaymentStatus.PENDING

    def test_confirmed_booking_cannot_start_payment(self, created, payment_service, lifecycle_service):
        lifecycle_service.confirm(created.id)

        result = payment_service.start_payment(created.id)

        assert result.error.code == ErrorCode.PAYMENT_FAILED
        assert result.error.status_code == 409

    def test_unknown_booking(self, payment_service):
        assert payment_service.start_payment("missing").error.code == ErrorCode.BOOKING_NOT_FOUND


class TestPaymentCallback:
    def test_paid_confirms_booking_and_notifies(self, db, created, payment, payment_service, notifier):
        result = payment_service.handle_payment_callback(
            payment.merchant_order_id, PaymentResult.PAID, Decimal("600000"), "gw-123"
        )

        assert result.is_success, result.error
        assert result.data.status == PaymentStatus.PAID
        assert result.data.gateway_reference == "gw-123"
        assert result.data.paid_at is not None
        booking = reload(db, created.id)
        assert booking.status == BookingStatus.CONFIRMED
        assert booking.payment_status == PaymentStatus.PAID
        assert booking.payment_amount == Decimal("600000")
        assert notifier.names == ["booking_created", "booking_confirmed"]

    def test_replayed_paid_callback_is_a_no_op(self, db, created, payment, payment_service, notifier):
        payment_service.handle_payment_callback(payment.merchant_order_id, PaymentResult.PAID, Decimal("600000"))

        replay = payment_service.handle_payment_callback(
            payment.merchant_order_id, PaymentResult.PAID, Decimal("600000")
        )

        assert replay.is_success
        assert notifier.names.count("booking_confirmed") == 1
        assert len(reload(db, created.id).status_history) == 2

    def test_paid_transaction_is_not_downgraded(self, db, created, payment, payment_service):
        payment_service.handle_payment_callback(payment.merchant_order_id, PaymentResult.PAID, Decimal("600000"))

        result = payment_service.handle_payment_callback(
            payment.merchant_order_id, PaymentResult.FAILED, Decimal("600000")
        )

        assert result.data.status == PaymentStatus.PAID
        assert reload(db, created.id).payment_status == PaymentStatus.PAID

    def test_amount_mismatch_is_rejected(self, db, created, payment, payment_service):
        result = payment_service.handle_payment_callback(
            payment.merchant_order_id, PaymentResult.PAID, Decimal("599999")
        )

        assert result.error.code == ErrorCode.PAYMENT_AMOUNT_MISMATCH
        assert result.error.status_code == 400
        assert reload(db, created.id).status == BookingStatus.PENDING

    def test_unknown_order(self, payment_service):
        result = payment_service.handle_payment_callback("BK-NOPE", PaymentResult.PAID, Decimal("1"))

        assert result.error.code == ErrorCode.PAYMENT_NOT_FOUND
        assert result.error.status_code == 404

    def test_failed_payment_leaves_booking_pending(self, db, created, payment, payment_service):
        result = payment_service.handle_payment_callback(
            payment.merchant_order_id, PaymentResult.FAILED, Decimal("600000")
        )

        assert result.data.status == PaymentStatus.FAILED
        booking = reload(db, created.id)
        assert booking.status == BookingStatus.PENDING
        assert booking.payment_status == PaymentStatus.FAILED

    def test_expired_payment_cancels_and_releases(self, db, created, payment, payment_service):
        payment_service.handle_payment_callback(payment.merchant_order_id, PaymentResult.EXPIRED, Decimal("600000"))

        booking = reload(db, created.id)
        assert booking.status == BookingStatus.CANCELLED
        assert booking.payment_status == PaymentStatus.EXPIRED
        assert booking.claims == []

    def test_retry_after_failure_can_still_be_paid(self, db, created, payment, payment_service):
        payment_service.handle_payment_callback(payment.merchant_order_id, PaymentResult.FAILED, Decimal("600000"))
        second = payment_service.start_payment(created.id).data

        payment_service.handle_payment_callback(second.merchant_order_id, PaymentResult.PAID, Decimal("600000"))

        assert reload(db, created.id).status == BookingStatus.CONFIRMED


class TestLatePayment:
    def expire(self, lifecycle_service):
        # One minute past the payment window
        return lifecycle_service.cancel_expired_bookings(local(2025, 5, 1, 11, 1))

    def test_paid_after_expiry_reinstates_when_units_are_free(
        self, db, created, payment, payment_service, lifecycle_service, notifier
    ):
        self.expire(lifecycle_service)
        assert reload(db, created.id).claims == []

        result = payment_service.handle_payment_callback(
            payment.merchant_order_id, PaymentResult.PAID, Decimal("600000")
        )

        assert result.is_success, result.error
        booking = reload(db, created.id)
        assert booking.status == BookingStatus.CONFIRMED
        assert booking.payment_status == PaymentStatus.PAID
        assert booking.cancelled_at is None
        assert [h.to_status for h in booking.status_history] == [
            BookingStatus.PENDING,
            BookingStatus.CANCELLED,
            BookingStatus.CONFIRMED,
        ]
        assert sorted((c.unit_number, c.night.isoformat()) for c in booking.claims) == [
            (created.allocated_unit, "2025-06-01"),
            (created.allocated_unit, "2025-06-02"),
        ]
        assert notifier.names[-1] == "booking_confirmed"

    def test_paid_after_expiry_on_a_rebooked_unit_requires_refund(
        self, db, created, payment, payment_service, lifecycle_service, make_booking, notifier
    ):
        self.expire(lifecycle_service)
        booking = reload(db, created.id)
        other = make_booking(booking.room_type, created.allocated_unit, date(2025, 6, 2), date(2025, 6, 4))

        result = payment_service.handle_payment_callback(
            payment.merchant_order_id, PaymentResult.PAID, Decimal("600000")
        )

        assert not result.is_success
        assert result.error.code == ErrorCode.PAYMENT_REQUIRES_REFUND
        assert result.error.status_code == 409
        assert result.error.details["booking_id"] == created.id
        assert result.error.details["merchant_order_id"] == payment.merchant_order_id
        booking = reload(db, created.id)
        assert booking.status == BookingStatus.CANCELLED
        assert booking.payment_status == PaymentStatus.PAID
        assert booking.claims == []
        txn = PaymentTransactionRepository(db).find_by_merchant_order_id(payment.merchant_order_id)
        assert txn.status == PaymentStatus.PAID
        assert reload(db, other.id).status == BookingStatus.CONFIRMED
        assert "booking_confirmed" not in notifier.names

    def test_paid_after_staff_cancellation_requires_refund(self, db, created, payment, payment_service, lifecycle_service):
        lifecycle_service.cancel(created.id, "Guest called")

        result = payment_service.handle_payment_callback(
            payment.merchant_order_id, PaymentResult.PAID, Decimal("600000")
        )
        replay = payment_service.handle_payment_callback(
            payment.merchant_order_id, PaymentResult.PAID, Decimal("600000")
        )

        assert result.error.code == ErrorCode.PAYMENT_REQUIRES_REFUND
        assert result.error.details["reason"] == "booking is cancelled"
        assert replay.error.code == ErrorCode.PAYMENT_REQUIRES_REFUND
        assert reload(db, created.id).status == BookingStatus.CANCELLED
