from datetime import date

import pytest
from sqlalchemy import select

from lodging.core.exceptions import ErrorCode
from lodging.models.base.enums import BookingStatus, PaymentResult, PaymentStatus
from lodging.models.booking.booking import Booking
from lodging.models.booking.booking_unit import UnitNightClaim
from lodging.repositories.booking.booking_repository import BookingRepository

from tests.conftest import local

TODAY = date(2025, 5, 1)


@pytest.fixture()
def created(make_room_type, booking_service, booking_request):
    make_room_type()
    return booking_service.create_booking(booking_request(room_type="Deluxe")).data


def claim_count(db, booking_id):
    return len(db.execute(select(UnitNightClaim).where(UnitNightClaim.booking_id == booking_id)).scalars().all())


class TestTransitions:
    def test_full_stay_records_history(self, db, created, lifecycle_service, notifier):
        assert lifecycle_service.confirm(created.id).is_success
        assert lifecycle_service.check_in(created.id).is_success
        result = lifecycle_service.check_out(created.id)

        assert result.data.status == BookingStatus.CHECKED_OUT
        history = BookingRepository(db).get_status_history(created.id)
        assert [(h.from_status, h.to_status) for h in history] == [
            (None, BookingStatus.PENDING),
            (BookingStatus.PENDING, BookingStatus.CONFIRMED),
            (BookingStatus.CONFIRMED, BookingStatus.CHECKED_IN),
            (BookingStatus.CHECKED_IN, BookingStatus.CHECKED_OUT),
        ]
        assert notifier.names == ["booking_created", "booking_confirmed"]

    def test_checked_out_booking_keeps_its_claims(self, db, created, lifecycle_service):
        lifecycle_service.confirm(created.id)
        lifecycle_service.check_in(created.id)
        lifecycle_service.check_out(created.id)

        assert claim_count(db, created.id) == 2

    def test_cancel_releases_units(self, db, created, lifecycle_service, availability):
        result = lifecycle_service.cancel(created.id, "Guest request")

        assert result.data.status == BookingStatus.CANCELLED
        assert result.data.cancellation_reason == "Guest request"
        assert claim_count(db, created.id) == 0
        room_type = db.get(Booking, created.id).room_type
        assert availability.available_units(room_type, date(2025, 6, 1), date(2025, 6, 3)).units == ["D1", "D2"]

    def test_cancelled_unit_can_be_booked_again(self, created, lifecycle_service, booking_service, booking_request):
        lifecycle_service.cancel(created.id)

        again = booking_service.create_booking(booking_request(room_type="Deluxe"))

        assert again.is_success, again.error
        assert again.data.allocated_unit == "D1"

    @pytest.mark.parametrize("action", ["reject", "mark_no_show"])
    def test_other_releasing_transitions(self, db, created, lifecycle_service, action):
        result = getattr(lifecycle_service, action)(created.id)

        assert result.is_success
        assert claim_count(db, created.id) == 0

    def test_invalid_transition_is_rejected(self, db, created, lifecycle_service):
        lifecycle_service.cancel(created.id)

        result = lifecycle_service.confirm(created.id)

        assert result.error.code == ErrorCode.INVALID_STATUS_TRANSITION
        assert result.error.status_code == 409
        assert result.error.details["current_status"] == "cancelled"
        db.expire_all()
        assert db.get(Booking, created.id).status == BookingStatus.CANCELLED

    def test_pending_booking_cannot_check_in(self, created, lifecycle_service):
        assert lifecycle_service.check_in(created.id).error.code == ErrorCode.INVALID_STATUS_TRANSITION

    def test_unknown_booking(self, lifecycle_service):
        assert lifecycle_service.confirm("missing").error.code == ErrorCode.BOOKING_NOT_FOUND


class TestAutoCheckout:
    def test_closes_stays_after_check_out_time(self, db, make_room_type, make_booking, lifecycle_service):
        room_type = make_room_type()
        stayed = make_booking(room_type, "D1", date(2025, 4, 29), TODAY, status=BookingStatus.CHECKED_IN)
        never_came = make_booking(room_type, "D2", date(2025, 4, 29), TODAY, status=BookingStatus.CONFIRMED)

        result = lifecycle_service.auto_checkout(local(2025, 5, 1, 13, 0))

        assert sorted(result.data) == sorted([stayed.id, never_came.id])
        db.expire_all()
        assert db.get(Booking, stayed.id).status == BookingStatus.CHECKED_OUT
        assert db.get(Booking, never_came.id).status == BookingStatus.NO_SHOW

    def test_waits_for_check_out_time_on_departure_day(self, make_room_type, make_booking, lifecycle_service):
        room_type = make_room_type()
        make_booking(room_type, "D1", date(2025, 4, 29), TODAY, status=BookingStatus.CHECKED_IN)

        assert lifecycle_service.auto_checkout(local(2025, 5, 1, 11, 0)).data == []

    def test_overdue_stays_from_earlier_days_are_closed(self, make_room_type, make_booking, lifecycle_service):
        room_type = make_room_type()
        overdue = make_booking(room_type, "D1", date(2025, 4, 27), date(2025, 4, 29), status=BookingStatus.CHECKED_IN)

        assert lifecycle_service.auto_checkout(local(2025, 5, 1, 8, 0)).data == [overdue.id]

    def test_future_and_pending_stays_are_untouched(self, make_room_type, make_booking, lifecycle_service):
        room_type = make_room_type()
        make_booking(room_type, "D1", TODAY, date(2025, 5, 3), status=BookingStatus.CHECKED_IN)
        make_booking(room_type, "D2", date(2025, 4, 29), TODAY, status=BookingStatus.PENDING)

        assert lifecycle_service.auto_checkout(local(2025, 5, 1, 15, 0)).data == []

    def test_defaults_to_injected_clock(self, make_room_type, make_booking, lifecycle_service):
        # The clock reads 10:00, before the 12:00 check-out
        room_type = make_room_type()
        make_booking(room_type, "D1", date(2025, 4, 29), TODAY, status=BookingStatus.CHECKED_IN)

        assert lifecycle_service.auto_checkout().data == []


class TestExpiredPayments:
    def test_cancels_only_after_expiry(self, db, created, payment_service, lifecycle_service):
        payment_service.start_payment(created.id)

        # Payment opened at 10:00 with a 60 minute window
        assert lifecycle_service.cancel_expired_bookings(local(2025, 5, 1, 10, 30)).data == []
        result = lifecycle_service.cancel_expired_bookings(local(2025, 5, 1, 11, 0))

        assert result.data == [created.id]
        db.expire_all()
        booking = db.get(Booking, created.id)
        assert booking.status == BookingStatus.CANCELLED
        assert booking.payment_status == PaymentStatus.EXPIRED
        assert booking.cancellation_reason == "Payment expired"
        assert [p.status for p in booking.payments] == [PaymentStatus.EXPIRED]
        assert claim_count(db, created.id) == 0

    def test_paid_bookings_are_not_swept(self, created, payment_service, lifecycle_service):
        txn = payment_service.start_payment(created.id).data
        payment_service.handle_payment_callback(txn.merchant_order_id, PaymentResult.PAID, txn.amount)

        assert lifecycle_service.cancel_expired_bookings(local(2025, 5, 2, 9, 0)).data == []

    def test_bookings_without_payment_are_not_swept(self, created, lifecycle_service):
        assert lifecycle_service.cancel_expired_bookings(local(2025, 5, 9, 9, 0)).data == []
