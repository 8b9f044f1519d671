"""
Booking payment service.

Opens payment transactions against the payment collaborator and applies the
outcomes reported by its callback. The callback must already have been
authenticated by the caller.
"""

from datetime import timedelta, timezone
from decimal import Decimal
from typing import Optional, Tuple
from uuid import uuid4

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from lodging.config.settings import settings
from lodging.core.clock import Clock, system_clock
from lodging.core.exceptions import (
    BookingNotFoundError,
    ErrorCode,
    InvalidDateRangeError,
    PaymentAmountMismatchError,
    PaymentError,
    PaymentNotFoundError,
    PaymentRequiresRefundError,
    UnitUnavailableError,
)
from lodging.models.base.enums import BookingStatus, PaymentResult, PaymentStatus
from lodging.models.booking.booking import Booking
from lodging.models.booking.payment_transaction import PaymentTransaction
from lodging.repositories.booking.booking_repository import BookingRepository
from lodging.repositories.booking.payment_repository import PaymentTransactionRepository
from lodging.schemas.booking.booking_response import PaymentTransactionResponse
from lodging.services.base.base_service import BaseService
from lodging.services.base.service_result import ServiceResult
from lodging.services.booking.booking_lifecycle_service import BookingLifecycleService
from lodging.services.integrations.notifier import BookingNotifier
from lodging.services.integrations.payment_gateway import LoggingPaymentGateway, PaymentGateway


def new_merchant_order_id(booking: Booking) -> str:
    return f"{booking.booking_code}-{uuid4().hex[:6].upper()}"


class BookingPaymentService(BaseService[PaymentTransaction, PaymentTransactionRepository]):
    """Payment transactions for bookings."""

    def __init__(
        self,
        db: Session,
        clock: Clock = system_clock,
        gateway: Optional[PaymentGateway] = None,
        notifier: Optional[BookingNotifier] = None,
    ):
        super().__init__(PaymentTransactionRepository(db), db, clock)
        self.bookings = BookingRepository(db)
        self.gateway = gateway or LoggingPaymentGateway()
        self.lifecycle = BookingLifecycleService(db, clock, notifier)

    def start_payment(self, booking_id: str) -> ServiceResult[PaymentTransactionResponse]:
        """
        Open a payment for the full booking total.

        The gateway call happens after the transaction row is committed and is
        best-effort: a gateway failure leaves the transaction pending without a
        payment link.
        """
        try:
            with self.transaction():
                booking = self.bookings.find_by_id(booking_id)
                if booking is None:
                    raise BookingNotFoundError(booking_id)
                if booking.status != BookingStatus.PENDING:
                    raise PaymentError(
                        f"Booking {booking.booking_code} is not awaiting payment",
                        ErrorCode.PAYMENT_FAILED,
                        {"status": booking.status.value},
                        409,
                    )
                if booking.payment_status == PaymentStatus.PAID:
                    raise PaymentError(
                        f"Booking {booking.booking_code} is already paid",
                        ErrorCode.PAYMENT_FAILED,
                        {"payment_status": booking.payment_status.value},
                        409,
                    )

                expires_at = self.clock() + timedelta(minutes=settings.PAYMENT_EXPIRY_MINUTES)
                txn = PaymentTransaction(
                    booking_id=booking.id,
                    merchant_order_id=new_merchant_order_id(booking),
                    amount=booking.total_price,
                    status=PaymentStatus.PENDING,
                    expires_at=expires_at.astimezone(timezone.utc),
                )
                self.repository.add(txn)
                booking.payment_status = PaymentStatus.PENDING
        except Exception as e:
            return self._handle_exception(e, "start payment", booking_id)

        self._request_payment_link(txn, booking)
        self._log_operation("start_payment", txn.merchant_order_id, {"booking_id": booking.id})
        return ServiceResult.success(PaymentTransactionResponse.model_validate(txn), message="Payment started")

    def handle_payment_callback(
        self,
        merchant_order_id: str,
        result: PaymentResult,
        amount: Decimal,
        reference: Optional[str] = None,
    ) -> ServiceResult[PaymentTransactionResponse]:
        """
        Apply a gateway outcome.

        Replaying a callback with an unchanged status is a no-op; a paid
        transaction is never downgraded by a later failed/expired report.

        A payment that lands after the booking was cancelled for expiry
        confirms it again when its former units are still free. Otherwise the
        payment stays recorded and the result is a PaymentRequiresRefundError
        failure carrying the booking id.
        """
        confirmed = False
        refund: Optional[PaymentRequiresRefundError] = None
        try:
            with self.transaction():
                txn = self.repository.find_by_merchant_order_id(merchant_order_id)
                if txn is None:
                    raise PaymentNotFoundError(merchant_order_id)
                if Decimal(amount) != Decimal(txn.amount):
                    raise PaymentAmountMismatchError(merchant_order_id, txn.amount, amount)

                target = PaymentStatus(result.value)
                booking = txn.booking

                if txn.status == target:
                    self._logger.info(
                        f"Duplicate {target.value} callback for {merchant_order_id}",
                        extra={"booking_id": booking.id, "operation": "payment_callback"},
                    )
                    if target == PaymentStatus.PAID and booking.status in BookingStatus.releasing():
                        refund = self._refund_error(txn, booking, f"booking is {booking.status.value}")
                elif txn.status == PaymentStatus.PAID:
                    self._logger.warning(
                        f"Ignoring {target.value} callback for paid order {merchant_order_id}",
                        extra={"booking_id": booking.id, "operation": "payment_callback"},
                    )
                else:
                    confirmed, refund = self._apply_outcome(txn, booking, target, Decimal(amount), reference)
        except Exception as e:
            return self._handle_exception(e, "handle payment callback", merchant_order_id)

        if refund is not None:
            return self._handle_exception(refund, "handle payment callback", merchant_order_id)

        if confirmed:
            self.lifecycle.notifications.booking_confirmed(booking)
        return ServiceResult.success(PaymentTransactionResponse.model_validate(txn), message="Payment updated")

    def _apply_outcome(
        self,
        txn: PaymentTransaction,
        booking: Booking,
        target: PaymentStatus,
        amount: Decimal,
        reference: Optional[str],
    ) -> Tuple[bool, Optional[PaymentRequiresRefundError]]:
        """
        Record the outcome on the transaction and booking.

        Returns whether the booking got confirmed, and the refund error when
        the money arrived for a booking that can no longer be honoured.
        """
        now = self.clock()
        was_expired = PaymentStatus.EXPIRED in (txn.status, booking.payment_status)
        txn.status = target
        if reference:
            txn.gateway_reference = reference

        if target == PaymentStatus.PAID:
            txn.paid_at = now
            booking.payment_status = PaymentStatus.PAID
            booking.payment_amount = amount
            if booking.status == BookingStatus.PENDING:
                self.lifecycle.apply_transition(booking, BookingStatus.CONFIRMED, "Payment received", now)
                return True, None
            if booking.status == BookingStatus.CANCELLED and was_expired:
                try:
                    self.lifecycle.reinstate(booking, "Payment received after expiry", now)
                    return True, None
                except (UnitUnavailableError, InvalidDateRangeError) as e:
                    return False, self._refund_error(txn, booking, e.message)
            if booking.status in BookingStatus.releasing():
                return False, self._refund_error(txn, booking, f"booking is {booking.status.value}")
            self._logger.warning(
                f"Payment received for booking {booking.booking_code} in status {booking.status.value}",
                extra={"booking_id": booking.id, "operation": "payment_callback"},
            )
            return False, None

        if booking.payment_status != PaymentStatus.PAID:
            booking.payment_status = target
        if target == PaymentStatus.EXPIRED and booking.status == BookingStatus.PENDING:
            self.lifecycle.apply_transition(booking, BookingStatus.CANCELLED, "Payment expired", now)
        return False, None

    def _refund_error(self, txn: PaymentTransaction, booking: Booking, reason: str) -> PaymentRequiresRefundError:
        self._logger.error(
            f"Payment {txn.merchant_order_id} for booking {booking.booking_code} needs a refund: {reason}",
            extra={"booking_id": booking.id, "operation": "payment_callback"},
        )
        return PaymentRequiresRefundError(booking.id, booking.booking_code, txn.merchant_order_id, txn.amount, reason)

    def _request_payment_link(self, txn: PaymentTransaction, booking: Booking) -> None:
        try:
            link = self.gateway.create_payment(txn.merchant_order_id, txn.amount, booking)
        except Exception as e:
            self._logger.warning(
                f"Payment gateway call failed for {txn.merchant_order_id}: {e}",
                exc_info=True,
                extra={"booking_id": booking.id, "operation": "create_payment"},
            )
            return

        try:
            txn.gateway_reference = link.reference
            txn.payment_url = link.payment_url
            self.db.commit()
        except SQLAlchemyError as e:
            self._rollback()
            self._logger.warning(
                f"Could not store payment link for {txn.merchant_order_id}: {e}",
                exc_info=True,
                extra={"booking_id": booking.id, "operation": "create_payment"},
            )
