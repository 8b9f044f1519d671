from lodging.repositories.booking.booking_repository import BookingRepository
from lodging.repositories.booking.booking_unit_repository import BookingUnitRepository
from lodging.repositories.booking.payment_repository import PaymentTransactionRepository

__all__ = [
    "BookingRepository",
    "BookingUnitRepository",
    "PaymentTransactionRepository",
]
