from lodging.services.booking.booking_lifecycle_service import BookingLifecycleService
from lodging.services.booking.booking_notification_service import BookingNotificationService
from lodging.services.booking.booking_payment_service import BookingPaymentService
from lodging.services.booking.booking_service import BookingService

__all__ = [
    "BookingLifecycleService",
    "BookingNotificationService",
    "BookingPaymentService",
    "BookingService",
]
