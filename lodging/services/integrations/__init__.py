from lodging.services.integrations.notifier import (
    BookingNotifier,
    LoggingNotifier,
    WebhookNotifier,
    get_notifier,
)
from lodging.services.integrations.payment_gateway import (
    HttpPaymentGateway,
    LoggingPaymentGateway,
    PaymentGateway,
    PaymentLink,
    get_payment_gateway,
)

__all__ = [
    "BookingNotifier",
    "HttpPaymentGateway",
    "LoggingNotifier",
    "LoggingPaymentGateway",
    "PaymentGateway",
    "PaymentLink",
    "WebhookNotifier",
    "get_notifier",
    "get_payment_gateway",
]
