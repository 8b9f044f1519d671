"""
Payment gateway collaborators.

The gateway is handed a merchant order id and an amount and returns a
payment link; the outcome arrives later through the payment callback.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from decimal import Decimal
from typing import Optional

import requests

from lodging.config.settings import settings
from lodging.core.exceptions import ErrorCode, ExternalServiceError
from lodging.core.logging import get_logger
from lodging.models.booking.booking import Booking

logger = get_logger(__name__)


@dataclass
class PaymentLink:
    reference: Optional[str] = None
    payment_url: Optional[str] = None


class PaymentGateway(ABC):
    """Abstract payment provider."""

    @abstractmethod
    def create_payment(self, merchant_order_id: str, amount: Decimal, booking: Booking) -> PaymentLink:
        """Register a payment with the provider."""
        pass


class LoggingPaymentGateway(PaymentGateway):
    """Gateway stand-in for development: logs the request, returns no link."""

    def create_payment(self, merchant_order_id: str, amount: Decimal, booking: Booking) -> PaymentLink:
        logger.info(
            f"Payment requested for {booking.booking_code}: {amount} {settings.CURRENCY}",
            extra={"operation": "create_payment", "booking_id": booking.id},
        )
        return PaymentLink(reference=merchant_order_id)


class HttpPaymentGateway(PaymentGateway):
    """JSON-over-HTTP payment provider."""

    def __init__(self, base_url: str, api_key: Optional[str] = None, timeout: Optional[float] = None):
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.timeout = timeout or settings.EXTERNAL_TIMEOUT_SECONDS

    def create_payment(self, merchant_order_id: str, amount: Decimal, booking: Booking) -> PaymentLink:
        headers = {"Authorization": f"Bearer {self.api_key}"} if self.api_key else {}
        body = {
            "merchant_order_id": merchant_order_id,
            "amount": str(amount),
            "currency": settings.CURRENCY,
            "customer": {
                "name": booking.guest_name,
                "email": booking.guest_email,
                "phone": booking.guest_phone,
            },
            "description": f"Booking {booking.booking_code}",
        }
        try:
            response = requests.post(
                f"{self.base_url}/payments",
                json=body,
                headers=headers,
                timeout=self.timeout,
            )
            response.raise_for_status()
            data = response.json()
        except (requests.RequestException, ValueError) as e:
            raise ExternalServiceError(
                "payment-gateway",
                f"Payment gateway request failed: {e}",
                ErrorCode.PAYMENT_GATEWAY_ERROR,
            ) from e

        return PaymentLink(
            reference=data.get("reference"),
            payment_url=data.get("payment_url"),
        )


def get_payment_gateway() -> PaymentGateway:
    """Gateway selected from settings."""
    if settings.PAYMENT_GATEWAY_URL:
        return HttpPaymentGateway(settings.PAYMENT_GATEWAY_URL, settings.PAYMENT_GATEWAY_API_KEY)
    return LoggingPaymentGateway()
