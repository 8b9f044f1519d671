"""
Booking notification collaborators.

Providers receive a flat event payload (guest, rooms, dates, totals) after a
booking is created, rescheduled or confirmed. Delivery is fire-and-forget:
callers log and swallow any exception raised here.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

import requests

from lodging.config.settings import settings
from lodging.core.exceptions import ErrorCode, ExternalServiceError
from lodging.core.logging import get_logger

logger = get_logger(__name__)


class BookingNotifier(ABC):
    """Abstract notification provider."""

    @abstractmethod
    def notify(self, event: str, payload: Dict[str, Any]) -> None:
        """Deliver one booking event."""
        pass


class LoggingNotifier(BookingNotifier):
    """Writes events to the application log; used when no webhook is configured."""

    def notify(self, event: str, payload: Dict[str, Any]) -> None:
        logger.info(
            f"Booking event {event} for {payload.get('booking_code')}",
            extra={"operation": "notify", "booking_id": payload.get("booking_id")},
        )


class WebhookNotifier(BookingNotifier):
    """Posts events as JSON to a manager/guest alerting webhook."""

    def __init__(self, url: str, timeout: Optional[float] = None):
        self.url = url
        self.timeout = timeout or settings.EXTERNAL_TIMEOUT_SECONDS

    def notify(self, event: str, payload: Dict[str, Any]) -> None:
        try:
            response = requests.post(
                self.url,
                json={"event": event, "data": payload},
                timeout=self.timeout,
            )
            response.raise_for_status()
        except requests.RequestException as e:
            raise ExternalServiceError(
                "notification-webhook",
                f"Notification webhook failed: {e}",
                ErrorCode.NOTIFICATION_ERROR,
            ) from e


def get_notifier() -> BookingNotifier:
    """Notifier selected from settings."""
    if settings.NOTIFICATION_WEBHOOK_URL:
        return WebhookNotifier(settings.NOTIFICATION_WEBHOOK_URL)
    return LoggingNotifier()
