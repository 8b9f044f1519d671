"""Payment gateway callback endpoint."""

import hmac
from typing import Optional

from fastapi import APIRouter, Depends, Header, HTTPException, status

from lodging.api.deps import get_payment_service, unwrap_result
from lodging.config.settings import settings
from lodging.core.logging import get_logger
from lodging.schemas.booking.booking_request import PaymentCallback
from lodging.schemas.booking.booking_response import PaymentTransactionResponse
from lodging.services.booking.booking_payment_service import BookingPaymentService

logger = get_logger(__name__)

router = APIRouter(prefix="/payments", tags=["Payments"])


def verify_callback_secret(x_callback_secret: Optional[str] = Header(None)) -> None:
    """Reject callbacks without the shared secret; all callbacks are rejected while none is configured."""
    expected = settings.PAYMENT_CALLBACK_SECRET
    if not expected or not x_callback_secret or not hmac.compare_digest(
        x_callback_secret.encode(), expected.encode()
    ):
        logger.warning("Rejected payment callback with invalid secret")
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid callback secret")


@router.post(
    "/callback",
    response_model=PaymentTransactionResponse,
    dependencies=[Depends(verify_callback_secret)],
)
def payment_callback(payload: PaymentCallback, service: BookingPaymentService = Depends(get_payment_service)):
    return unwrap_result(
        service.handle_payment_callback(
            payload.merchant_order_id,
            payload.result,
            payload.amount,
            payload.reference,
        )
    )
