"""Payment transaction model: one gateway payment attempt for a booking."""

from datetime import datetime
from decimal import Decimal
from typing import TYPE_CHECKING, Optional

from sqlalchemy import DateTime, Enum, ForeignKey, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from lodging.models.base.base_model import TimestampModel
from lodging.models.base.enums import PaymentStatus

if TYPE_CHECKING:
    from lodging.models.booking.booking import Booking

__all__ = ["PaymentTransaction"]


class PaymentTransaction(TimestampModel):
    """
    Payment attempt keyed by the merchant order id sent to the gateway.

    Attributes:
        merchant_order_id: Identifier the gateway echoes back in its callback
        amount: Amount requested, equal to the booking total when created
        status: pending until the callback reports paid/failed/expired
        expires_at: Deadline after which the pending booking is cancelled
    """

    __tablename__ = "payment_transactions"

    booking_id: Mapped[str] = mapped_column(
        ForeignKey("bookings.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    merchant_order_id: Mapped[str] = mapped_column(String(64), unique=True, nullable=False, index=True)
    amount: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False)
    status: Mapped[PaymentStatus] = mapped_column(
        Enum(PaymentStatus),
        nullable=False,
        default=PaymentStatus.PENDING,
        index=True,
    )
    expires_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    paid_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    gateway_reference: Mapped[Optional[str]] = mapped_column(String(128), nullable=True)
    payment_url: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    booking: Mapped["Booking"] = relationship("Booking", back_populates="payments")

    def __repr__(self) -> str:
        return f"<PaymentTransaction(order={self.merchant_order_id}, status={self.status})>"
