"""Payment transaction repository."""

from typing import Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from lodging.models.booking.payment_transaction import PaymentTransaction
from lodging.repositories.base.base_repository import BaseRepository


class PaymentTransactionRepository(BaseRepository[PaymentTransaction]):
    """Repository for gateway payment attempts."""

    def __init__(self, db: Session):
        super().__init__(PaymentTransaction, db)

    def find_by_merchant_order_id(self, merchant_order_id: str) -> Optional[PaymentTransaction]:
        query = select(PaymentTransaction).where(
            PaymentTransaction.merchant_order_id == merchant_order_id
        )
        return self.db.execute(query).scalar_one_or_none()

    def find_latest_for_booking(self, booking_id: str) -> Optional[PaymentTransaction]:
        query = (
            select(PaymentTransaction)
            .where(PaymentTransaction.booking_id == booking_id)
            .order_by(PaymentTransaction.created_at.desc(), PaymentTransaction.id.desc())
            .limit(1)
        )
        return self.db.execute(query).scalar_one_or_none()
