import os

os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("LOG_TO_FILE", "false")

from datetime import date, datetime  # noqa: E402
from decimal import Decimal  # noqa: E402
from typing import Any, Dict, List, Tuple  # noqa: E402

import pytest  # noqa: E402
import pytz  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from lodging.config.settings import settings  # noqa: E402
from lodging.core.clock import fixed_clock  # noqa: E402
from lodging.db.base import Base, import_models  # noqa: E402
from lodging.models.base.enums import BookingStatus  # noqa: E402
from lodging.models.booking.booking import Booking  # noqa: E402
from lodging.models.booking.booking_unit import BookingUnit  # noqa: E402
from lodging.models.room.promotion import Promotion  # noqa: E402
from lodging.models.room.room_type import RoomType  # noqa: E402
from lodging.models.room.unavailable_date import UnavailableDate  # noqa: E402
from lodging.repositories.booking.booking_repository import BookingRepository  # noqa: E402
from lodging.repositories.booking.booking_unit_repository import BookingUnitRepository  # noqa: E402
from lodging.repositories.room.unavailable_date_repository import UnavailableDateRepository  # noqa: E402
from lodging.schemas.booking.booking_request import BookingCreate  # noqa: E402
from lodging.services.booking.booking_lifecycle_service import BookingLifecycleService  # noqa: E402
from lodging.services.booking.booking_payment_service import BookingPaymentService  # noqa: E402
from lodging.services.booking.booking_service import BookingService  # noqa: E402
from lodging.services.integrations.notifier import BookingNotifier  # noqa: E402
from lodging.services.integrations.payment_gateway import PaymentGateway, PaymentLink  # noqa: E402
from lodging.services.inventory.allocator import Allocator  # noqa: E402
from lodging.services.inventory.availability_service import AvailabilityCalculator  # noqa: E402
from lodging.services.inventory.conflict_detector import ConflictDetector  # noqa: E402

HOTEL_TZ = pytz.timezone(settings.TIMEZONE)
NOW = datetime(2025, 5, 1, 10, 0)


def local(*args) -> datetime:
    """Aware datetime in the hotel timezone."""
    return HOTEL_TZ.localize(datetime(*args))


class RecordingNotifier(BookingNotifier):
    def __init__(self):
        self.events: List[Tuple[str, Dict[str, Any]]] = []
        self.fail = False

    def notify(self, event: str, payload: Dict[str, Any]) -> None:
        self.events.append((event, payload))
        if self.fail:
            raise RuntimeError("notifier is down")

    @property
    def names(self) -> List[str]:
        return [event for event, _ in self.events]


class RecordingGateway(PaymentGateway):
    def __init__(self):
        self.calls: List[Tuple[str, Decimal]] = []
        self.fail = False

    def create_payment(self, merchant_order_id, amount, booking) -> PaymentLink:
        self.calls.append((merchant_order_id, amount))
        if self.fail:
            raise RuntimeError("gateway is down")
        return PaymentLink(
            reference=f"ref-{merchant_order_id}",
            payment_url=f"https://pay.example.com/{merchant_order_id}",
        )


@pytest.fixture()
def engine():
    import_models()
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture()
def db(engine):
    session = sessionmaker(bind=engine, autocommit=False, autoflush=False)()
    yield session
    session.close()


@pytest.fixture()
def clock():
    return fixed_clock(NOW)


@pytest.fixture()
def notifier():
    return RecordingNotifier()


@pytest.fixture()
def gateway():
    return RecordingGateway()


@pytest.fixture()
def booking_service(db, clock, notifier):
    return BookingService(db, clock, notifier)


@pytest.fixture()
def lifecycle_service(db, clock, notifier):
    return BookingLifecycleService(db, clock, notifier)


@pytest.fixture()
def payment_service(db, clock, gateway, notifier):
    return BookingPaymentService(db, clock, gateway, notifier)


@pytest.fixture()
def make_room_type(db):
    def _make(name="Deluxe", units=("D1", "D2"), base_price="300000", max_guests=2, **kwargs):
        room_type = RoomType(
            name=name,
            unit_numbers=list(units),
            allotment=len(units),
            base_price=Decimal(base_price),
            max_guests=max_guests,
            **kwargs,
        )
        db.add(room_type)
        db.commit()
        return room_type

    return _make


@pytest.fixture()
def make_promotion(db):
    def _make(room_type, start, end, promo_price=None, discount_percentage=None, **kwargs):
        promotion = Promotion(
            room_type_id=room_type.id,
            name=kwargs.pop("name", "Promo"),
            promo_price=Decimal(promo_price) if promo_price is not None else None,
            discount_percentage=Decimal(discount_percentage) if discount_percentage is not None else None,
            start_date=start,
            end_date=end,
            **kwargs,
        )
        db.add(promotion)
        db.commit()
        return promotion

    return _make


@pytest.fixture()
def make_booking(db):
    """Insert an existing booking directly, bypassing allocation."""

    def _make(
        room_type,
        unit,
        check_in: date,
        check_out: date,
        status=BookingStatus.CONFIRMED,
        with_detail=True,
        **kwargs,
    ):
        booking = Booking(
            guest_name="Existing Guest",
            guest_email="existing@example.com",
            room_type_id=room_type.id,
            allocated_unit=unit,
            check_in=check_in,
            check_out=check_out,
            num_guests=1,
            status=status,
            total_price=Decimal("0"),
            **kwargs,
        )
        if with_detail and unit:
            booking.units.append(
                BookingUnit(room_type_id=room_type.id, unit_number=unit, price_per_night=Decimal("0"))
            )
        db.add(booking)
        db.commit()
        return booking

    return _make


@pytest.fixture()
def booking_request():
    def _make(**overrides) -> BookingCreate:
        data = {
            "guest_name": "Ayu Lestari",
            "guest_email": "ayu@example.com",
            "guest_phone": "+628123456789",
            "check_in": date(2025, 6, 1),
            "check_out": date(2025, 6, 3),
            "num_guests": 2,
        }
        data.update(overrides)
        return BookingCreate(**data)

    return _make


@pytest.fixture()
def availability(db):
    return AvailabilityCalculator(
        UnavailableDateRepository(db),
        BookingRepository(db),
        BookingUnitRepository(db),
    )


@pytest.fixture()
def conflict_detector(db):
    return ConflictDetector(BookingRepository(db))


@pytest.fixture()
def allocator(availability, conflict_detector):
    return Allocator(availability, conflict_detector)


@pytest.fixture()
def block(db):
    """Block a night for a whole room type, or a single unit when given."""

    def _make(room_type, night: date, unit=None, reason="Maintenance"):
        record = UnavailableDate(room_type_id=room_type.id, unit_number=unit, unavailable_date=night, reason=reason)
        db.add(record)
        db.commit()
        return record

    return _make
