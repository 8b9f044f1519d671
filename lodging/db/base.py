"""SQLAlchemy Base class for all models."""
from lodging.models.base.base_model import Base


def import_models() -> None:
    """Import all models to register them with SQLAlchemy."""
    # Imported for their side effect of registering tables on Base.metadata
    from lodging.models.room import room_type, promotion, unavailable_date  # noqa: F401
    from lodging.models.booking import booking, booking_unit, payment_transaction  # noqa: F401


import_models()

__all__ = ["Base", "import_models"]
