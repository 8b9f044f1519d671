"""Database session management."""
from functools import lru_cache
from typing import Generator

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from lodging.config.settings import settings


@lru_cache()
def get_engine() -> Engine:
    """
    Create the database engine on first use.

    SQLite does not accept the pool sizing arguments used for Postgres, and
    needs ``check_same_thread`` disabled to be shared with the API threads.
    """
    url = settings.get_database_url()
    if settings.is_sqlite():
        return create_engine(
            url,
            echo=settings.DB_ECHO,
            connect_args={"check_same_thread": False, **settings.DB_CONNECT_ARGS},
        )

    return create_engine(
        url,
        pool_pre_ping=True,
        echo=settings.DB_ECHO,
        pool_size=settings.DB_POOL_SIZE,
        max_overflow=settings.DB_POOL_OVERFLOW,
        connect_args=settings.DB_CONNECT_ARGS,
    )


# Bound to the engine when a session is opened
SessionLocal = sessionmaker(autocommit=False, autoflush=False)


def get_db() -> Generator[Session, None, None]:
    """
    Dependency function that yields a database session.

    Usage in FastAPI endpoints:
        @router.get("/bookings/{booking_id}")
        def read_booking(db: Session = Depends(get_db)):
            ...
    """
    db = SessionLocal(bind=get_engine())
    try:
        yield db
    finally:
        db.close()
