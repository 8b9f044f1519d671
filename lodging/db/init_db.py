"""Database initialization utilities."""
from sqlalchemy import inspect

from lodging.core.logging import get_logger
from lodging.db.base import Base, import_models
from lodging.db.session import get_engine

logger = get_logger(__name__)


def init_db() -> None:
    """
    Initialize the database by creating all tables.

    Note: This is suitable for development/testing only.
    For production, use migrations instead.
    """
    try:
        import_models()
        engine = get_engine()

        existing_tables = set(inspect(engine).get_table_names())
        missing = [t for t in Base.metadata.tables if t not in existing_tables]

        if not missing:
            logger.info(f"Database already initialized with {len(existing_tables)} tables")
        else:
            Base.metadata.create_all(bind=engine)
            logger.info(f"Created {len(missing)} database tables: {', '.join(sorted(missing))}")

    except Exception as e:
        logger.error(f"Error initializing database: {e}")
        raise
