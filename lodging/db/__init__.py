"""Database engine, sessions and schema management."""

from lodging.db.session import SessionLocal, get_db, get_engine

__all__ = ["SessionLocal", "get_db", "get_engine"]
