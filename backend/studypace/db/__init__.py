"""Database package."""

from studypace.db.base import engine, async_session_maker, Base, atomic, get_db, init_db

__all__ = ["engine", "async_session_maker", "Base", "atomic", "get_db", "init_db"]
