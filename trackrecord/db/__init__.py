"""Database package: engine, session, base."""

from trackrecord.db.session import create_db_engine, create_session_maker

__all__ = ["create_db_engine", "create_session_maker"]
