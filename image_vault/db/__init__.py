"""Database configuration and session management."""

from .database import SessionLocal, engine, get_db, init_db

__all__ = ["engine", "get_db", "init_db", "SessionLocal"]
