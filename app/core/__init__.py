"""Core app configuration, database session and security helpers."""

from app.core.config import get_settings, settings
from app.core.database import SessionLocal, get_db

__all__ = ["SessionLocal", "get_db", "get_settings", "settings"]
