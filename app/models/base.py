"""SQLAlchemy declarative Base and shared column helpers."""

import uuid
from datetime import UTC, datetime

from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """Declarative base for all ORM models."""

    pass


def new_uuid() -> str:
    """Primary key default for UUID-keyed tables (stored as text)."""
    return str(uuid.uuid4())


def utcnow() -> datetime:
    return datetime.now(UTC)
