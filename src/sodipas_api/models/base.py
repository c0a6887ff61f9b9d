"""Shared declarative base and column helpers."""

import uuid
from datetime import UTC, datetime

from sqlalchemy import DateTime
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.types import TypeDecorator


def utcnow() -> datetime:
    """Server-side 'now' (timezone-aware UTC)."""
    return datetime.now(UTC)


def new_id() -> str:
    """Canonical string identifier for every table."""
    return uuid.uuid4().hex


class UTCDateTime(TypeDecorator):
    """DateTime that always comes back timezone-aware.

    SQLite drops ``tzinfo`` on the way in, so values are stored as naive UTC
    and re-tagged with UTC when loaded.
    """

    impl = DateTime
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is not None and value.tzinfo is not None:
            value = value.astimezone(UTC).replace(tzinfo=None)
        return value

    def process_result_value(self, value, dialect):
        if value is not None and value.tzinfo is None:
            value = value.replace(tzinfo=UTC)
        return value


class Base(DeclarativeBase):
    """Shared declarative base for all ORM models."""
