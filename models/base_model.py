#!/usr/bin/env python3
"""
Shared SQLAlchemy base and mixins for the SecondLooks API.

- UUID primary key (String(36)) with defaults
- created_at / updated_at timestamps, set in UTC on insert and update
- ActiveFlagMixin for catalog rows that are hidden rather than deleted

Models carry no persistence methods of their own; reads and writes go
through the DBStorage handed to the services.
"""

from __future__ import annotations

from datetime import datetime, timezone
import uuid

from sqlalchemy import Column, String, DateTime, Boolean
from sqlalchemy.orm import declarative_base

# Declarative base for all models
Base = declarative_base()


def _uuid_str() -> str:
    """Return a canonical UUIDv4 string (36 chars, with hyphens)."""
    return str(uuid.uuid4())


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class BaseModel:
    """
    Base mixin for all persistent models: id, created_at, updated_at.
    """

    id = Column(String(36), primary_key=True, default=_uuid_str, nullable=False)
    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow, nullable=False)

    def __init__(self, *args, **kwargs):
        """
        Allow attribute initialization via kwargs without requiring a session here.
        """
        for key, value in kwargs.items():
            if key != "__class__":
                setattr(self, key, value)
        # Ensure an id exists if user passed none
        if getattr(self, "id", None) is None:
            self.id = _uuid_str()

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} {self.id}>"


class ActiveFlagMixin:
    """Rows with is_active=False are invisible to the public catalog."""

    is_active = Column(Boolean, nullable=False, default=True)
