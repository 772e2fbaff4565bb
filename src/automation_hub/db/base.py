"""
automation_hub.db.base

SQLAlchemy declarative base.
"""

from __future__ import annotations

from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    pass


# --- Module Notes -----------------------------------------------------------
# All ORM models should inherit from `Base` so Alembic and metadata discovery work.
