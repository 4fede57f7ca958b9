"""
SQLAlchemy ORM models.

Tables
------
* ``users``            -- registered accounts
* ``distance_queries`` -- one row per successful calculation

Indexes
-------
* **B-Tree** on ``distance_queries.created_at`` and
  ``(user_id, created_at)`` for the newest-first history listings.
"""

from datetime import datetime, timezone

from sqlalchemy import (
    Column,
    DateTime,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
)

from .database import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class UserModel(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    username = Column(String(50), unique=True, nullable=False)
    email = Column(String(255), unique=True, nullable=False)
    password_hash = Column(String(128), nullable=False)
    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)


class DistanceQueryModel(Base):
    __tablename__ = "distance_queries"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=True)

    source = Column(String(200), nullable=False)
    destination = Column(String(200), nullable=False)
    distance = Column(Float, nullable=False)  # km

    source_lat = Column(Float, nullable=True)
    source_lon = Column(Float, nullable=True)
    destination_lat = Column(Float, nullable=True)
    destination_lon = Column(Float, nullable=True)

    # Set client-side so ordering is stable at sub-second resolution
    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)

    __table_args__ = (
        Index("idx_distance_queries_created", "created_at"),
        Index("idx_distance_queries_user_created", "user_id", "created_at"),
    )
