"""SQLAlchemy table definitions owned by Lock Controller Service."""

from __future__ import annotations

from sqlalchemy import Boolean, Column, Date, DateTime, MetaData, String, Table

metadata = MetaData()

lunch_locks = Table(
    "lunch_locks",
    metadata,
    Column("business_date", Date, primary_key=True),
    Column("locked", Boolean, nullable=False, default=False),
    Column("locked_at", DateTime(timezone=True), nullable=True),
    Column("locked_by", String(256), nullable=True),
    Column("updated_at", DateTime(timezone=True), nullable=False),
)
