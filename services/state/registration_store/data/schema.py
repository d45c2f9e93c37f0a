"""SQLAlchemy table definitions owned by Registration Store Service."""

from __future__ import annotations

from sqlalchemy import (
    Column,
    Date,
    DateTime,
    Index,
    Integer,
    MetaData,
    String,
    Table,
    UniqueConstraint,
)

from packages.canteen_shared.ids import ULID_STR_LENGTH

metadata = MetaData()

lunch_registrations = Table(
    "lunch_registrations",
    metadata,
    Column("id", String(ULID_STR_LENGTH), primary_key=True),
    Column("unit_id", String(128), nullable=False),
    Column("business_date", Date, nullable=False),
    Column("regular_count", Integer, nullable=False, default=0),
    Column("veg_count", Integer, nullable=False, default=0),
    Column("total_count", Integer, nullable=False, default=0),
    Column("updated_at", DateTime(timezone=True), nullable=False),
    Column("updated_by", String(256), nullable=True),
    UniqueConstraint(
        "unit_id", "business_date", name="uq_lunch_registrations_unit_date"
    ),
)

lunch_registration_audit = Table(
    "lunch_registration_audit",
    metadata,
    Column("id", String(ULID_STR_LENGTH), primary_key=True),
    Column("unit_id", String(128), nullable=False),
    Column("business_date", Date, nullable=False),
    Column("regular_count", Integer, nullable=False),
    Column("veg_count", Integer, nullable=False),
    Column("total_count", Integer, nullable=False),
    Column("created_at", DateTime(timezone=True), nullable=False),
    Column("updated_by", String(256), nullable=True),
)

Index("ix_lunch_registration_audit_unit_id", lunch_registration_audit.c.unit_id)
Index(
    "ix_lunch_registration_audit_created_at", lunch_registration_audit.c.created_at
)
