"""Tests for read-time normalization of registration payloads."""

from __future__ import annotations

from datetime import UTC, date, datetime

import pytest

from services.state.registration_store.domain import AuditEntry, RegistrationRecord

DAY = date(2024, 6, 3)
NOW = datetime(2024, 6, 3, 8, 0, tzinfo=UTC)


def _record(regular: int, veg: int, total: int) -> RegistrationRecord:
    return RegistrationRecord(
        unit_id="Sales",
        date=DAY,
        regular_count=regular,
        veg_count=veg,
        total_count=total,
    )


def _entry(regular: int, veg: int, total: int) -> AuditEntry:
    return AuditEntry(
        id="01J0000000000000000000000A",
        unit_id="Sales",
        date=DAY,
        regular_count=regular,
        veg_count=veg,
        total_count=total,
        created_at=NOW,
    )


@pytest.mark.parametrize("build", [_record, _entry])
def test_total_only_rows_read_as_regular_meals(build) -> None:
    normalized = build(0, 0, 7).normalized()

    assert type(normalized) is type(build(0, 0, 7))
    assert (
        normalized.regular_count,
        normalized.veg_count,
        normalized.total_count,
    ) == (7, 0, 7)


@pytest.mark.parametrize("build", [_record, _entry])
def test_split_and_empty_rows_are_unchanged(build) -> None:
    split = build(10, 2, 12)
    empty = build(0, 0, 0)

    assert split.normalized() is split
    assert empty.normalized() is empty
