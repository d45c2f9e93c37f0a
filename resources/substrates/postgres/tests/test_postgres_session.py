"""Tests for transactional sessions and dialect upserts."""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor

import pytest
from sqlalchemy import Column, Integer, MetaData, String, Table, create_engine, select

from resources.substrates.postgres.engine import create_in_memory_engine
from resources.substrates.postgres.session import SessionProvider
from resources.substrates.postgres.upsert import upsert_statement

_METADATA = MetaData()
_ITEMS = Table(
    "items",
    _METADATA,
    Column("key", String(16), primary_key=True),
    Column("value", Integer, nullable=False),
)


def _provider() -> SessionProvider:
    engine = create_in_memory_engine()
    _METADATA.create_all(engine)
    return SessionProvider.for_engine(engine)


def _values(provider: SessionProvider) -> dict[str, int]:
    with provider.session() as session:
        rows = session.execute(select(_ITEMS)).mappings().all()
    return {row["key"]: row["value"] for row in rows}


def test_session_commits_on_success() -> None:
    """Writes inside a session block should be committed on exit."""
    provider = _provider()

    with provider.session() as session:
        session.execute(_ITEMS.insert().values(key="a", value=1))

    assert _values(provider) == {"a": 1}


def test_session_rolls_back_on_error() -> None:
    """An exception inside a session block should discard its writes."""
    provider = _provider()

    with pytest.raises(RuntimeError):
        with provider.session() as session:
            session.execute(_ITEMS.insert().values(key="a", value=1))
            raise RuntimeError("boom")

    assert _values(provider) == {}


def test_upsert_statement_updates_existing_row() -> None:
    """Conflicting inserts should update the listed columns in place."""
    provider = _provider()

    for value in (1, 2):
        with provider.session() as session:
            session.execute(
                upsert_statement(
                    session,
                    _ITEMS,
                    values={"key": "a", "value": value},
                    index_elements=["key"],
                    update_columns=["value"],
                )
            )

    assert _values(provider) == {"a": 2}


def test_only_single_connection_engines_are_serialized() -> None:
    assert _provider().serialized is True
    assert SessionProvider.for_engine(create_engine("sqlite://")).serialized is False


def test_concurrent_sessions_on_shared_connection_stay_isolated() -> None:
    """Threads sharing one SQLite connection must not commit each other's work."""
    provider = _provider()

    def _write(index: int) -> None:
        key = f"k{index % 8}"
        with provider.session() as session:
            session.execute(
                upsert_statement(
                    session,
                    _ITEMS,
                    values={"key": key, "value": index},
                    index_elements=["key"],
                    update_columns=["value"],
                )
            )
            if index % 5 == 0:
                raise RuntimeError("discard")

    with ThreadPoolExecutor(max_workers=16) as executor:
        futures = [executor.submit(_write, index) for index in range(200)]
    failures = [future.exception() for future in futures]

    assert all(
        isinstance(exc, RuntimeError) if index % 5 == 0 else exc is None
        for index, exc in enumerate(failures)
    )
    assert all(value % 5 != 0 for value in _values(provider).values())
    assert len(_values(provider)) == 8
