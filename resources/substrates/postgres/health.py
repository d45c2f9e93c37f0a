"""Bounded readiness probe for the relational store."""

from __future__ import annotations

from sqlalchemy import Engine, text

_STATEMENT_TIMEOUT = text("SELECT set_config('statement_timeout', :value, true)")


def ping(engine: Engine, *, timeout_seconds: float = 1.0) -> bool:
    """Return True when the store answers ``SELECT 1``.

    PostgreSQL gets a transaction-local statement timeout first; SQLite is
    in-process and answers immediately.
    """
    try:
        with engine.connect() as conn:
            if engine.dialect.name == "postgresql":
                timeout_ms = max(1, int(timeout_seconds * 1000))
                conn.execute(_STATEMENT_TIMEOUT, {"value": f"{timeout_ms}ms"})
            conn.execute(text("SELECT 1"))
    except Exception:  # noqa: BLE001
        return False
    return True
