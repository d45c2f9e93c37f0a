"""Session lifecycle helpers for relational store access."""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from threading import RLock

from sqlalchemy import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool


def create_session_factory(engine: Engine) -> sessionmaker[Session]:
    """Create a session factory bound to the provided SQLAlchemy engine."""
    return sessionmaker(
        bind=engine, autoflush=False, autocommit=False, expire_on_commit=False
    )


@contextmanager
def transactional_session(session_factory: sessionmaker[Session]) -> Iterator[Session]:
    """Yield a session and enforce commit/rollback semantics."""
    session = session_factory()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


class SessionProvider:
    """Hand out one transaction-scoped session per unit of work.

    With ``serialize`` set, sessions run one at a time. Engines on a
    ``StaticPool`` share a single DBAPI connection, so concurrent transactions
    there would otherwise commit or roll back each other's work.
    """

    def __init__(
        self, *, session_factory: sessionmaker[Session], serialize: bool = False
    ) -> None:
        self._session_factory = session_factory
        self._lock = RLock() if serialize else None

    @classmethod
    def for_engine(cls, engine: Engine) -> "SessionProvider":
        return cls(
            session_factory=create_session_factory(engine),
            serialize=isinstance(engine.pool, StaticPool),
        )

    @property
    def serialized(self) -> bool:
        return self._lock is not None

    @contextmanager
    def exclusive(self) -> Iterator[None]:
        """Hold the provider lock, when serialized, for work outside a session."""
        if self._lock is None:
            yield
            return
        with self._lock:
            yield

    @contextmanager
    def session(self) -> Iterator[Session]:
        with self.exclusive(), transactional_session(self._session_factory) as db:
            yield db
