"""Per-request logging context stored in a ``ContextVar``.

Values bound here are merged into every log record emitted from the same
execution context, so request handlers can attach actor and date fields once
instead of repeating them on each call. ``ContextVar`` keeps sync worker
threads and asyncio tasks isolated from each other.
"""

from __future__ import annotations

from contextlib import contextmanager
from contextvars import ContextVar
from typing import Iterator, Mapping

_LOG_CONTEXT: ContextVar[Mapping[str, str]] = ContextVar(
    "canteen_log_context", default={}
)


def get_context() -> dict[str, str]:
    """Return a copy of the fields bound in the current context."""
    return dict(_LOG_CONTEXT.get())


def bind_context(**values: object) -> None:
    """Bind stringified values into the current context, skipping ``None``."""
    merged = dict(_LOG_CONTEXT.get())
    merged.update(
        {key: str(value) for key, value in values.items() if value is not None}
    )
    _LOG_CONTEXT.set(merged)


def clear_context(*keys: str) -> None:
    """Drop the named keys, or every key when none are given."""
    if not keys:
        _LOG_CONTEXT.set({})
        return
    _LOG_CONTEXT.set(
        {key: value for key, value in _LOG_CONTEXT.get().items() if key not in keys}
    )


@contextmanager
def log_context(values: Mapping[str, object]) -> Iterator[None]:
    """Bind ``values`` for the duration of a ``with`` block only."""
    token = _LOG_CONTEXT.set(dict(_LOG_CONTEXT.get()))
    try:
        bind_context(**dict(values))
        yield
    finally:
        _LOG_CONTEXT.reset(token)
