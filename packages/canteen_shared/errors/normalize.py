"""Exception normalization into shared ``ErrorDetail`` values."""

from __future__ import annotations

from sqlalchemy.exc import IntegrityError, OperationalError, SQLAlchemyError

from . import codes
from .factories import (
    conflict_error,
    dependency_error,
    internal_error,
    not_found_error,
    policy_error,
    validation_error,
)
from .types import ErrorDetail


def exception_to_error(exc: Exception) -> ErrorDetail:
    """Map one Python or SQLAlchemy exception onto the shared taxonomy.

    The mapping is conservative. Services layer domain-specific handling in
    front of this fallback.
    """
    metadata = {"exception_type": type(exc).__name__}

    if isinstance(exc, IntegrityError):
        return conflict_error("conflicting write", metadata=metadata)
    if isinstance(exc, OperationalError):
        return dependency_error(
            "store unavailable", code=codes.DEPENDENCY_UNAVAILABLE, metadata=metadata
        )
    if isinstance(exc, SQLAlchemyError):
        return dependency_error(
            "store request failed", retryable=False, metadata=metadata
        )
    if isinstance(exc, ValueError):
        return validation_error(
            str(exc), code=codes.INVALID_ARGUMENT, metadata=metadata
        )
    if isinstance(exc, KeyError):
        return not_found_error(str(exc), metadata=metadata)
    if isinstance(exc, PermissionError):
        return policy_error(str(exc), metadata=metadata)
    if isinstance(exc, TimeoutError):
        return dependency_error(
            str(exc) or "dependency timeout",
            code=codes.DEPENDENCY_TIMEOUT,
            metadata=metadata,
        )
    if isinstance(exc, ConnectionError):
        return dependency_error(
            str(exc) or "dependency unavailable",
            code=codes.DEPENDENCY_UNAVAILABLE,
            metadata=metadata,
        )
    return internal_error(
        str(exc) or "unexpected exception",
        code=codes.UNEXPECTED_EXCEPTION,
        metadata=metadata,
    )
