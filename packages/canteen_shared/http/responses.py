"""Render service envelopes as FastAPI JSON responses."""

from __future__ import annotations

from http import HTTPStatus
from typing import Any

from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse

from packages.canteen_shared.envelope import Envelope
from packages.canteen_shared.errors import ErrorCategory, ErrorDetail, codes


def error_status(error: ErrorDetail) -> int:
    """Map one structured envelope error to an HTTP status code."""
    category = error.category
    if category == ErrorCategory.VALIDATION:
        return HTTPStatus.BAD_REQUEST
    if category == ErrorCategory.POLICY:
        if error.code == codes.UNAUTHENTICATED:
            return HTTPStatus.UNAUTHORIZED
        return HTTPStatus.FORBIDDEN
    if category == ErrorCategory.CONFLICT:
        if error.code == codes.REGISTRATION_LOCKED:
            return HTTPStatus.LOCKED
        return HTTPStatus.CONFLICT
    if category == ErrorCategory.NOT_FOUND:
        return HTTPStatus.NOT_FOUND
    if category == ErrorCategory.DEPENDENCY:
        return HTTPStatus.SERVICE_UNAVAILABLE
    return HTTPStatus.INTERNAL_SERVER_ERROR


def error_response(errors: list[ErrorDetail]) -> JSONResponse:
    """Render errors with the status of the first one."""
    status = error_status(errors[0]) if errors else HTTPStatus.INTERNAL_SERVER_ERROR
    return JSONResponse(
        status_code=int(status),
        content={
            "ok": False,
            "errors": [
                {
                    "code": error.code,
                    "category": error.category.value,
                    "message": error.message,
                    "metadata": dict(error.metadata),
                }
                for error in errors
            ],
        },
    )


def envelope_response(envelope: Envelope[Any]) -> JSONResponse:
    """Render the payload of a successful envelope, or its errors."""
    if not envelope.ok:
        return error_response(list(envelope.errors))
    return JSONResponse(content=jsonable_encoder(envelope.value, by_alias=True))
