"""Minimal FastAPI and uvicorn helpers."""

from __future__ import annotations

from typing import Mapping

import uvicorn
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from packages.canteen_shared.errors import codes, validation_error

from .responses import error_response


class MissingHeaderError(Exception):
    """Required inbound header is missing or blank."""

    def __init__(self, *, header_name: str) -> None:
        super().__init__(f"Missing required header: {header_name}")
        self.header_name = header_name


def create_app(*, title: str = "canteen", version: str = "0.0.0") -> FastAPI:
    """Create a FastAPI app with project defaults.

    Request validation failures are rendered in the shared error body with
    status 400, matching envelope validation errors.
    """
    app = FastAPI(title=title, version=version)
    app.add_exception_handler(RequestValidationError, _request_validation_handler)
    return app


async def _request_validation_handler(
    request: Request, exc: Exception
) -> JSONResponse:
    details = exc.errors() if isinstance(exc, RequestValidationError) else []
    errors = [
        validation_error(
            f"{'.'.join(str(part) for part in item.get('loc', ())[1:])}: "
            f"{item.get('msg', 'invalid')}",
            code=codes.INVALID_ARGUMENT,
        )
        for item in details
    ] or [validation_error("invalid request", code=codes.INVALID_ARGUMENT)]
    return error_response(errors)


def run_app(
    app: FastAPI,
    *,
    host: str = "127.0.0.1",
    port: int = 3000,
    log_level: str = "info",
) -> None:
    """Run one FastAPI app through uvicorn.

    ``log_config=None`` keeps uvicorn on the handlers ``configure_logging``
    installed.
    """
    uvicorn.run(app, host=host, port=port, log_level=log_level, log_config=None)


def get_header(
    headers: Mapping[str, str],
    name: str,
    *,
    required: bool = True,
    strip: bool = True,
) -> str | None:
    """Fetch one header value and optionally enforce presence.

    Accepts any header mapping so HTTP requests and WebSocket handshakes share
    the same lookup.
    """
    value = headers.get(name)
    if value is None:
        if required:
            raise MissingHeaderError(header_name=name)
        return None

    if strip:
        value = value.strip()
    if value == "":
        if required:
            raise MissingHeaderError(header_name=name)
        return None
    return value
