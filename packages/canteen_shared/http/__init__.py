"""Public shared HTTP API for Canteen processes."""

from .responses import envelope_response, error_response, error_status
from .server import MissingHeaderError, create_app, get_header, run_app

__all__ = [
    "MissingHeaderError",
    "create_app",
    "envelope_response",
    "error_response",
    "error_status",
    "get_header",
    "run_app",
]
