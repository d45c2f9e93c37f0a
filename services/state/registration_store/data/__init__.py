"""Data-layer exports for Registration Store Service."""

from services.state.registration_store.data.repository import (
    InMemoryRegistrationRepository,
    SqlRegistrationRepository,
)
from services.state.registration_store.data.runtime import RegistrationDataRuntime

__all__ = [
    "InMemoryRegistrationRepository",
    "RegistrationDataRuntime",
    "SqlRegistrationRepository",
]
