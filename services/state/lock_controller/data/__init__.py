"""Data-layer exports for Lock Controller Service."""

from services.state.lock_controller.data.repository import (
    InMemoryLockRepository,
    SqlLockRepository,
)
from services.state.lock_controller.data.runtime import LockDataRuntime

__all__ = ["InMemoryLockRepository", "LockDataRuntime", "SqlLockRepository"]
