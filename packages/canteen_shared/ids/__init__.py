"""Shared identifier helpers."""

from packages.canteen_shared.ids.ulid import ULID_STR_LENGTH, generate_ulid_str, ulid_at

__all__ = ["ULID_STR_LENGTH", "generate_ulid_str", "ulid_at"]
