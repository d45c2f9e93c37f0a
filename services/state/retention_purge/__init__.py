"""Retention Purge Service package."""
