"""Realtime Fan-out Service package."""
