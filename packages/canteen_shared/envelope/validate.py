"""Validation of envelope metadata at service boundaries."""

from __future__ import annotations

from .meta import EnvelopeKind, EnvelopeMeta

_REQUIRED_TEXT_FIELDS = ("envelope_id", "trace_id", "source", "principal")


def validate_meta(meta: EnvelopeMeta) -> None:
    """Raise ``ValueError`` naming the first missing metadata field.

    Text fields must be non-blank and ``kind`` must not be ``UNSPECIFIED``.
    """
    for name in _REQUIRED_TEXT_FIELDS:
        if not str(getattr(meta, name) or "").strip():
            raise ValueError(f"metadata.{name} is required")
    if meta.kind == EnvelopeKind.UNSPECIFIED:
        raise ValueError("metadata.kind must be specified")
