"""Structured-log field names shared by every Canteen component.

Only names listed in ``STRUCTURED_FIELDS`` are lifted from ``extra=`` into
formatted output; everything bound through ``log_context`` is always emitted.
"""

TIMESTAMP = "timestamp"
LEVEL = "level"
LOGGER = "logger"
MESSAGE = "message"
EVENT = "event"

# Envelope correlation.
TRACE_ID = "trace_id"
ENVELOPE_ID = "envelope_id"
PRINCIPAL = "principal"

# Public API instrumentation.
COMPONENT_ID = "component_id"
API_NAME = "api_name"
PUBLIC_API_INVOCATION_EVENT = "public_api_invocation"
PUBLIC_API_COMPLETION_EVENT = "public_api_completion"
OUTCOME = "outcome"
SUCCESS = "success"
DURATION_MS = "duration_ms"
ERRORS = "errors"
ERROR_CATEGORY = "error_category"
STAGE = "stage"
CONCERN = "concern"

# Registration domain.
UNIT_ID = "unit_id"
BUSINESS_DATE = "business_date"
CHANNEL = "channel"
ROLE = "role"

# Process.
SERVICE = "service"
ENVIRONMENT = "environment"

STRUCTURED_FIELDS = frozenset(
    {
        EVENT,
        TRACE_ID,
        ENVELOPE_ID,
        PRINCIPAL,
        COMPONENT_ID,
        API_NAME,
        OUTCOME,
        ERRORS,
        ERROR_CATEGORY,
        STAGE,
        CONCERN,
        UNIT_ID,
        BUSINESS_DATE,
        CHANNEL,
        ROLE,
    }
)
