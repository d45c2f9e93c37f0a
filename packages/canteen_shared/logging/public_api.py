"""Instrumentation decorator for public service API methods.

Each decorated call emits one invocation record and one completion record.
The completion outcome is read from the returned envelope:

- ``success``: no errors.
- ``rejected``: only caller-side errors (validation, policy, conflict or
  not-found, which includes a locked date). Logged at INFO.
- ``failure``: a dependency or internal error, or a raised exception.
  Logged at WARNING.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from functools import wraps
from time import perf_counter
from typing import Any, Callable, Literal, Mapping, Protocol, Sequence

from . import fields
from .context import log_context

Outcome = Literal["success", "rejected", "failure"]

_REJECTION_CATEGORIES = frozenset({"validation", "policy", "conflict", "not_found"})


@dataclass(frozen=True)
class InvocationContext:
    """Structured metadata describing one public API invocation."""

    component_id: str
    api_name: str
    trace_id: str | None
    envelope_id: str | None
    principal: str | None
    references: Mapping[str, str]


@dataclass(frozen=True)
class CompletionContext:
    """Outcome of one finished public API invocation."""

    invocation: InvocationContext
    outcome: Outcome
    duration_ms: float
    errors: list[str] = field(default_factory=list)
    error_categories: list[str] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return self.outcome == "success"


class PublicApiInstrumentationConcern(Protocol):
    """Hook contract for one instrumentation concern."""

    def on_invocation(self, context: InvocationContext) -> None:
        """Handle invocation start."""

    def on_completion(self, context: CompletionContext) -> None:
        """Handle invocation completion."""


class PublicApiLoggingConcern:
    """Emit structured invocation and completion log records."""

    def __init__(self, *, logger: Any) -> None:
        self._logger = logger

    def on_invocation(self, context: InvocationContext) -> None:
        with log_context(_invocation_fields(context)):
            self._logger.info("Public API invocation")

    def on_completion(self, context: CompletionContext) -> None:
        payload = _invocation_fields(context.invocation)
        payload.update(
            {
                fields.EVENT: fields.PUBLIC_API_COMPLETION_EVENT,
                fields.OUTCOME: context.outcome,
                fields.SUCCESS: context.success,
                fields.DURATION_MS: context.duration_ms,
            }
        )
        if context.errors:
            payload[fields.ERRORS] = context.errors
            payload[fields.ERROR_CATEGORY] = ",".join(context.error_categories)
        with log_context(payload):
            if context.outcome == "failure":
                self._logger.warning("Public API completion")
            else:
                self._logger.info("Public API completion")


def public_api_instrumented(
    *,
    component_id: str,
    api_name: str | None = None,
    id_fields: tuple[str, ...] = (),
    concerns: Sequence[PublicApiInstrumentationConcern] | None = None,
    logger: Any | None = None,
) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
    """Decorate one ``meta``-taking service method with instrumentation concerns.

    ``id_fields`` names keyword arguments (such as ``unit_id`` or ``date``)
    copied into the log context as references.
    """
    resolved: tuple[PublicApiInstrumentationConcern, ...] = tuple(concerns or ())
    if logger is not None:
        resolved = (PublicApiLoggingConcern(logger=logger), *resolved)
    if not resolved:
        raise ValueError("public_api_instrumented requires at least one concern")

    def decorator(func: Callable[..., Any]) -> Callable[..., Any]:
        method_name = api_name or func.__name__

        @wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            invocation = _invocation(
                component_id=component_id,
                api_name=method_name,
                id_fields=id_fields,
                kwargs=kwargs,
            )
            _dispatch(resolved, "on_invocation", invocation, logger)
            started = perf_counter()

            def complete(
                outcome: Outcome, errors: list[str], categories: list[str]
            ) -> None:
                completion = CompletionContext(
                    invocation=invocation,
                    outcome=outcome,
                    duration_ms=round((perf_counter() - started) * 1000.0, 3),
                    errors=errors,
                    error_categories=categories,
                )
                _dispatch(resolved, "on_completion", completion, logger)

            try:
                result = func(*args, **kwargs)
            except Exception as exc:
                complete("failure", [f"{type(exc).__name__}: {exc}"], ["internal"])
                raise
            complete(*_classify(result))
            return result

        return wrapper

    return decorator


def _invocation(
    *,
    component_id: str,
    api_name: str,
    id_fields: tuple[str, ...],
    kwargs: Mapping[str, Any],
) -> InvocationContext:
    meta = kwargs.get("meta")
    return InvocationContext(
        component_id=component_id,
        api_name=api_name,
        trace_id=_meta_attr(meta, "trace_id"),
        envelope_id=_meta_attr(meta, "envelope_id"),
        principal=_meta_attr(meta, "principal"),
        references={
            name: str(kwargs[name])
            for name in id_fields
            if kwargs.get(name) not in (None, "")
        },
    )


def _meta_attr(meta: object | None, name: str) -> str | None:
    value = getattr(meta, name, None) if meta is not None else None
    return None if value in (None, "") else str(value)


def _classify(result: object) -> tuple[Outcome, list[str], list[str]]:
    """Derive outcome, ``CODE: message`` summaries and categories from a result."""
    summaries: list[str] = []
    categories: list[str] = []
    for item in getattr(result, "errors", None) or []:
        code = getattr(item, "code", "")
        message = getattr(item, "message", "")
        raw_category = getattr(item, "category", "")
        categories.append(str(getattr(raw_category, "value", raw_category)))
        summaries.append(f"{code}: {message}" if code else str(message))
    if not summaries:
        return "success", [], []
    if all(category in _REJECTION_CATEGORIES for category in categories):
        return "rejected", summaries, categories
    return "failure", summaries, categories


def _invocation_fields(context: InvocationContext) -> dict[str, object]:
    return {
        fields.EVENT: fields.PUBLIC_API_INVOCATION_EVENT,
        fields.COMPONENT_ID: context.component_id,
        fields.API_NAME: context.api_name,
        fields.TRACE_ID: context.trace_id,
        fields.ENVELOPE_ID: context.envelope_id,
        fields.PRINCIPAL: context.principal,
        **context.references,
    }


def _dispatch(
    concerns: Sequence[PublicApiInstrumentationConcern],
    hook: str,
    context: object,
    logger: Any | None,
) -> None:
    """Run one hook on every concern; a failing concern never breaks the call."""
    for concern in concerns:
        try:
            getattr(concern, hook)(context)
        except Exception as exc:  # noqa: BLE001
            if logger is None:
                continue
            logger.warning(
                "Public API instrumentation concern failed",
                extra={
                    fields.CONCERN: type(concern).__name__,
                    fields.STAGE: hook,
                    fields.ERRORS: [f"{type(exc).__name__}: {exc}"],
                },
            )
