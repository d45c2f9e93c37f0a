"""Checks for public API invocation instrumentation.

Every ``meta``-taking method declared on a registered service's ``Service``
contract must be decorated with ``public_api_instrumented`` in its default
implementation, and the decorator must emit invocation/completion records.
"""

from __future__ import annotations

import ast
import logging
from pathlib import Path

import pytest

from packages.canteen_core import import_component_modules
from packages.canteen_shared.envelope import EnvelopeKind, failure, new_meta, success
from packages.canteen_shared.errors import codes, conflict_error, dependency_error
from packages.canteen_shared.logging import fields, public_api_instrumented
from packages.canteen_shared.logging.config import ContextFilter
from packages.canteen_shared.manifest import get_registry

REPO_ROOT = Path(__file__).resolve().parents[2]


def test_registered_services_decorate_public_api_methods() -> None:
    """Require instrumentation on all envelope methods declared in Service APIs."""
    import_component_modules()
    failures: list[str] = []
    for manifest in get_registry().list_components():
        if manifest.kind != "service":
            continue
        package_dir = REPO_ROOT / Path(*manifest.module_root.split("."))
        contract = _abstract_meta_methods(package_dir / "service.py")
        decorated = _decorated_methods(package_dir / "implementation.py")
        missing = sorted(contract - decorated)
        if missing:
            failures.append(f"{manifest.id}: {missing}")

    assert not failures, (
        "Missing @public_api_instrumented on Service public API methods:\n"
        + "\n".join(failures)
    )


def test_decorator_logs_invocation_and_successful_completion(
    caplog: pytest.LogCaptureFixture,
) -> None:
    logger = _logger("tests.public_api.success")

    @public_api_instrumented(
        logger=logger, component_id="service_demo", id_fields=("unit_id",)
    )
    def lookup(*, meta, unit_id: str):
        return success(meta=meta, payload=unit_id)

    meta = new_meta(kind=EnvelopeKind.QUERY, source="test", principal="ana")
    with caplog.at_level(logging.INFO, logger=logger.name):
        lookup(meta=meta, unit_id="Sales")

    invocation, completion = caplog.records
    assert invocation.getMessage() == "Public API invocation"
    assert invocation.context[fields.API_NAME] == "lookup"
    assert invocation.context[fields.UNIT_ID] == "Sales"
    assert invocation.context[fields.TRACE_ID] == meta.trace_id
    assert completion.levelno == logging.INFO
    assert completion.context[fields.SUCCESS] == "True"


def test_locked_rejection_logs_at_info_with_outcome(
    caplog: pytest.LogCaptureFixture,
) -> None:
    """Caller-side errors such as a locked date are expected outcomes."""
    logger = _logger("tests.public_api.rejected")

    @public_api_instrumented(logger=logger, component_id="service_demo")
    def write(*, meta):
        return failure(
            meta=meta,
            errors=[conflict_error("locked", code=codes.REGISTRATION_LOCKED)],
        )

    meta = new_meta(kind=EnvelopeKind.COMMAND, source="test", principal="ana")
    with caplog.at_level(logging.INFO, logger=logger.name):
        result = write(meta=meta)

    completion = caplog.records[-1]
    assert result.ok is False
    assert completion.levelno == logging.INFO
    assert completion.context[fields.OUTCOME] == "rejected"
    assert completion.context[fields.ERROR_CATEGORY] == "conflict"
    assert "REGISTRATION_LOCKED: locked" in completion.context[fields.ERRORS]


def test_dependency_failure_logs_at_warning(
    caplog: pytest.LogCaptureFixture,
) -> None:
    logger = _logger("tests.public_api.failure")

    @public_api_instrumented(logger=logger, component_id="service_demo")
    def read(*, meta):
        return failure(meta=meta, errors=[dependency_error("store unavailable")])

    meta = new_meta(kind=EnvelopeKind.QUERY, source="test", principal="ana")
    with caplog.at_level(logging.INFO, logger=logger.name):
        read(meta=meta)

    completion = caplog.records[-1]
    assert completion.levelno == logging.WARNING
    assert completion.context[fields.OUTCOME] == "failure"



def test_decorator_reraises_exceptions_after_logging(
    caplog: pytest.LogCaptureFixture,
) -> None:
    logger = _logger("tests.public_api.raise")

    @public_api_instrumented(logger=logger, component_id="service_demo")
    def explode(*, meta):
        raise RuntimeError("boom")

    meta = new_meta(kind=EnvelopeKind.COMMAND, source="test", principal="ana")
    with caplog.at_level(logging.INFO, logger=logger.name):
        with pytest.raises(RuntimeError):
            explode(meta=meta)

    assert caplog.records[-1].levelno == logging.WARNING


def test_decorator_requires_a_concern() -> None:
    with pytest.raises(ValueError):
        public_api_instrumented(component_id="service_demo")


def _logger(name: str) -> logging.Logger:
    logger = logging.getLogger(name)
    if not logger.filters:
        logger.addFilter(ContextFilter())
    return logger


def _abstract_meta_methods(file_path: Path) -> set[str]:
    """Return abstract methods taking ``meta`` on the file's ABC contract."""
    tree = ast.parse(file_path.read_text(encoding="utf-8"))
    names: set[str] = set()
    for node in ast.walk(tree):
        if not isinstance(node, ast.FunctionDef):
            continue
        is_abstract = any(
            _decorator_name(item) == "abstractmethod" for item in node.decorator_list
        )
        params = {arg.arg for arg in node.args.kwonlyargs}
        if is_abstract and "meta" in params:
            names.add(node.name)
    return names


def _decorated_methods(file_path: Path) -> set[str]:
    tree = ast.parse(file_path.read_text(encoding="utf-8"))
    return {
        node.name
        for node in ast.walk(tree)
        if isinstance(node, ast.FunctionDef)
        and any(
            _decorator_name(item) == "public_api_instrumented"
            for item in node.decorator_list
        )
    }


def _decorator_name(node: ast.expr) -> str:
    if isinstance(node, ast.Call):
        node = node.func
    if isinstance(node, ast.Attribute):
        return node.attr
    if isinstance(node, ast.Name):
        return node.id
    return ""
