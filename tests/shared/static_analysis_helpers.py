"""Helpers for repository static-analysis tests.

Provides deterministic runtime file discovery and AST import extraction.
"""

from __future__ import annotations

import ast
from dataclasses import dataclass
from pathlib import Path

RUNTIME_SCAN_ROOTS = ("services", "resources", "packages")
REPO_ROOT = Path(__file__).resolve().parents[2]


@dataclass(frozen=True)
class ImportRef:
    """One imported module with its source line."""

    module_name: str
    line: int


def discover_runtime_python_files(
    *, repo_root: Path = REPO_ROOT, roots: tuple[str, ...] = RUNTIME_SCAN_ROOTS
) -> tuple[Path, ...]:
    """Return runtime Python files under the selected roots, tests excluded."""
    files: set[Path] = set()
    for root_name in roots:
        root = repo_root / root_name
        if not root.exists():
            continue
        for file_path in root.rglob("*.py"):
            parts = file_path.relative_to(repo_root).parts
            if "tests" in parts or "__pycache__" in parts:
                continue
            files.add(file_path)
    return tuple(sorted(files))


def module_name_for_file(*, repo_root: Path = REPO_ROOT, file_path: Path) -> str:
    """Convert a repo-relative file path to a dotted module name."""
    rel = file_path.relative_to(repo_root)
    if rel.name == "__init__.py":
        return ".".join(rel.parent.parts)
    return ".".join(rel.with_suffix("").parts)


def imports_for_source(*, source: str, caller_module: str) -> tuple[ImportRef, ...]:
    """Resolve absolute imported module names from Python source."""
    imports: list[ImportRef] = []
    for node in ast.walk(ast.parse(source)):
        if isinstance(node, ast.Import):
            imports.extend(
                ImportRef(module_name=alias.name, line=node.lineno)
                for alias in node.names
            )
        elif isinstance(node, ast.ImportFrom):
            base = resolve_import_from_base(
                caller_module=caller_module, level=node.level, module=node.module
            )
            if base:
                imports.append(ImportRef(module_name=base, line=node.lineno))
    return tuple(imports)


def resolve_import_from_base(
    *, caller_module: str, level: int, module: str | None
) -> str | None:
    """Resolve the absolute base module of one ``from ... import ...``."""
    if level == 0:
        return module
    caller_parts = caller_module.split(".")
    if level > len(caller_parts):
        return None
    prefix = ".".join(caller_parts[: len(caller_parts) - level])
    if module is None:
        return prefix
    return f"{prefix}.{module}" if prefix else module


def is_equal_or_child(module_name: str, prefix: str) -> bool:
    """Return True when ``module_name`` equals ``prefix`` or sits below it."""
    return module_name == prefix or module_name.startswith(f"{prefix}.")
