"""
schema/validator.py — JSON Schema validation for DocForge YAML schema files.

Usage:
    from docforge.schema.validator import validate_schema_dir, validate_yaml_file

    issues = validate_schema_dir(Path("schemas"))
    for issue in issues:
        print(issue)
"""
from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Any

import yaml
from jsonschema import Draft202012Validator
from jsonschema.exceptions import ValidationError

logger = logging.getLogger(__name__)

_SCHEMA_FILE = Path(__file__).parent / "schemas" / "schema.schema.json"


@dataclass
class ValidationIssue:
    """A single validation finding for a schema YAML file."""

    file: Path
    message: str
    path: str = ""          # path within the document, e.g. "fields[0]/type"
    severity: str = "error" # "error" | "warning"

    def __str__(self) -> str:
        loc = f" at {self.path}" if self.path else ""
        return f"[{self.severity.upper()}] {self.file}{loc}: {self.message}"


@lru_cache(maxsize=1)
def _validator() -> Draft202012Validator:
    with _SCHEMA_FILE.open() as fh:
        return Draft202012Validator(json.load(fh))


def _json_path(error: ValidationError) -> str:
    """Convert a jsonschema ValidationError path to a readable string."""
    parts = []
    for p in error.absolute_path:
        if isinstance(p, int):
            parts.append(f"[{p}]")
        else:
            parts.append(str(p))
    return "/".join(parts).replace("/[", "[")


def _warnings(yaml_path: Path, doc: dict[str, Any]) -> list[ValidationIssue]:
    """Semantic checks that JSON Schema cannot express."""
    issues: list[ValidationIssue] = []
    seen: set[str] = set()
    for i, f in enumerate(doc.get("fields", [])):
        name = f.get("name")
        if name in seen:
            issues.append(
                ValidationIssue(
                    file=yaml_path,
                    message=f"Field '{name}' is declared more than once",
                    path=f"fields[{i}]",
                    severity="warning",
                )
            )
        seen.add(name)
    return issues


def validate_yaml_file(yaml_path: Path) -> list[ValidationIssue]:
    """
    Validate a single YAML schema file.

    Returns:
        A list of :class:`ValidationIssue` objects (empty on success).
    """
    try:
        with yaml_path.open() as fh:
            doc = yaml.safe_load(fh)
    except yaml.YAMLError as exc:
        return [ValidationIssue(file=yaml_path, message=f"YAML parse error: {exc}")]

    if doc is None:
        return [
            ValidationIssue(file=yaml_path, message="File is empty or contains only whitespace")
        ]

    issues = [
        ValidationIssue(file=yaml_path, message=error.message, path=_json_path(error))
        for error in sorted(_validator().iter_errors(doc), key=_json_path)
    ]
    if not issues:
        issues.extend(_warnings(yaml_path, doc))
    return issues


def validate_schema_dir(schema_dir: Path, *, strict: bool = False) -> list[ValidationIssue]:
    """
    Validate every ``*.yaml`` file in *schema_dir*.

    Args:
        schema_dir: Directory holding schema YAML files.
        strict:     If ``True``, warnings are escalated to errors.

    Returns:
        A flat list of issues across all files. Empty list means all files are valid.
    """
    if not schema_dir.is_dir():
        return [
            ValidationIssue(
                file=schema_dir,
                message=f"Schema directory does not exist: {schema_dir}",
            )
        ]

    all_issues: list[ValidationIssue] = []
    for yaml_file in sorted(schema_dir.glob("*.yaml")):
        file_issues = validate_yaml_file(yaml_file)
        if strict:
            for issue in file_issues:
                if issue.severity == "warning":
                    issue.severity = "error"
        all_issues.extend(file_issues)

    logger.debug("Validated %s: %d issue(s)", schema_dir, len(all_issues))
    return all_issues
