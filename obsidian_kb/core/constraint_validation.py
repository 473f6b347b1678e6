"""Folder constraint evaluation and constraint-rules schema checks."""

from __future__ import annotations

import re
from typing import Any

from obsidian_kb.core.frontmatter_parser import parse_note
from obsidian_kb.data_models import (
    FIELD_TYPES,
    ContentRules,
    FolderConstraint,
    RequiredField,
    ValidationIssue,
    ValidationResult,
)

_DATE_PREFIX = re.compile(r"[0-9]{4}-[0-9]{2}-[0-9]{2}")


# ==============================================================================
# HELPER FUNCTIONS
# ==============================================================================


def _runtime_type_name(value: Any) -> str:
    """Name a parsed frontmatter value using the rule vocabulary."""
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, list):
        return "array"
    if value is None:
        return "null"
    return type(value).__name__


def _matches_type(value: Any, expected: str) -> bool:
    if expected == "string":
        return isinstance(value, str)
    if expected == "number":
        return isinstance(value, (int, float)) and not isinstance(value, bool)
    if expected == "boolean":
        return isinstance(value, bool)
    if expected == "date":
        return isinstance(value, str) and _DATE_PREFIX.match(value) is not None
    if expected == "array":
        return isinstance(value, list)
    return True


def _is_allowed(value: Any, allowed_values: list[Any]) -> bool:
    # ``True == 1`` in Python; a boolean only matches a boolean
    for allowed in allowed_values:
        if isinstance(allowed, bool) != isinstance(value, bool):
            continue
        if allowed == value:
            return True
    return False


def _compile(pattern: str) -> re.Pattern[str] | None:
    try:
        return re.compile(pattern)
    except re.error:
        return None


def _validate_frontmatter_field(
    frontmatter: dict[str, Any],
    required: RequiredField,
) -> list[ValidationIssue]:
    """Check one required field; a missing or mistyped value stops further checks."""
    field_path = f"frontmatter.{required.name}"
    value = frontmatter.get(required.name)

    if value is None:
        return [
            ValidationIssue(
                field=field_path,
                error="missing_required_field",
                message=f"Required field '{required.name}' is missing",
            )
        ]

    if not _matches_type(value, required.type):
        actual = _runtime_type_name(value)
        return [
            ValidationIssue(
                field=field_path,
                error="invalid_field_type",
                expected=required.type,
                actual=actual,
                message=f"Field '{required.name}' should be type '{required.type}', got '{actual}'",
            )
        ]

    issues: list[ValidationIssue] = []

    if required.pattern and isinstance(value, str):
        regex = _compile(required.pattern)
        if regex is not None and regex.search(value) is None:
            issues.append(
                ValidationIssue(
                    field=field_path,
                    error="pattern_mismatch",
                    pattern=required.pattern,
                    actual=value,
                    message=f"Field '{required.name}' does not match pattern '{required.pattern}'",
                )
            )

    if required.allowed_values and not _is_allowed(value, required.allowed_values):
        rendered = ", ".join(str(item) for item in required.allowed_values)
        issues.append(
            ValidationIssue(
                field=field_path,
                error="invalid_value",
                expected=list(required.allowed_values),
                actual=value,
                message=f"Field '{required.name}' must be one of: {rendered}",
            )
        )

    return issues


def _validate_filename(filename: str, pattern: str) -> list[ValidationIssue]:
    regex = _compile(pattern)
    if regex is None or regex.search(filename) is not None:
        return []
    return [
        ValidationIssue(
            field="filename",
            error="pattern_mismatch",
            pattern=pattern,
            actual=filename,
            message=f"Filename '{filename}' does not match pattern '{pattern}'",
        )
    ]


def _validate_content(body: str, rules: ContentRules) -> list[ValidationIssue]:
    issues: list[ValidationIssue] = []
    length = len(body)

    if rules.min_length is not None and length < rules.min_length:
        issues.append(
            ValidationIssue(
                field="content",
                error="content_too_short",
                expected=rules.min_length,
                actual=length,
                message=f"Content must be at least {rules.min_length} characters, got {length}",
            )
        )

    if rules.max_length is not None and length > rules.max_length:
        issues.append(
            ValidationIssue(
                field="content",
                error="content_too_long",
                expected=rules.max_length,
                actual=length,
                message=f"Content must be at most {rules.max_length} characters, got {length}",
            )
        )

    for section in rules.required_sections or []:
        heading = re.compile(rf"^#+\s+{re.escape(section)}\s*$", re.IGNORECASE | re.MULTILINE)
        if heading.search(body) is None:
            issues.append(
                ValidationIssue(
                    field="content.sections",
                    error="missing_section",
                    expected=section,
                    message=f"Required section '{section}' is missing",
                )
            )

    return issues


# ==============================================================================
# NOTE VALIDATION
# ==============================================================================


def validate_note(note_path: str, content: str, constraint: FolderConstraint) -> ValidationResult:
    """Check a note against a folder constraint.

    Every rule is evaluated and every failure is collected; nothing here raises.

    Args:
        note_path: Vault-relative path of the note; only its last segment is
            matched against the filename pattern.
        content: Complete note text, frontmatter included.
        constraint: The constraint applicable to ``note_path``.

    Returns:
        A :class:`ValidationResult` that passed when no issue was found.
    """
    parsed = parse_note(content)
    filename = note_path.rsplit("/", 1)[-1]
    rules = constraint.rules
    result = ValidationResult()

    if rules.frontmatter is not None and rules.frontmatter.required_fields:
        for required in rules.frontmatter.required_fields:
            result.issues.extend(_validate_frontmatter_field(parsed.frontmatter, required))

    if rules.filename is not None and rules.filename.pattern:
        result.issues.extend(_validate_filename(filename, rules.filename.pattern))

    if rules.content is not None:
        result.issues.extend(_validate_content(parsed.body, rules.content))

    return result


# ==============================================================================
# RULES SCHEMA
# ==============================================================================


def _type_issue(field: str, expected: str, value: Any) -> ValidationIssue:
    actual = _runtime_type_name(value) if not isinstance(value, dict) else "object"
    return ValidationIssue(
        field=field,
        error="invalid_field_type",
        expected=expected,
        actual=actual,
        message=f"'{field}' must be {expected}, got {actual}",
    )


def _is_non_negative_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and value >= 0


def validate_constraint_rules_schema(rules: Any) -> ValidationResult:
    """Structurally check caller-supplied constraint rules before they are stored.

    All problems are collected. Unknown keys are tolerated and dropped later by
    :meth:`ConstraintRules.from_payload`.
    """
    result = ValidationResult()
    issues = result.issues

    if not isinstance(rules, dict):
        issues.append(_type_issue("rules", "object", rules))
        return result

    frontmatter = rules.get("frontmatter")
    if frontmatter is not None:
        if not isinstance(frontmatter, dict):
            issues.append(_type_issue("rules.frontmatter", "object", frontmatter))
        else:
            fields = frontmatter.get("required_fields")
            if fields is not None and not isinstance(fields, list):
                issues.append(_type_issue("rules.frontmatter.required_fields", "array", fields))
            elif fields is not None:
                for index, item in enumerate(fields):
                    issues.extend(_required_field_issues(f"rules.frontmatter.required_fields[{index}]", item))

    filename = rules.get("filename")
    if filename is not None:
        if not isinstance(filename, dict):
            issues.append(_type_issue("rules.filename", "object", filename))
        else:
            pattern = filename.get("pattern")
            if pattern is not None and not isinstance(pattern, str):
                issues.append(_type_issue("rules.filename.pattern", "string", pattern))
            elif isinstance(pattern, str) and _compile(pattern) is None:
                issues.append(
                    ValidationIssue(
                        field="rules.filename.pattern",
                        error="invalid_value",
                        actual=pattern,
                        message="Invalid regex pattern",
                    )
                )

    content = rules.get("content")
    if content is not None:
        if not isinstance(content, dict):
            issues.append(_type_issue("rules.content", "object", content))
        else:
            for key in ("min_length", "max_length"):
                value = content.get(key)
                if value is not None and not _is_non_negative_int(value):
                    issues.append(_type_issue(f"rules.content.{key}", "non-negative integer", value))
            sections = content.get("required_sections")
            if sections is not None and (
                not isinstance(sections, list) or not all(isinstance(item, str) for item in sections)
            ):
                issues.append(_type_issue("rules.content.required_sections", "array of strings", sections))

    return result


def _required_field_issues(path: str, item: Any) -> list[ValidationIssue]:
    if not isinstance(item, dict):
        return [_type_issue(path, "object", item)]

    issues: list[ValidationIssue] = []
    name = item.get("name")
    if not isinstance(name, str) or not name.strip():
        issues.append(_type_issue(f"{path}.name", "non-empty string", name))

    field_type = item.get("type", "string")
    if field_type not in FIELD_TYPES:
        issues.append(
            ValidationIssue(
                field=f"{path}.type",
                error="invalid_value",
                expected=list(FIELD_TYPES),
                actual=field_type,
                message=f"Unsupported field type '{field_type}'",
            )
        )

    pattern = item.get("pattern")
    if pattern is not None and not isinstance(pattern, str):
        issues.append(_type_issue(f"{path}.pattern", "string", pattern))

    allowed = item.get("allowed_values")
    if allowed is not None and (
        not isinstance(allowed, list)
        or not all(value is None or isinstance(value, (str, int, float, bool)) for value in allowed)
    ):
        issues.append(_type_issue(f"{path}.allowed_values", "array of scalars", allowed))

    return issues
