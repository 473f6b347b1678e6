"""Markdown documents that persist knowledge bases and folder constraints.

A knowledge base is stored as ``meta.md``: a frontmatter block holding
``create_time``, ``description`` and ``subfolder`` followed by the free-text
organization rules. A folder constraint is stored as a frontmatter block holding
``subfolder`` followed by a fenced ``yaml`` block with the rules::

    frontmatter:
      required_fields:
        - name: 'status'
          type: string
          allowed_values: ['draft', 'published']
    filename:
      pattern: '^\\d{4}-\\d{2}-\\d{2}-.+\\.md$'
    content:
      min_length: 10
      required_sections: ['Summary']

Strings are written single-quoted (``''`` escapes a quote, backslashes are
literal) unless they contain a line break, in which case a JSON double-quoted
string is used. The parser also accepts double-quoted values without JSON
escapes, as hand-edited files tend to have.
"""

from __future__ import annotations

import json
import re
from datetime import datetime, timezone
from typing import Any, Optional

from obsidian_kb.core.frontmatter_parser import split_flow_sequence, split_frontmatter_block
from obsidian_kb.data_models import (
    ConstraintRules,
    ContentRules,
    FilenameRules,
    FolderConstraint,
    FrontmatterRules,
    KnowledgeBase,
    RequiredField,
)
from obsidian_kb.errors import MalformedRecordError

_RULES_BLOCK = re.compile(r"```ya?ml\r?\n(.*?)\r?\n```", re.DOTALL)
_INTEGER = re.compile(r"[+-]?[0-9]+")
_NUMBER = re.compile(r"[+-]?(?:[0-9]+(?:\.[0-9]*)?|\.[0-9]+)(?:[eE][+-]?[0-9]+)?")


def utc_timestamp() -> str:
    """Current UTC time as ISO-8601 with milliseconds and a ``Z`` suffix."""
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


# ==============================================================================
# SCALARS
# ==============================================================================


def quote_string(value: str) -> str:
    if "\n" in value or "\r" in value:
        return json.dumps(value, ensure_ascii=False)
    return "'" + value.replace("'", "''") + "'"


def decode_string(raw: str) -> str:
    """Undo :func:`quote_string`; unquoted text is returned as-is."""
    if len(raw) >= 2 and raw[0] == raw[-1] == "'":
        return raw[1:-1].replace("''", "'")
    if len(raw) >= 2 and raw[0] == raw[-1] == '"':
        try:
            decoded = json.loads(raw)
        except ValueError:
            return raw[1:-1]
        if isinstance(decoded, str):
            return decoded
        return raw[1:-1]
    return raw


def format_scalar(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if value is None:
        return "null"
    if isinstance(value, (int, float)):
        return repr(value)
    return quote_string(str(value))


def decode_scalar(raw: str) -> Any:
    if raw[:1] in {"'", '"'}:
        return decode_string(raw)
    if raw == "true":
        return True
    if raw == "false":
        return False
    if raw in {"null", "~"}:
        return None
    if _INTEGER.fullmatch(raw):
        return int(raw)
    if _NUMBER.fullmatch(raw):
        return float(raw)
    return raw


def _format_sequence(values: list[Any]) -> str:
    return "[" + ", ".join(format_scalar(value) for value in values) + "]"


def _decode_sequence(raw: str) -> Optional[list[Any]]:
    if not (raw.startswith("[") and raw.endswith("]")):
        return None
    return [decode_scalar(item) for item in split_flow_sequence(raw[1:-1]) if item != ""]


def _parse_meta_block(block: str) -> dict[str, str]:
    metadata: dict[str, str] = {}
    for line in block.split("\n"):
        stripped = line.strip()
        if not stripped or stripped.startswith("#"):
            continue
        key, sep, value = stripped.partition(":")
        if sep and key.strip():
            metadata[key.strip()] = decode_string(value.strip())
    return metadata


# ==============================================================================
# KNOWLEDGE BASE DOCUMENTS
# ==============================================================================


def serialize_knowledge_base(kb: KnowledgeBase) -> str:
    return (
        "---\n"
        f"create_time: {quote_string(kb.create_time)}\n"
        f"description: {quote_string(kb.description)}\n"
        f"subfolder: {quote_string(kb.subfolder)}\n"
        "---\n"
        "\n"
        f"{kb.organization_rules}"
    )


def parse_knowledge_base(name: str, text: str) -> KnowledgeBase:
    """Parse a ``meta.md`` document.

    Raises:
        MalformedRecordError: If the document has no frontmatter block.
    """
    split = split_frontmatter_block(text)
    if split is None:
        raise MalformedRecordError(f"Knowledge base '{name}' meta document has no frontmatter block.")

    block, body = split
    metadata = _parse_meta_block(block)
    return KnowledgeBase(
        name=name,
        create_time=metadata.get("create_time", ""),
        description=metadata.get("description", ""),
        subfolder=metadata.get("subfolder", ""),
        organization_rules=body.strip(),
    )


# ==============================================================================
# RULES DIALECT
# ==============================================================================


def serialize_rules(rules: ConstraintRules) -> str:
    lines: list[str] = []

    if rules.frontmatter is not None:
        lines.append("frontmatter:")
        fields = rules.frontmatter.required_fields
        if fields is not None:
            lines.append("  required_fields:" if fields else "  required_fields: []")
            for required in fields:
                lines.append(f"    - name: {quote_string(required.name)}")
                lines.append(f"      type: {required.type}")
                if required.pattern is not None:
                    lines.append(f"      pattern: {quote_string(required.pattern)}")
                if required.allowed_values is not None:
                    lines.append(f"      allowed_values: {_format_sequence(required.allowed_values)}")

    if rules.filename is not None:
        lines.append("filename:")
        if rules.filename.pattern is not None:
            lines.append(f"  pattern: {quote_string(rules.filename.pattern)}")

    if rules.content is not None:
        lines.append("content:")
        if rules.content.min_length is not None:
            lines.append(f"  min_length: {rules.content.min_length}")
        if rules.content.max_length is not None:
            lines.append(f"  max_length: {rules.content.max_length}")
        if rules.content.required_sections is not None:
            lines.append(f"  required_sections: {_format_sequence(rules.content.required_sections)}")

    return "\n".join(lines)


def _apply_field_attribute(required: RequiredField, key: str, value: str) -> None:
    if key == "name":
        required.name = decode_string(value)
    elif key == "type":
        required.type = decode_string(value)
    elif key == "pattern":
        required.pattern = decode_string(value)
    elif key == "allowed_values":
        values = _decode_sequence(value)
        if values is not None:
            required.allowed_values = values


def _apply_content_attribute(content: ContentRules, key: str, value: str) -> None:
    if key in {"min_length", "max_length"}:
        if _INTEGER.fullmatch(value):
            setattr(content, key, int(value))
    elif key == "required_sections":
        sections = _decode_sequence(value)
        if sections is not None:
            content.required_sections = [str(section) for section in sections]


def parse_rules(text: str) -> ConstraintRules:
    """Parse the rules dialect written by :func:`serialize_rules`.

    Unknown keys and lines that do not fit the dialect are skipped.
    """
    rules = ConstraintRules()
    section: Optional[str] = None
    current: Optional[RequiredField] = None

    for raw_line in text.split("\n"):
        line = raw_line.rstrip("\r")
        stripped = line.strip()
        if not stripped or stripped.startswith("#"):
            continue

        if not line[0].isspace():
            section = stripped.partition(":")[0].strip()
            current = None
            if section == "frontmatter":
                rules.frontmatter = FrontmatterRules()
            elif section == "filename":
                rules.filename = FilenameRules()
            elif section == "content":
                rules.content = ContentRules()
            continue

        if section == "frontmatter" and rules.frontmatter is not None:
            frontmatter = rules.frontmatter
            if stripped.startswith("- "):
                current = RequiredField(name="")
                if frontmatter.required_fields is None:
                    frontmatter.required_fields = []
                frontmatter.required_fields.append(current)
                stripped = stripped[2:].strip()

            key, sep, value = stripped.partition(":")
            if not sep:
                continue
            key, value = key.strip(), value.strip()
            if current is None:
                if key == "required_fields" and frontmatter.required_fields is None:
                    frontmatter.required_fields = []
                continue
            _apply_field_attribute(current, key, value)

        elif section == "filename" and rules.filename is not None:
            key, sep, value = stripped.partition(":")
            if sep and key.strip() == "pattern":
                rules.filename.pattern = decode_string(value.strip())

        elif section == "content" and rules.content is not None:
            key, sep, value = stripped.partition(":")
            if sep:
                _apply_content_attribute(rules.content, key.strip(), value.strip())

    if rules.frontmatter is not None and rules.frontmatter.required_fields:
        rules.frontmatter.required_fields = [
            required for required in rules.frontmatter.required_fields if required.name
        ]

    return rules


# ==============================================================================
# FOLDER CONSTRAINT DOCUMENTS
# ==============================================================================


def serialize_folder_constraint(constraint: FolderConstraint) -> str:
    return (
        "---\n"
        f"subfolder: {quote_string(constraint.subfolder)}\n"
        "---\n"
        "\n"
        "## Rules\n"
        "\n"
        "```yaml\n"
        f"{serialize_rules(constraint.rules)}\n"
        "```\n"
    )


def parse_folder_constraint(kb_name: str, text: str) -> FolderConstraint:
    """Parse a folder constraint document.

    A document without a rules block yields a constraint with no rules.

    Raises:
        MalformedRecordError: If the document has no frontmatter block.
    """
    split = split_frontmatter_block(text)
    if split is None:
        raise MalformedRecordError(f"Folder constraint document for '{kb_name}' has no frontmatter block.")

    block, body = split
    metadata = _parse_meta_block(block)
    rules_block = _RULES_BLOCK.search(body)
    rules = parse_rules(rules_block.group(1)) if rules_block else ConstraintRules()

    return FolderConstraint(
        kb_name=kb_name,
        subfolder=metadata.get("subfolder", ""),
        rules=rules,
    )
