"""Data models for vaults, knowledge bases, folder constraints and validation results."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional, Union

Scalar = Union[str, int, float, bool, None]

FIELD_TYPES = ("string", "number", "boolean", "date", "array")


# ==============================================================================
# VAULTS
# ==============================================================================


@dataclass(frozen=True)
class VaultMetadata:
    """Normalized metadata describing an Obsidian vault."""

    name: str
    path: Path
    description: str
    exists: bool

    def as_payload(self) -> dict[str, Any]:
        """Return a serializable payload representation."""
        return {
            "name": self.name,
            "path": str(self.path),
            "description": self.description,
            "exists": self.path.is_dir(),
        }


class VaultConfiguration:
    """Holds vault metadata and default resolution helpers."""

    def __init__(self, default_vault: str, vaults: dict[str, VaultMetadata]) -> None:
        self.default_vault = default_vault
        self.vaults = vaults

    def get(self, name: str) -> VaultMetadata:
        """Get vault metadata by name.

        Raises:
            ValueError: If the vault name is not found in configuration.
        """
        try:
            return self.vaults[name]
        except KeyError as exc:
            raise ValueError(f"Unknown vault '{name}'") from exc


# ==============================================================================
# KNOWLEDGE BASES
# ==============================================================================


@dataclass
class KnowledgeBase:
    """A named collection of notes owning one subtree of the vault."""

    name: str
    create_time: str
    description: str
    subfolder: str
    organization_rules: str

    def as_payload(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "create_time": self.create_time,
            "description": self.description,
            "subfolder": self.subfolder,
            "organization_rules": self.organization_rules,
        }


@dataclass
class KnowledgeBaseSummary:
    """Row of the knowledge base listing cache."""

    name: str
    description: str
    subfolder: str
    create_time: str
    organization_rules_preview: str = ""

    def as_payload(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description,
            "subfolder": self.subfolder,
            "create_time": self.create_time,
            "organization_rules_preview": self.organization_rules_preview,
        }

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> "KnowledgeBaseSummary":
        return cls(
            name=str(payload["name"]),
            description=str(payload.get("description", "")),
            subfolder=str(payload.get("subfolder", "")),
            create_time=str(payload.get("create_time", "")),
            organization_rules_preview=str(payload.get("organization_rules_preview", "")),
        )


# ==============================================================================
# FOLDER CONSTRAINTS
# ==============================================================================


@dataclass
class RequiredField:
    """A frontmatter field that notes under a constrained folder must carry."""

    name: str
    type: str = "string"
    pattern: Optional[str] = None
    allowed_values: Optional[list[Scalar]] = None

    def as_payload(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"name": self.name, "type": self.type}
        if self.pattern is not None:
            payload["pattern"] = self.pattern
        if self.allowed_values is not None:
            payload["allowed_values"] = list(self.allowed_values)
        return payload


@dataclass
class FrontmatterRules:
    required_fields: Optional[list[RequiredField]] = None


@dataclass
class FilenameRules:
    pattern: Optional[str] = None


@dataclass
class ContentRules:
    min_length: Optional[int] = None
    max_length: Optional[int] = None
    required_sections: Optional[list[str]] = None


@dataclass
class ConstraintRules:
    """Three independent, optional rule groups checked against a note."""

    frontmatter: Optional[FrontmatterRules] = None
    filename: Optional[FilenameRules] = None
    content: Optional[ContentRules] = None

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> "ConstraintRules":
        """Build rules from a structurally validated JSON object.

        Callers are expected to run ``validate_constraint_rules_schema`` first;
        this only maps known keys onto the typed records.
        """
        rules = cls()

        frontmatter = payload.get("frontmatter")
        if isinstance(frontmatter, dict):
            fields = frontmatter.get("required_fields")
            rules.frontmatter = FrontmatterRules(
                required_fields=None
                if fields is None
                else [
                    RequiredField(
                        name=item["name"],
                        type=item.get("type", "string"),
                        pattern=item.get("pattern"),
                        allowed_values=None
                        if item.get("allowed_values") is None
                        else list(item["allowed_values"]),
                    )
                    for item in fields
                ]
            )

        filename = payload.get("filename")
        if isinstance(filename, dict):
            rules.filename = FilenameRules(pattern=filename.get("pattern"))

        content = payload.get("content")
        if isinstance(content, dict):
            sections = content.get("required_sections")
            rules.content = ContentRules(
                min_length=content.get("min_length"),
                max_length=content.get("max_length"),
                required_sections=None if sections is None else list(sections),
            )

        return rules

    def as_payload(self) -> dict[str, Any]:
        payload: dict[str, Any] = {}
        if self.frontmatter is not None:
            frontmatter: dict[str, Any] = {}
            if self.frontmatter.required_fields is not None:
                frontmatter["required_fields"] = [
                    item.as_payload() for item in self.frontmatter.required_fields
                ]
            payload["frontmatter"] = frontmatter
        if self.filename is not None:
            payload["filename"] = (
                {} if self.filename.pattern is None else {"pattern": self.filename.pattern}
            )
        if self.content is not None:
            content: dict[str, Any] = {}
            if self.content.min_length is not None:
                content["min_length"] = self.content.min_length
            if self.content.max_length is not None:
                content["max_length"] = self.content.max_length
            if self.content.required_sections is not None:
                content["required_sections"] = list(self.content.required_sections)
            payload["content"] = content
        return payload


@dataclass
class FolderConstraint:
    """Rule set bound to one subfolder of a knowledge base."""

    kb_name: str
    subfolder: str
    rules: ConstraintRules = field(default_factory=ConstraintRules)

    def as_payload(self) -> dict[str, Any]:
        return {
            "kb_name": self.kb_name,
            "subfolder": self.subfolder,
            "rules": self.rules.as_payload(),
        }


# ==============================================================================
# VALIDATION
# ==============================================================================


@dataclass
class ValidationIssue:
    """One failed rule. ``field`` is a dotted path such as ``frontmatter.title``."""

    field: str
    error: str
    expected: Any = None
    actual: Any = None
    pattern: Optional[str] = None
    message: Optional[str] = None

    def as_payload(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"field": self.field, "error": self.error}
        if self.expected is not None:
            payload["expected"] = self.expected
        if self.actual is not None:
            payload["actual"] = self.actual
        if self.pattern is not None:
            payload["pattern"] = self.pattern
        if self.message is not None:
            payload["message"] = self.message
        return payload


@dataclass
class ValidationResult:
    issues: list[ValidationIssue] = field(default_factory=list)

    @property
    def passed(self) -> bool:
        return not self.issues

    def as_payload(self) -> dict[str, Any]:
        return {
            "passed": self.passed,
            "issues": [issue.as_payload() for issue in self.issues],
        }


@dataclass
class ParsedNote:
    """A note split into its frontmatter mapping and markdown body."""

    frontmatter: dict[str, Any]
    body: str
    raw: str
