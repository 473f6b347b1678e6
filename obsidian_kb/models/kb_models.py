"""Pydantic input models for knowledge base management operations.

This module defines input models for:
- Listing knowledge bases
- Adding a knowledge base
- Updating a knowledge base
- Adding a folder constraint to a knowledge base
"""

from __future__ import annotations

from typing import Any, Optional
from pydantic import Field, field_validator

from .base import VaultScopedInput, validate_kb_name, validate_relative_path


class ListKnowledgeBasesInput(VaultScopedInput):
    """Input model for list_knowledge_bases tool.

    Examples:
        >>> ListKnowledgeBasesInput()
        >>> ListKnowledgeBasesInput(vault="work")
    """

    class Config:
        """Pydantic model configuration."""
        json_schema_extra = {
            "examples": [{}, {"vault": "work"}]
        }


class AddKnowledgeBaseInput(VaultScopedInput):
    """Input model for add_knowledge_base tool.

    Creates a knowledge base owning ``subfolder``. The subfolder may not overlap
    the subfolder of any existing knowledge base.

    Examples:
        >>> AddKnowledgeBaseInput(name="eng", description="Engineering", subfolder="docs",
        ...                       organization_rules="One note per topic.")
    """

    name: str = Field(
        min_length=1,
        description="Unique knowledge base name (letters, digits, '_' and '-').",
        examples=["engineering-docs"]
    )

    description: str = Field(
        "",
        description="Human-readable description of the knowledge base."
    )

    subfolder: str = Field(
        min_length=1,
        description="Vault folder owned by the knowledge base, e.g. 'docs' or 'work/journal'.",
        examples=["docs", "work/journal"]
    )

    organization_rules: str = Field(
        "",
        description="Natural-language rules describing how notes should be organized."
    )

    @field_validator('name')
    @classmethod
    def validate_name(cls, v: str) -> str:
        return validate_kb_name(v)

    @field_validator('subfolder')
    @classmethod
    def validate_subfolder(cls, v: str) -> str:
        return validate_relative_path(v, "Subfolder")

    class Config:
        """Pydantic model configuration."""
        json_schema_extra = {
            "examples": [
                {
                    "name": "engineering-docs",
                    "description": "Design docs and ADRs",
                    "subfolder": "docs",
                    "organization_rules": "Every note starts with a Summary section.",
                }
            ]
        }


class UpdateKnowledgeBaseInput(VaultScopedInput):
    """Input model for update_knowledge_base tool.

    Only the fields that are provided are changed.

    Examples:
        >>> UpdateKnowledgeBaseInput(name="eng", description="Engineering notes")
    """

    name: str = Field(
        min_length=1,
        description="Name of the knowledge base to update."
    )

    description: Optional[str] = Field(None, description="New description.")

    subfolder: Optional[str] = Field(
        None,
        description="New subfolder. Must not overlap another knowledge base."
    )

    organization_rules: Optional[str] = Field(None, description="New organization rules.")

    @field_validator('name')
    @classmethod
    def validate_name(cls, v: str) -> str:
        return validate_kb_name(v)

    @field_validator('subfolder')
    @classmethod
    def validate_subfolder(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return None
        return validate_relative_path(v, "Subfolder")


class AddFolderConstraintInput(VaultScopedInput):
    """Input model for add_knowledge_base_folder_constraint tool.

    ``rules`` is accepted as a free-form object and checked structurally by the
    core operation so that every problem is reported at once.

    Examples:
        >>> AddFolderConstraintInput(
        ...     kb_name="eng",
        ...     subfolder="docs/adr",
        ...     rules={"filename": {"pattern": "^ADR-\\\\d+"}},
        ... )
    """

    kb_name: str = Field(
        min_length=1,
        description="Knowledge base that owns the constrained folder."
    )

    subfolder: str = Field(
        min_length=1,
        description="Vault folder to constrain; must lie inside the knowledge base subfolder.",
        examples=["docs/adr"]
    )

    rules: Any = Field(
        description=(
            "Constraint rules object with optional 'frontmatter' "
            "({required_fields: [{name, type, pattern?, allowed_values?}]}), "
            "'filename' ({pattern}) and 'content' "
            "({min_length?, max_length?, required_sections?}) groups."
        ),
        examples=[
            {
                "frontmatter": {
                    "required_fields": [
                        {"name": "status", "type": "string", "allowed_values": ["draft", "published"]}
                    ]
                },
                "filename": {"pattern": "^\\d{4}-\\d{2}-\\d{2}-.+\\.md$"},
            }
        ]
    )

    @field_validator('kb_name')
    @classmethod
    def check_kb_name(cls, v: str) -> str:
        return validate_kb_name(v)

    @field_validator('subfolder')
    @classmethod
    def validate_subfolder(cls, v: str) -> str:
        return validate_relative_path(v, "Subfolder")
