"""Base Pydantic models for MCP tool input validation.

This module defines base models and shared validators used by the knowledge base
and note input models.

Base Models:
- VaultScopedInput: Optional vault selection shared by every tool
- BaseNoteInput: Adds the knowledge base name and note path
"""

from __future__ import annotations

import re
from typing import Optional
from pydantic import BaseModel, Field, field_validator

from obsidian_kb.constants import MAX_KB_NAME_LENGTH

KB_NAME_PATTERN = re.compile(r"^[A-Za-z0-9_-]+$")


def validate_kb_name(v: str) -> str:
    """Validate a knowledge base name.

    Names become directory names inside the vault, so only letters, digits,
    underscores and hyphens are accepted.

    Raises:
        ValueError: If the name is empty, too long or uses other characters.
    """
    cleaned = v.strip()
    if not cleaned:
        raise ValueError("Knowledge base name cannot be empty.")

    if len(cleaned) > MAX_KB_NAME_LENGTH:
        raise ValueError(f"Knowledge base name cannot exceed {MAX_KB_NAME_LENGTH} characters.")

    if not KB_NAME_PATTERN.match(cleaned):
        raise ValueError(
            "Knowledge base name can only contain letters, numbers, underscores, and hyphens. "
            f"Invalid name: '{cleaned}'"
        )

    return cleaned


def validate_relative_path(v: str, label: str = "Path") -> str:
    """Validate a vault-relative folder or note path.

    Enforces:
    - Non-empty value
    - Forward slashes only
    - No '.' or '..' segments

    Leading and trailing slashes are tolerated; they are normalized later.

    Raises:
        ValueError: If the path is empty or unsafe
    """
    cleaned = v.strip()

    if not cleaned.strip("/"):
        raise ValueError(f"{label} cannot be empty.")

    if "\\" in cleaned:
        raise ValueError(f"{label} must use forward slashes. Invalid value: '{cleaned}'")

    parts = [part for part in cleaned.split("/") if part]
    if any(part in {".", ".."} for part in parts):
        raise ValueError(
            f"{label} cannot contain '.' or '..' path segments. "
            "These are not allowed for security reasons. "
            f"Invalid value: '{cleaned}'"
        )

    return cleaned


class VaultScopedInput(BaseModel):
    """Base model carrying the optional vault selection."""

    vault: Optional[str] = Field(
        None,
        description=(
            "Vault name (omit to use active vault). "
            "Use list_vaults() to discover available vaults."
        )
    )

    @field_validator('vault')
    @classmethod
    def validate_vault(cls, v: Optional[str]) -> Optional[str]:
        """Validate vault name format.

        Raises:
            ValueError: If vault name is an empty string
        """
        if v is not None and not v.strip():
            raise ValueError(
                "Vault name cannot be empty. "
                "Either omit the vault parameter to use the active vault, "
                "or provide a valid vault name from list_vaults()."
            )

        return v.strip() if v else None


class BaseNoteInput(VaultScopedInput):
    """Base model for note operations inside a knowledge base."""

    knowledge_base_name: str = Field(
        min_length=1,
        description="Name of the knowledge base that owns the note.",
        examples=["engineering-docs", "journal"]
    )

    note_path: str = Field(
        min_length=1,
        description=(
            "Note path, either relative to the knowledge base subfolder "
            "('api/auth.md') or rooted at it ('docs/api/auth.md')."
        ),
        examples=["api/auth.md", "docs/2025-01-01-standup.md"]
    )

    @field_validator('knowledge_base_name')
    @classmethod
    def validate_knowledge_base_name(cls, v: str) -> str:
        return validate_kb_name(v)

    @field_validator('note_path')
    @classmethod
    def validate_note_path(cls, v: str) -> str:
        return validate_relative_path(v, "Note path")
