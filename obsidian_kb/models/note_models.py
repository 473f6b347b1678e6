"""Pydantic input models for knowledge-base scoped note operations.

This module defines input models for:
- Listing notes
- Creating, reading, updating and appending to notes
- Moving and deleting notes
"""

from __future__ import annotations

from typing import Optional
from pydantic import Field, field_validator

from .base import BaseNoteInput, VaultScopedInput, validate_kb_name, validate_relative_path


class ListNotesInput(VaultScopedInput):
    """Input model for list_notes tool.

    Examples:
        >>> ListNotesInput(knowledge_base_name="eng")
        >>> ListNotesInput(knowledge_base_name="eng", subfolder="adr")
    """

    knowledge_base_name: str = Field(
        min_length=1,
        description="Knowledge base whose notes should be listed."
    )

    subfolder: Optional[str] = Field(
        None,
        description="Optional folder inside the knowledge base to restrict the listing to."
    )

    @field_validator('knowledge_base_name')
    @classmethod
    def validate_knowledge_base_name(cls, v: str) -> str:
        return validate_kb_name(v)

    @field_validator('subfolder')
    @classmethod
    def validate_subfolder(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return None
        return validate_relative_path(v, "Subfolder")


class CreateNoteInput(BaseNoteInput):
    """Input model for create_note tool.

    Fails if the note already exists or breaks the applicable folder constraint.

    Examples:
        >>> CreateNoteInput(knowledge_base_name="eng", note_path="adr/0001.md",
        ...                 note_content="---\\nstatus: draft\\n---\\n# ADR 1")
    """

    note_content: str = Field(
        description="Full markdown content for the note, frontmatter included."
    )


class ReadNoteInput(BaseNoteInput):
    """Input model for read_note tool.

    Long notes can be paged with ``offset``/``limit``.
    """

    offset: int = Field(0, ge=0, description="Character offset to start reading from.")

    limit: Optional[int] = Field(
        None,
        ge=1,
        description="Maximum number of characters to return (default 10000)."
    )


class UpdateNoteInput(BaseNoteInput):
    """Input model for update_note tool. Replaces the whole note content."""

    note_content: str = Field(
        description="New complete markdown content for the note."
    )


class AppendNoteInput(BaseNoteInput):
    """Input model for append_note tool."""

    note_content: str = Field(
        min_length=1,
        description=(
            "Markdown content to append. A newline separator is added "
            "automatically when the note does not end with one."
        )
    )


class MoveNoteInput(VaultScopedInput):
    """Input model for move_note tool.

    Examples:
        >>> MoveNoteInput(knowledge_base_name="eng", origin_note_path="inbox/a.md",
        ...               new_note_path="adr/a.md")
    """

    knowledge_base_name: str = Field(
        min_length=1,
        description="Knowledge base that owns both paths."
    )

    origin_note_path: str = Field(min_length=1, description="Current note path.")

    new_note_path: str = Field(min_length=1, description="Destination note path.")

    @field_validator('knowledge_base_name')
    @classmethod
    def validate_knowledge_base_name(cls, v: str) -> str:
        return validate_kb_name(v)

    @field_validator('origin_note_path', 'new_note_path')
    @classmethod
    def validate_paths(cls, v: str) -> str:
        return validate_relative_path(v, "Note path")


class DeleteNoteInput(BaseNoteInput):
    """Input model for delete_note tool."""
