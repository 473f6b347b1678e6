"""Note management MCP tools scoped to a knowledge base.

This module provides MCP tool wrappers for:
- Listing notes
- Creating, reading, updating and appending to notes
- Moving and deleting notes

Writes are validated against the applicable folder constraint first; a note
that breaks it is rejected and nothing is written. All tools delegate to core
operations in obsidian_kb.core.note_operations.
"""
from __future__ import annotations

from typing import Any

from mcp.server.fastmcp import Context

from obsidian_kb.server import mcp
from obsidian_kb.session import resolve_vault
from obsidian_kb.errors import KnowledgeBaseError
from obsidian_kb.core.kb_operations import open_registry
from obsidian_kb.models import (
    ListNotesInput,
    CreateNoteInput,
    ReadNoteInput,
    UpdateNoteInput,
    AppendNoteInput,
    MoveNoteInput,
    DeleteNoteInput,
)
from obsidian_kb.core.note_operations import (
    list_notes as list_notes_op,
    create_note as create_note_op,
    read_note as read_note_op,
    update_note as update_note_op,
    append_note as append_note_op,
    move_note as move_note_op,
    delete_note as delete_note_op,
)


# ==============================================================================
# READ OPERATIONS
# ==============================================================================

@mcp.tool()
async def list_notes(
    input: ListNotesInput,
    ctx: Context | None = None,
) -> dict[str, Any]:
    """List markdown notes in a knowledge base.

    Args:
        input (ListNotesInput): Validated input containing:
            - knowledge_base_name (str): Knowledge base to list
            - subfolder (str, optional): Restrict to a folder inside it
            - vault (str, optional): Vault name (omit to use active vault)

    Returns:
        {"knowledge_base": {"name", "subfolder"}, "notes": [{"path": str}]}
    """
    metadata = resolve_vault(input.vault, ctx)
    try:
        return list_notes_op(open_registry(metadata), input.knowledge_base_name, input.subfolder)
    except KnowledgeBaseError as exc:
        return exc.as_payload()


# Long notes are paged; follow ``next_offset`` while ``has_more`` is true.
@mcp.tool()
async def read_note(
    input: ReadNoteInput,
    ctx: Context | None = None,
) -> dict[str, Any]:
    """Read a note from a knowledge base.

    Args:
        input (ReadNoteInput): Validated input containing:
            - knowledge_base_name (str): Owning knowledge base
            - note_path (str): Path relative to, or rooted at, the KB subfolder
            - offset (int): Character offset (default 0)
            - limit (int, optional): Characters to return (default 10000)

    Returns:
        {
            "knowledge_base": {...},
            "note": {"path", "content", "offset", "next_offset",
                     "has_more", "remaining_chars"}
        }

    Error Handling:
        - note_not_found: No note at the resolved path
        - invalid_note_path: Path escapes the knowledge base
    """
    metadata = resolve_vault(input.vault, ctx)
    try:
        return read_note_op(
            open_registry(metadata),
            input.knowledge_base_name,
            input.note_path,
            offset=input.offset,
            limit=input.limit,
        )
    except KnowledgeBaseError as exc:
        return exc.as_payload()


# ==============================================================================
# WRITE OPERATIONS
# ==============================================================================

@mcp.tool()
async def create_note(
    input: CreateNoteInput,
    ctx: Context | None = None,
) -> dict[str, Any]:
    """Create a note inside a knowledge base (fails if it exists).

    Parent folders are created automatically. The content is validated against
    the folder constraint that covers the note before anything is written.

    Returns:
        {
            "knowledge_base": {...},
            "note": {"path", "content"},
            "machine_validation": {"passed": bool, "issues": [...]},
            "validation_instruction_for_llm": str
        }

    Error Handling:
        - folder_constraint_violation: Lists every failed check; nothing written
        - note_already_exists: A note exists at the resolved path
    """
    metadata = resolve_vault(input.vault, ctx)
    try:
        return create_note_op(open_registry(metadata), input.knowledge_base_name, input.note_path, input.note_content)
    except KnowledgeBaseError as exc:
        return exc.as_payload()


@mcp.tool()
async def update_note(
    input: UpdateNoteInput,
    ctx: Context | None = None,
) -> dict[str, Any]:
    """Replace the full content of an existing note.

    Returns:
        {"knowledge_base", "original_note", "updated_note",
         "machine_validation", "validation_instruction_for_llm"}
    """
    metadata = resolve_vault(input.vault, ctx)
    try:
        return update_note_op(open_registry(metadata), input.knowledge_base_name, input.note_path, input.note_content)
    except KnowledgeBaseError as exc:
        return exc.as_payload()


@mcp.tool()
async def append_note(
    input: AppendNoteInput,
    ctx: Context | None = None,
) -> dict[str, Any]:
    """Append content to an existing note.

    A newline is inserted first when the note does not already end with one.
    The combined note is what gets validated.
    """
    metadata = resolve_vault(input.vault, ctx)
    try:
        return append_note_op(open_registry(metadata), input.knowledge_base_name, input.note_path, input.note_content)
    except KnowledgeBaseError as exc:
        return exc.as_payload()


@mcp.tool()
async def move_note(
    input: MoveNoteInput,
    ctx: Context | None = None,
) -> dict[str, Any]:
    """Move or rename a note inside its knowledge base.

    The note is validated against the constraint of its destination folder.

    Returns:
        {"knowledge_base", "origin_path", "new_path",
         "machine_validation", "validation_instruction_for_llm"}
    """
    metadata = resolve_vault(input.vault, ctx)
    try:
        return move_note_op(
            open_registry(metadata),
            input.knowledge_base_name,
            input.origin_note_path,
            input.new_note_path,
        )
    except KnowledgeBaseError as exc:
        return exc.as_payload()


@mcp.tool()
async def delete_note(
    input: DeleteNoteInput,
    ctx: Context | None = None,
) -> dict[str, Any]:
    """Delete a note from a knowledge base. Cannot be undone."""
    metadata = resolve_vault(input.vault, ctx)
    try:
        return delete_note_op(open_registry(metadata), input.knowledge_base_name, input.note_path)
    except KnowledgeBaseError as exc:
        return exc.as_payload()
