"""Knowledge base management MCP tools.

This module provides MCP tool wrappers for:
- Listing knowledge bases
- Adding and updating knowledge bases
- Attaching machine-checkable folder constraints

All tools delegate to core operations in obsidian_kb.core.kb_operations.
Domain failures are returned as ``{"error": {"code", "message", ...}}`` payloads.
"""
from __future__ import annotations

import logging
from typing import Any

from mcp.server.fastmcp import Context

from obsidian_kb.server import mcp
from obsidian_kb.session import resolve_vault
from obsidian_kb.errors import KnowledgeBaseError
from obsidian_kb.models import (
    ListKnowledgeBasesInput,
    AddKnowledgeBaseInput,
    UpdateKnowledgeBaseInput,
    AddFolderConstraintInput,
)
from obsidian_kb.core.kb_operations import (
    open_registry,
    list_knowledge_bases as list_knowledge_bases_op,
    add_knowledge_base as add_knowledge_base_op,
    update_knowledge_base as update_knowledge_base_op,
    add_folder_constraint,
)

logger = logging.getLogger(__name__)


# ==============================================================================
# READ OPERATIONS
# ==============================================================================

@mcp.tool()
async def list_knowledge_bases(
    input: ListKnowledgeBasesInput,
    ctx: Context | None = None,
) -> dict[str, Any]:
    """List the knowledge bases defined in a vault.

    Served from the vault's metadata cache when it is readable, otherwise by
    scanning the knowledge base records (the cache is then rebuilt).

    Args:
        input (ListKnowledgeBasesInput): Validated input containing:
            - vault (str, optional): Vault name (omit to use active vault)

    Returns:
        {
            "knowledge_bases": [
                {
                    "name": str,
                    "description": str,
                    "subfolder": str,
                    "create_time": str,
                    "organization_rules_preview": str  # first 200 chars
                }
            ]
        }

    Examples:
        - Use when: Deciding which knowledge base a new note belongs to
        - Workflow: list_knowledge_bases() → list_notes() → read_note()
    """
    metadata = resolve_vault(input.vault, ctx)
    try:
        return list_knowledge_bases_op(open_registry(metadata))
    except KnowledgeBaseError as exc:
        return exc.as_payload()


# ==============================================================================
# WRITE OPERATIONS
# ==============================================================================

@mcp.tool()
async def add_knowledge_base(
    input: AddKnowledgeBaseInput,
    ctx: Context | None = None,
) -> dict[str, Any]:
    """Create a knowledge base owning a vault subfolder.

    Args:
        input (AddKnowledgeBaseInput): Validated input containing:
            - name (str): Unique name (letters, digits, '_' and '-')
            - description (str): Human-readable description
            - subfolder (str): Vault folder owned by the knowledge base
            - organization_rules (str): Natural-language organization rules
            - vault (str, optional): Vault name (omit to use active vault)

    Returns:
        {"knowledge_base": {...}, "next_steps": str}

    Error Handling:
        - knowledge_base_already_exists: A knowledge base with this name exists
        - subfolder_overlap: The subfolder contains, or is contained by, another
          knowledge base's subfolder
    """
    metadata = resolve_vault(input.vault, ctx)
    try:
        return add_knowledge_base_op(
            open_registry(metadata),
            input.name,
            input.description,
            input.subfolder,
            input.organization_rules,
        )
    except KnowledgeBaseError as exc:
        return exc.as_payload()


@mcp.tool()
async def update_knowledge_base(
    input: UpdateKnowledgeBaseInput,
    ctx: Context | None = None,
) -> dict[str, Any]:
    """Update the description, subfolder or organization rules of a knowledge base.

    Fields that are omitted keep their current value. Notes are not moved
    when the subfolder changes.

    Returns:
        {"knowledge_base": {...}}

    Error Handling:
        - knowledge_base_not_found: No knowledge base with this name
        - subfolder_overlap: The new subfolder overlaps another knowledge base
    """
    metadata = resolve_vault(input.vault, ctx)
    try:
        return update_knowledge_base_op(
            open_registry(metadata),
            input.name,
            description=input.description,
            subfolder=input.subfolder,
            organization_rules=input.organization_rules,
        )
    except KnowledgeBaseError as exc:
        return exc.as_payload()


@mcp.tool()
async def add_knowledge_base_folder_constraint(
    input: AddFolderConstraintInput,
    ctx: Context | None = None,
) -> dict[str, Any]:
    """Attach machine-checkable rules to a folder inside a knowledge base.

    Notes created, updated, appended or moved under ``subfolder`` must satisfy
    the rules. When several constraints cover a note, the one with the deepest
    subfolder applies. Adding a constraint for a folder that already has one
    replaces it.

    Args:
        input (AddFolderConstraintInput): Validated input containing:
            - kb_name (str): Owning knowledge base
            - subfolder (str): Folder inside the knowledge base subfolder
            - rules (object): {
                  "frontmatter": {"required_fields": [
                      {"name": str, "type": "string|number|boolean|date|array",
                       "pattern": str?, "allowed_values": list?}
                  ]},
                  "filename": {"pattern": str},
                  "content": {"min_length": int?, "max_length": int?,
                              "required_sections": [str]?}
              }

    Returns:
        {"folder_constraint": {"kb_name": str, "subfolder": str, "rules": {...}}}

    Error Handling:
        - schema_validation_failed: ``rules`` is malformed; every issue is listed
        - knowledge_base_not_found: Unknown knowledge base
        - invalid_note_path: ``subfolder`` lies outside the knowledge base
    """
    metadata = resolve_vault(input.vault, ctx)
    try:
        return add_folder_constraint(open_registry(metadata), input.kb_name, input.subfolder, input.rules)
    except KnowledgeBaseError as exc:
        return exc.as_payload()
