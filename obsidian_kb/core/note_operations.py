"""Core business logic for knowledge-base scoped note operations."""

from __future__ import annotations

import logging
from typing import Any, Optional

from obsidian_kb.constants import DEFAULT_READ_LIMIT
from obsidian_kb.core.constraint_resolver import find_applicable_constraint
from obsidian_kb.core.constraint_validation import validate_note
from obsidian_kb.core.kb_registry import KnowledgeBaseRegistry
from obsidian_kb.core.path_scoping import note_exists, resolve_note_path
from obsidian_kb.data_models import KnowledgeBase, ValidationResult
from obsidian_kb.errors import FolderConstraintViolation, InvalidNotePath, NoteAlreadyExists, NoteNotFound

logger = logging.getLogger(__name__)

VALIDATION_INSTRUCTIONS = {
    "create_note": (
        "Please check your note MUST following rules:\n\n{kb_rules}\n\n"
        "If any issues are found, call update_note with corrected content."
    ),
    "update_note": (
        "Please check your note MUST following rules:\n\n{kb_rules}\n\n"
        "If any issues are found, call update_note again with corrected content."
    ),
    "append_note": (
        "Please check your note MUST following rules:\n\n{kb_rules}\n\n"
        "If any issues are found, call update_note with corrected content."
    ),
    "move_note": (
        "Please check your note MUST following rules:\n\n{kb_rules}\n\n"
        "If any issues are found, call update_note with corrected content."
    ),
}


# ==============================================================================
# HELPER FUNCTIONS
# ==============================================================================


def _combine_with_newline(left: str, right: str) -> str:
    """Append ``right`` to ``left``, adding a newline when ``left`` lacks one."""
    if left.endswith("\n"):
        return left + right
    return f"{left}\n{right}"


def _parent_folder(path: str) -> str:
    return path.rpartition("/")[0]


def _instruction(operation: str, kb: KnowledgeBase) -> str:
    return VALIDATION_INSTRUCTIONS[operation].format(kb_rules=kb.organization_rules)


def _validate_against_constraints(
    registry: KnowledgeBaseRegistry,
    kb: KnowledgeBase,
    path: str,
    content: str,
    message: str = "Note does not satisfy folder constraint requirements",
) -> ValidationResult:
    """Validate ``content`` at ``path``; raise before anything is written.

    Raises:
        FolderConstraintViolation: If the applicable constraint rejects the note.
    """
    constraint = find_applicable_constraint(path, registry.get_folder_constraints(kb.name))
    if constraint is None:
        return ValidationResult()

    validation = validate_note(path, content, constraint)
    if not validation.passed:
        logger.info(
            "Note '%s' rejected by constraint '%s' of knowledge base '%s' (%d issue(s))",
            path,
            constraint.subfolder,
            kb.name,
            len(validation.issues),
        )
        raise FolderConstraintViolation(
            message,
            kb_name=constraint.kb_name,
            subfolder=constraint.subfolder,
            issues=[issue.as_payload() for issue in validation.issues],
        )
    return validation


def _require_note(registry: KnowledgeBaseRegistry, path: str) -> None:
    if not note_exists(registry.storage, path):
        raise NoteNotFound(f"Note not found at '{path}'")


def _reject_existing(registry: KnowledgeBaseRegistry, path: str) -> None:
    if note_exists(registry.storage, path) or registry.storage.is_directory(path):
        raise NoteAlreadyExists(f"Note already exists at '{path}'")


def _reject_file_ancestors(registry: KnowledgeBaseRegistry, path: str) -> None:
    """Raise when a folder on the way to ``path`` is an existing file."""
    segments = path.split("/")[:-1]
    for depth in range(1, len(segments) + 1):
        ancestor = "/".join(segments[:depth])
        if registry.storage.is_file(ancestor):
            raise InvalidNotePath(f"Path '{path}' goes through file '{ancestor}'")


# ==============================================================================
# NOTE OPERATIONS
# ==============================================================================


def list_notes(
    registry: KnowledgeBaseRegistry,
    kb_name: str,
    subfolder: Optional[str] = None,
) -> dict[str, Any]:
    """List every markdown note under a knowledge base (or one of its folders)."""
    kb = registry.require_knowledge_base(kb_name)
    search_path = resolve_note_path(kb, subfolder) if subfolder else kb.subfolder

    notes: list[dict[str, str]] = []
    pending = [search_path]
    while pending:
        folder = pending.pop()
        listing = registry.storage.list_directory(folder)
        notes.extend({"path": f"{folder}/{name}"} for name in listing.files if name.endswith(".md"))
        pending.extend(f"{folder}/{name}" for name in listing.subdirectories)

    notes.sort(key=lambda note: note["path"])
    return {
        "knowledge_base": {"name": kb.name, "subfolder": kb.subfolder},
        "notes": notes,
    }


def create_note(
    registry: KnowledgeBaseRegistry,
    kb_name: str,
    note_path: str,
    content: str,
) -> dict[str, Any]:
    """Create a note after validating it against the applicable folder constraint."""
    kb = registry.require_knowledge_base(kb_name)
    path = resolve_note_path(kb, note_path)
    _reject_existing(registry, path)
    _reject_file_ancestors(registry, path)

    validation = _validate_against_constraints(registry, kb, path, content)

    registry.storage.ensure_directory(_parent_folder(path))
    registry.storage.create_file(path, content)

    logger.info("Created note '%s' in knowledge base '%s'", path, kb.name)
    return {
        "knowledge_base": kb.as_payload(),
        "note": {"path": path, "content": content},
        "machine_validation": validation.as_payload(),
        "validation_instruction_for_llm": _instruction("create_note", kb),
    }


def read_note(
    registry: KnowledgeBaseRegistry,
    kb_name: str,
    note_path: str,
    offset: int = 0,
    limit: Optional[int] = None,
) -> dict[str, Any]:
    """Read a window of a note's text.

    Args:
        offset: Character offset to start from.
        limit: Maximum characters to return (defaults to ``DEFAULT_READ_LIMIT``).

    Returns:
        The chunk with ``next_offset``, ``has_more`` and ``remaining_chars`` so a
        caller can page through long notes.
    """
    kb = registry.require_knowledge_base(kb_name)
    path = resolve_note_path(kb, note_path)
    _require_note(registry, path)

    full_content = registry.storage.read_file(path)
    limit = limit or DEFAULT_READ_LIMIT
    end = offset + limit
    chunk = full_content[offset:end]

    return {
        "knowledge_base": kb.as_payload(),
        "note": {
            "path": path,
            "content": chunk,
            "offset": offset,
            "next_offset": offset + len(chunk),
            "has_more": end < len(full_content),
            "remaining_chars": max(0, len(full_content) - end),
        },
    }


def update_note(
    registry: KnowledgeBaseRegistry,
    kb_name: str,
    note_path: str,
    content: str,
) -> dict[str, Any]:
    """Replace a note's content after validating the new content."""
    kb = registry.require_knowledge_base(kb_name)
    path = resolve_note_path(kb, note_path)
    _require_note(registry, path)

    original = registry.storage.read_file(path)
    validation = _validate_against_constraints(registry, kb, path, content)
    registry.storage.modify_file(path, content)

    logger.info("Updated note '%s' in knowledge base '%s'", path, kb.name)
    return {
        "knowledge_base": kb.as_payload(),
        "original_note": {"path": path, "content": original},
        "updated_note": {"path": path, "content": content},
        "machine_validation": validation.as_payload(),
        "validation_instruction_for_llm": _instruction("update_note", kb),
    }


def append_note(
    registry: KnowledgeBaseRegistry,
    kb_name: str,
    note_path: str,
    content: str,
) -> dict[str, Any]:
    """Append to a note; the combined text is what gets validated."""
    kb = registry.require_knowledge_base(kb_name)
    path = resolve_note_path(kb, note_path)
    _require_note(registry, path)

    original = registry.storage.read_file(path)
    combined = _combine_with_newline(original, content)
    validation = _validate_against_constraints(registry, kb, path, combined)
    registry.storage.modify_file(path, combined)

    logger.info("Appended %d characters to note '%s' in knowledge base '%s'", len(content), path, kb.name)
    return {
        "knowledge_base": kb.as_payload(),
        "original_note": {"path": path, "content": original},
        "updated_note": {"path": path, "content": combined},
        "machine_validation": validation.as_payload(),
        "validation_instruction_for_llm": _instruction("append_note", kb),
    }


def move_note(
    registry: KnowledgeBaseRegistry,
    kb_name: str,
    origin_note_path: str,
    new_note_path: str,
) -> dict[str, Any]:
    """Move a note within its knowledge base.

    The note is validated against the constraint of its destination.
    """
    kb = registry.require_knowledge_base(kb_name)
    origin = resolve_note_path(kb, origin_note_path)
    destination = resolve_note_path(kb, new_note_path)

    _require_note(registry, origin)
    _reject_existing(registry, destination)
    _reject_file_ancestors(registry, destination)

    content = registry.storage.read_file(origin)
    validation = _validate_against_constraints(
        registry,
        kb,
        destination,
        content,
        message="Note does not satisfy folder constraint requirements for new location",
    )

    registry.storage.ensure_directory(_parent_folder(destination))
    registry.storage.rename_file(origin, destination)

    logger.info("Moved note '%s' to '%s' in knowledge base '%s'", origin, destination, kb.name)
    return {
        "knowledge_base": kb.as_payload(),
        "origin_path": origin,
        "new_path": destination,
        "machine_validation": validation.as_payload(),
        "validation_instruction_for_llm": _instruction("move_note", kb),
    }


def delete_note(
    registry: KnowledgeBaseRegistry,
    kb_name: str,
    note_path: str,
) -> dict[str, Any]:
    kb = registry.require_knowledge_base(kb_name)
    path = resolve_note_path(kb, note_path)
    _require_note(registry, path)

    registry.storage.delete_file(path)

    logger.info("Deleted note '%s' from knowledge base '%s'", path, kb.name)
    return {
        "knowledge_base": {"name": kb.name, "subfolder": kb.subfolder},
        "deleted_path": path,
    }
