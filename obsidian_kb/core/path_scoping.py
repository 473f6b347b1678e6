"""Path normalization and confinement of note paths to a knowledge base subtree."""

from __future__ import annotations

import re

from obsidian_kb.core.storage import VaultStorage
from obsidian_kb.data_models import KnowledgeBase
from obsidian_kb.errors import InvalidNotePath

_REPEATED_SLASHES = re.compile(r"/{2,}")


def normalize_path(path: str) -> str:
    """Strip leading/trailing slashes and collapse repeated ones.

    Examples:
        >>> normalize_path("/Projects//Alpha/")
        'Projects/Alpha'
    """
    return _REPEATED_SLASHES.sub("/", path.strip("/"))


def has_traversal(path: str) -> bool:
    return ".." in path.split("/")


def is_within(path: str, folder: str) -> bool:
    """Slash-bounded containment: ``docs/api`` is within ``docs``, ``documents`` is not."""
    return path == folder or path.startswith(f"{folder}/")


def subfolders_overlap(first: str, second: str) -> bool:
    """Return True when one subfolder equals or contains the other."""
    first = normalize_path(first)
    second = normalize_path(second)

    if first == second:
        return True
    if not first or not second:
        return False
    return is_within(first, second) or is_within(second, first)


def resolve_note_path(kb: KnowledgeBase, note_path: str) -> str:
    """Resolve a caller-supplied note path to a vault path inside ``kb``.

    Paths already rooted at the knowledge base subfolder are kept; anything else
    is taken as relative to it. Resolving an already resolved path is a no-op.

    Raises:
        InvalidNotePath: If the result leaves the knowledge base subtree or
            contains a ``..`` segment.
    """
    resolved = normalize_path(note_path)
    if not is_within(resolved, kb.subfolder):
        resolved = normalize_path(f"{kb.subfolder}/{resolved}")

    if not is_within(resolved, kb.subfolder):
        raise InvalidNotePath(f"Path '{note_path}' is outside KB scope '{kb.subfolder}'")

    if has_traversal(resolved):
        raise InvalidNotePath(f"Path traversal not allowed: '{note_path}'")

    return resolved


def note_exists(storage: VaultStorage, path: str) -> bool:
    return storage.is_file(path)
