"""Selection of the folder constraint that applies to a note path."""

from __future__ import annotations

from typing import Iterable, Optional

from obsidian_kb.data_models import FolderConstraint


def constraint_covers(note_path: str, subfolder: str) -> bool:
    """Return True when ``note_path`` lies inside ``subfolder``."""
    folder = subfolder.rstrip("/")
    note_dir = note_path.rpartition("/")[0]
    return note_path.startswith(f"{folder}/") or note_dir == folder


def find_applicable_constraint(
    note_path: str,
    constraints: Iterable[FolderConstraint],
) -> Optional[FolderConstraint]:
    """Pick the most specific constraint for ``note_path``.

    The candidate with the longest subfolder wins. On equal lengths the first
    candidate in iteration order is kept.

    Returns:
        The applicable constraint, or ``None`` when the note is unconstrained.
    """
    best: Optional[FolderConstraint] = None
    best_length = -1

    for constraint in constraints:
        if not constraint_covers(note_path, constraint.subfolder):
            continue
        length = len(constraint.subfolder.rstrip("/"))
        if length > best_length:
            best = constraint
            best_length = length

    return best
