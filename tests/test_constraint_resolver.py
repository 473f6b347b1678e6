"""Tests for choosing the folder constraint that applies to a note."""

import pytest

from obsidian_kb.core.constraint_resolver import constraint_covers, find_applicable_constraint
from obsidian_kb.data_models import FolderConstraint


@pytest.fixture
def nested_constraints():
    return [
        FolderConstraint(kb_name="kb", subfolder="docs"),
        FolderConstraint(kb_name="kb", subfolder="docs/api/v2"),
        FolderConstraint(kb_name="kb", subfolder="docs/api"),
    ]


@pytest.mark.parametrize(
    "note_path, expected",
    [
        ("docs/api/v2/x.md", "docs/api/v2"),
        ("docs/api/y.md", "docs/api"),
        ("docs/z.md", "docs"),
        ("docs/api/v2/deeper/w.md", "docs/api/v2"),
    ],
)
def test_longest_subfolder_wins(nested_constraints, note_path, expected):
    assert find_applicable_constraint(note_path, nested_constraints).subfolder == expected


def test_unrelated_path_has_no_constraint(nested_constraints):
    assert find_applicable_constraint("other/z.md", nested_constraints) is None


def test_no_constraints():
    assert find_applicable_constraint("docs/z.md", []) is None


def test_sibling_prefix_does_not_cover():
    assert constraint_covers("documents/a.md", "docs") is False
    assert constraint_covers("docs/a.md", "docs/") is True


def test_equal_lengths_keep_first_candidate():
    first = FolderConstraint(kb_name="kb", subfolder="docs")
    second = FolderConstraint(kb_name="kb", subfolder="docs/")
    assert find_applicable_constraint("docs/a.md", [first, second]) is first
