"""Shared fixtures: a throwaway vault and a registry over it."""

import pytest

from obsidian_kb.core.kb_registry import KnowledgeBaseRegistry
from obsidian_kb.core.storage import VaultStorage
from obsidian_kb.data_models import (
    ConstraintRules,
    FilenameRules,
    FrontmatterRules,
    RequiredField,
)


@pytest.fixture
def vault_path(tmp_path):
    path = tmp_path / "vault"
    path.mkdir()
    return path


@pytest.fixture
def registry(vault_path):
    return KnowledgeBaseRegistry(VaultStorage(vault_path))


@pytest.fixture
def adr_rules():
    """Rules requiring a status field and a numbered filename."""
    return ConstraintRules(
        frontmatter=FrontmatterRules(
            required_fields=[
                RequiredField(name="status", type="string", allowed_values=["draft", "accepted"]),
            ]
        ),
        filename=FilenameRules(pattern=r"^\d{4}-.+\.md$"),
    )


@pytest.fixture
def engineering_kb(registry, adr_rules):
    """Knowledge base 'eng' owning 'docs' with a constraint on 'docs/adr'."""
    registry.add_knowledge_base("eng", "Engineering", "docs", "Keep one decision per note.")
    registry.add_folder_constraint("eng", "docs/adr", adr_rules)
    return registry
