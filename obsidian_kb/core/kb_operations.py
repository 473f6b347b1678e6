"""Knowledge base management operations returning tool payloads."""

from __future__ import annotations

import logging
from typing import Any, Optional

from obsidian_kb.core.constraint_validation import validate_constraint_rules_schema
from obsidian_kb.core.kb_registry import KnowledgeBaseRegistry
from obsidian_kb.core.storage import VaultStorage
from obsidian_kb.data_models import ConstraintRules, VaultMetadata
from obsidian_kb.errors import SchemaValidationFailed

logger = logging.getLogger(__name__)

NEXT_STEPS_AFTER_ADD = (
    "Knowledge base created. Please define folder constraints using "
    "add_knowledge_base_folder_constraint to specify machine-checkable metadata "
    "rules for notes under specific subfolders."
)


def ensure_vault_ready(vault: VaultMetadata) -> None:
    """Ensure the target vault directory is accessible before performing operations.

    Raises:
        FileNotFoundError: If the vault path does not exist or is not a directory.
    """
    if not vault.path.is_dir():
        raise FileNotFoundError(f"Vault '{vault.name}' is not accessible at {vault.path}")


def open_registry(vault: VaultMetadata) -> KnowledgeBaseRegistry:
    """Build a registry over ``vault`` after checking the vault is reachable."""
    ensure_vault_ready(vault)
    return KnowledgeBaseRegistry(VaultStorage(vault.path))


def list_knowledge_bases(registry: KnowledgeBaseRegistry) -> dict[str, Any]:
    return {
        "knowledge_bases": [summary.as_payload() for summary in registry.list_knowledge_bases()],
    }


def add_knowledge_base(
    registry: KnowledgeBaseRegistry,
    name: str,
    description: str,
    subfolder: str,
    organization_rules: str,
) -> dict[str, Any]:
    kb = registry.add_knowledge_base(name, description, subfolder, organization_rules)
    return {"knowledge_base": kb.as_payload(), "next_steps": NEXT_STEPS_AFTER_ADD}


def update_knowledge_base(
    registry: KnowledgeBaseRegistry,
    name: str,
    description: Optional[str] = None,
    subfolder: Optional[str] = None,
    organization_rules: Optional[str] = None,
) -> dict[str, Any]:
    kb = registry.update_knowledge_base(
        name,
        description=description,
        subfolder=subfolder,
        organization_rules=organization_rules,
    )
    return {"knowledge_base": kb.as_payload()}


def add_folder_constraint(
    registry: KnowledgeBaseRegistry,
    kb_name: str,
    subfolder: str,
    rules: Any,
) -> dict[str, Any]:
    """Check the shape of ``rules`` and store them for ``subfolder``.

    Raises:
        SchemaValidationFailed: If ``rules`` is not a well-formed rules object.
    """
    schema = validate_constraint_rules_schema(rules)
    if not schema.passed:
        logger.info("Rejected constraint rules for '%s' in '%s': %d issue(s)", subfolder, kb_name, len(schema.issues))
        raise SchemaValidationFailed(
            "Invalid constraint rules schema",
            issues=[issue.as_payload() for issue in schema.issues],
        )

    constraint = registry.add_folder_constraint(kb_name, subfolder, ConstraintRules.from_payload(rules))
    return {"folder_constraint": constraint.as_payload()}
