"""Pydantic input models for MCP tool validation.

Each model is the input schema of one tool, with field-level validation and
descriptive error messages that reach the MCP client before any work is done.

Architecture:
- base: Shared validators and base models (VaultScopedInput, BaseNoteInput)
- kb_models: Knowledge base and folder constraint management
- note_models: Note operations inside a knowledge base
- vault_models: Vault selection
"""

from .base import BaseNoteInput, VaultScopedInput
from .kb_models import (
    ListKnowledgeBasesInput,
    AddKnowledgeBaseInput,
    UpdateKnowledgeBaseInput,
    AddFolderConstraintInput,
)
from .note_models import (
    ListNotesInput,
    CreateNoteInput,
    ReadNoteInput,
    UpdateNoteInput,
    AppendNoteInput,
    MoveNoteInput,
    DeleteNoteInput,
)
from .vault_models import (
    ListVaultsInput,
    SetActiveVaultInput,
)

__all__ = [
    # Base models
    "BaseNoteInput",
    "VaultScopedInput",
    # Knowledge base models
    "ListKnowledgeBasesInput",
    "AddKnowledgeBaseInput",
    "UpdateKnowledgeBaseInput",
    "AddFolderConstraintInput",
    # Note models
    "ListNotesInput",
    "CreateNoteInput",
    "ReadNoteInput",
    "UpdateNoteInput",
    "AppendNoteInput",
    "MoveNoteInput",
    "DeleteNoteInput",
    # Vault models
    "ListVaultsInput",
    "SetActiveVaultInput",
]
