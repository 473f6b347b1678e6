"""Tagged errors raised by knowledge base and note operations."""

from __future__ import annotations

from typing import Any, Optional


class KnowledgeBaseError(Exception):
    """Base class for every error reported back to the MCP client.

    Each subclass carries a stable ``code`` so clients can branch on the kind of
    failure without parsing the message.
    """

    code = "knowledge_base_error"

    def __init__(self, message: str, details: Optional[Any] = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details

    def as_payload(self) -> dict[str, Any]:
        """Return a serializable ``{"error": {...}}`` payload."""
        error: dict[str, Any] = {"code": self.code, "message": self.message}
        if self.details is not None:
            error["details"] = self.details
        return {"error": error}


class KnowledgeBaseNotFound(KnowledgeBaseError):
    code = "knowledge_base_not_found"


class KnowledgeBaseAlreadyExists(KnowledgeBaseError):
    code = "knowledge_base_already_exists"


class SubfolderOverlap(KnowledgeBaseError):
    code = "subfolder_overlap"


class NoteNotFound(KnowledgeBaseError):
    code = "note_not_found"


class NoteAlreadyExists(KnowledgeBaseError):
    code = "note_already_exists"


class InvalidNotePath(KnowledgeBaseError):
    code = "invalid_note_path"


class SchemaValidationFailed(KnowledgeBaseError):
    """Constraint rules supplied by the caller are structurally invalid."""

    code = "schema_validation_failed"

    def __init__(self, message: str, issues: list[dict[str, Any]]) -> None:
        super().__init__(message, details=issues)
        self.issues = issues


class FolderConstraintViolation(KnowledgeBaseError):
    """A note failed the folder constraint that applies to its path."""

    code = "folder_constraint_violation"

    def __init__(
        self,
        message: str,
        kb_name: str,
        subfolder: str,
        issues: list[dict[str, Any]],
    ) -> None:
        super().__init__(message)
        self.kb_name = kb_name
        self.subfolder = subfolder
        self.issues = issues

    def as_payload(self) -> dict[str, Any]:
        payload = super().as_payload()
        payload["error"]["constraint"] = {"kb_name": self.kb_name, "subfolder": self.subfolder}
        payload["error"]["issues"] = self.issues
        return payload


class MalformedRecordError(ValueError):
    """A persisted knowledge base or constraint document could not be parsed."""
