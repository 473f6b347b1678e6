"""Knowledge base and folder constraint records stored inside the vault.

Layout under the vault root::

    .llm_bridges/knowledge_base/
        metadata.json                  # listing cache
        <kb name>/
            meta.md                    # frontmatter + organization rules
            folder_constraints/
                <sanitized subfolder>.md
"""

from __future__ import annotations

import json
import logging
import re
from typing import Any, Optional

from obsidian_kb.constants import (
    FOLDER_CONSTRAINTS_DIR,
    KNOWLEDGE_BASE_DIR,
    LLM_BRIDGES_DIR,
    META_FILE,
    METADATA_CACHE_FILE,
    ORGANIZATION_RULES_PREVIEW_CHARS,
)
from obsidian_kb.core.path_scoping import has_traversal, is_within, normalize_path, subfolders_overlap
from obsidian_kb.core.rules_codec import (
    parse_folder_constraint,
    parse_knowledge_base,
    serialize_folder_constraint,
    serialize_knowledge_base,
    utc_timestamp,
)
from obsidian_kb.core.storage import VaultStorage
from obsidian_kb.data_models import (
    ConstraintRules,
    FolderConstraint,
    KnowledgeBase,
    KnowledgeBaseSummary,
)
from obsidian_kb.errors import (
    InvalidNotePath,
    KnowledgeBaseAlreadyExists,
    KnowledgeBaseNotFound,
    MalformedRecordError,
    SubfolderOverlap,
)

logger = logging.getLogger(__name__)

_UNSAFE_FILENAME_CHARS = re.compile(r"[^A-Za-z0-9_-]")


# ==============================================================================
# HELPER FUNCTIONS
# ==============================================================================


def organization_rules_preview(rules: str) -> str:
    if len(rules) <= ORGANIZATION_RULES_PREVIEW_CHARS:
        return rules
    return f"{rules[:ORGANIZATION_RULES_PREVIEW_CHARS]}..."


def summarize(kb: KnowledgeBase) -> KnowledgeBaseSummary:
    return KnowledgeBaseSummary(
        name=kb.name,
        description=kb.description,
        subfolder=kb.subfolder,
        create_time=kb.create_time,
        organization_rules_preview=organization_rules_preview(kb.organization_rules),
    )


def sanitize_filename(subfolder: str) -> str:
    """Derive a constraint file stem from a subfolder (``docs/api`` -> ``docs_api``)."""
    return _UNSAFE_FILENAME_CHARS.sub("", subfolder.replace("/", "_"))


def write_file(storage: VaultStorage, path: str, text: str) -> None:
    """Create ``path`` or overwrite it when it already exists."""
    if storage.is_file(path):
        storage.modify_file(path, text)
        return
    try:
        storage.create_file(path, text)
    except FileExistsError:
        # Another writer created it in between; last writer wins
        storage.modify_file(path, text)


# ==============================================================================
# LISTING CACHE
# ==============================================================================


class MetadataCache:
    """JSON file listing every knowledge base summary.

    There is no lock around it. Concurrent writers race and the last one wins;
    readers that find it missing, unreadable or empty rebuild from a scan.
    """

    def __init__(self, storage: VaultStorage, path: str) -> None:
        self.storage = storage
        self.path = path

    def load(self) -> Optional[list[KnowledgeBaseSummary]]:
        """Return cached rows, or ``None`` when the cache cannot be used."""
        if not self.storage.is_file(self.path):
            return None

        try:
            payload = json.loads(self.storage.read_file(self.path))
            rows = payload["knowledge_bases"]
            if not isinstance(rows, list) or not rows:
                return None
            summaries = [KnowledgeBaseSummary.from_payload(row) for row in rows]
        except (OSError, ValueError, KeyError, TypeError) as exc:
            logger.warning("Failed to read knowledge base cache %s: %s", self.path, exc)
            return None

        logger.debug("Loaded knowledge base cache (%d entries)", len(summaries))
        return summaries

    def save(self, summaries: list[KnowledgeBaseSummary]) -> None:
        payload: dict[str, Any] = {
            "updated_at": utc_timestamp(),
            "knowledge_bases": [summary.as_payload() for summary in summaries],
        }
        write_file(self.storage, self.path, json.dumps(payload, indent=2, ensure_ascii=False))
        logger.debug("Saved knowledge base cache (%d entries)", len(summaries))


# ==============================================================================
# REGISTRY
# ==============================================================================


class KnowledgeBaseRegistry:
    """CRUD for knowledge bases and their folder constraints in one vault."""

    def __init__(self, storage: VaultStorage) -> None:
        self.storage = storage
        self.base_path = f"{LLM_BRIDGES_DIR}/{KNOWLEDGE_BASE_DIR}"
        self.cache = MetadataCache(storage, f"{self.base_path}/{METADATA_CACHE_FILE}")

    # --------------------------------------------------------------------------
    # Paths
    # --------------------------------------------------------------------------

    def kb_path(self, name: str) -> str:
        return f"{self.base_path}/{name}"

    def meta_path(self, name: str) -> str:
        return f"{self.kb_path(name)}/{META_FILE}"

    def constraints_path(self, name: str) -> str:
        return f"{self.kb_path(name)}/{FOLDER_CONSTRAINTS_DIR}"

    def constraint_file_path(self, name: str, subfolder: str) -> str:
        return f"{self.constraints_path(name)}/{sanitize_filename(subfolder)}.md"

    # --------------------------------------------------------------------------
    # Knowledge bases
    # --------------------------------------------------------------------------

    def get_knowledge_base(self, name: str) -> Optional[KnowledgeBase]:
        """Read a knowledge base record, or ``None`` when it does not exist.

        Raises:
            MalformedRecordError: If ``meta.md`` exists but cannot be parsed.
        """
        meta_path = self.meta_path(name)
        if not self.storage.is_file(meta_path):
            return None
        return parse_knowledge_base(name, self.storage.read_file(meta_path))

    def require_knowledge_base(self, name: str) -> KnowledgeBase:
        kb = self.get_knowledge_base(name)
        if kb is None:
            raise KnowledgeBaseNotFound(f"Knowledge base '{name}' not found")
        return kb

    def list_knowledge_bases(self) -> list[KnowledgeBaseSummary]:
        """List knowledge base summaries, from the cache when it is usable."""
        self.storage.ensure_directory(self.base_path)

        cached = self.cache.load()
        if cached:
            return cached

        summaries = self._scan_knowledge_bases()
        logger.info("Rebuilt knowledge base cache: %d entries", len(summaries))
        self._save_cache(summaries)
        return summaries

    def add_knowledge_base(
        self,
        name: str,
        description: str,
        subfolder: str,
        organization_rules: str,
    ) -> KnowledgeBase:
        """Create a knowledge base owning ``subfolder``.

        Raises:
            KnowledgeBaseAlreadyExists: If ``name`` is taken.
            SubfolderOverlap: If ``subfolder`` equals, contains or is contained by
                another knowledge base's subfolder.
            InvalidNotePath: If ``subfolder`` is empty or contains ``..``.
        """
        if self.get_knowledge_base(name) is not None:
            raise KnowledgeBaseAlreadyExists(f"Knowledge base '{name}' already exists")

        normalized = self._checked_subfolder(subfolder)
        self._ensure_no_overlap(normalized, exclude=None)

        kb = KnowledgeBase(
            name=name,
            create_time=utc_timestamp(),
            description=description,
            subfolder=normalized,
            organization_rules=organization_rules,
        )

        self.storage.ensure_directory(self.constraints_path(name))
        self.storage.create_file(self.meta_path(name), serialize_knowledge_base(kb))
        self.storage.ensure_directory(kb.subfolder)
        self._update_cache_entry(kb)

        logger.info("Knowledge base '%s' created for subfolder '%s'", kb.name, kb.subfolder)
        return kb

    def update_knowledge_base(
        self,
        name: str,
        description: Optional[str] = None,
        subfolder: Optional[str] = None,
        organization_rules: Optional[str] = None,
    ) -> KnowledgeBase:
        """Apply a partial update; ``None`` leaves a field unchanged.

        Existing folder constraints are not re-scoped when the subfolder moves.

        Raises:
            KnowledgeBaseNotFound: If no knowledge base is called ``name``.
            SubfolderOverlap: If the new subfolder overlaps another knowledge base.
            InvalidNotePath: If the new subfolder is empty or contains ``..``.
        """
        kb = self.require_knowledge_base(name)

        if subfolder is not None:
            normalized = self._checked_subfolder(subfolder)
            if normalized != kb.subfolder:
                self._ensure_no_overlap(normalized, exclude=name)
            kb.subfolder = normalized
        if description is not None:
            kb.description = description
        if organization_rules is not None:
            kb.organization_rules = organization_rules

        self.storage.modify_file(self.meta_path(name), serialize_knowledge_base(kb))
        if subfolder is not None:
            self.storage.ensure_directory(kb.subfolder)
        self._update_cache_entry(kb)

        logger.info("Knowledge base '%s' updated", kb.name)
        return kb

    # --------------------------------------------------------------------------
    # Folder constraints
    # --------------------------------------------------------------------------

    def get_folder_constraints(self, kb_name: str) -> list[FolderConstraint]:
        """Load every readable constraint of a knowledge base, skipping broken files."""
        self.require_knowledge_base(kb_name)

        folder = self.constraints_path(kb_name)
        constraints: list[FolderConstraint] = []
        for filename in self.storage.list_directory(folder).files:
            if not filename.endswith(".md"):
                continue
            try:
                constraints.append(
                    parse_folder_constraint(kb_name, self.storage.read_file(f"{folder}/{filename}"))
                )
            except (OSError, UnicodeDecodeError, MalformedRecordError) as exc:
                logger.warning("Skipping folder constraint '%s' of '%s': %s", filename, kb_name, exc)
        return constraints

    def add_folder_constraint(
        self,
        kb_name: str,
        subfolder: str,
        rules: ConstraintRules,
    ) -> FolderConstraint:
        """Store ``rules`` for ``subfolder``, replacing any previous rules there.

        Raises:
            KnowledgeBaseNotFound: If the knowledge base does not exist.
            InvalidNotePath: If ``subfolder`` is outside the knowledge base subtree.
        """
        kb = self.require_knowledge_base(kb_name)

        normalized = normalize_path(subfolder)
        if has_traversal(normalized) or not is_within(normalized, kb.subfolder):
            raise InvalidNotePath(f"Subfolder '{subfolder}' is outside KB's scope '{kb.subfolder}'")

        constraint = FolderConstraint(kb_name=kb_name, subfolder=normalized, rules=rules)

        self.storage.ensure_directory(self.constraints_path(kb_name))
        write_file(
            self.storage,
            self.constraint_file_path(kb_name, normalized),
            serialize_folder_constraint(constraint),
        )

        logger.info("Folder constraint for '%s' saved in knowledge base '%s'", normalized, kb_name)
        return constraint

    # --------------------------------------------------------------------------
    # Internals
    # --------------------------------------------------------------------------

    def _checked_subfolder(self, subfolder: str) -> str:
        normalized = normalize_path(subfolder)
        if not normalized:
            raise InvalidNotePath("Knowledge base subfolder cannot be empty")
        if has_traversal(normalized):
            raise InvalidNotePath(f"Path traversal not allowed: '{subfolder}'")
        if is_within(normalized, LLM_BRIDGES_DIR):
            raise InvalidNotePath(f"Subfolder '{subfolder}' is reserved for knowledge base records")
        return normalized

    def _ensure_no_overlap(self, subfolder: str, exclude: Optional[str]) -> None:
        for other in self.list_knowledge_bases():
            if other.name == exclude:
                continue
            if subfolders_overlap(subfolder, other.subfolder):
                raise SubfolderOverlap(
                    f"Subfolder '{subfolder}' overlaps with KB '{other.name}' subfolder '{other.subfolder}'"
                )

    def _scan_knowledge_bases(self) -> list[KnowledgeBaseSummary]:
        summaries: list[KnowledgeBaseSummary] = []
        for name in self.storage.list_directory(self.base_path).subdirectories:
            try:
                kb = self.get_knowledge_base(name)
            except (OSError, UnicodeDecodeError, MalformedRecordError) as exc:
                logger.warning("Skipping invalid knowledge base folder '%s': %s", name, exc)
                continue
            if kb is not None:
                summaries.append(summarize(kb))
        return summaries

    def _update_cache_entry(self, kb: KnowledgeBase) -> None:
        summaries = self.cache.load() or self._scan_knowledge_bases()
        summary = summarize(kb)
        for index, existing in enumerate(summaries):
            if existing.name == kb.name:
                summaries[index] = summary
                break
        else:
            summaries.append(summary)
        self._save_cache(summaries)

    def _save_cache(self, summaries: list[KnowledgeBaseSummary]) -> None:
        try:
            self.cache.save(summaries)
        except OSError as exc:
            logger.warning("Knowledge base cache save failed: %s", exc)
