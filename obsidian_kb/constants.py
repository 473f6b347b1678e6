"""Module-level constants for the Obsidian knowledge base MCP server."""

import os
from pathlib import Path

# Configuration
CONFIG_PATH = Path(os.environ.get("OBSIDIAN_KB_CONFIG", Path(__file__).parent.parent / "vaults.yaml"))

# Reserved storage layout inside each vault
LLM_BRIDGES_DIR = ".llm_bridges"
KNOWLEDGE_BASE_DIR = "knowledge_base"
FOLDER_CONSTRAINTS_DIR = "folder_constraints"
META_FILE = "meta.md"
METADATA_CACHE_FILE = "metadata.json"

# Limits
DEFAULT_READ_LIMIT = 10_000
ORGANIZATION_RULES_PREVIEW_CHARS = 200
MAX_KB_NAME_LENGTH = 100

# Logging
LOG_LEVEL = "INFO"
