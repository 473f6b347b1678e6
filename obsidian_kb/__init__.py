"""Obsidian Knowledge Base MCP Server

Knowledge bases, folder constraints and validated note operations over
Obsidian vaults via Model Context Protocol.
"""

from obsidian_kb.config import get_vault_configuration, set_vault_configuration
from obsidian_kb.data_models import VaultMetadata, VaultConfiguration
from obsidian_kb.session import resolve_vault, set_active_vault, get_active_vault
from obsidian_kb.server import mcp, run_server

# Import tools to register them with the MCP server
from obsidian_kb import tools  # noqa: F401

__version__ = "0.1.0"
__all__ = [
    "get_vault_configuration",
    "set_vault_configuration",
    "VaultMetadata",
    "VaultConfiguration",
    "resolve_vault",
    "set_active_vault",
    "get_active_vault",
    "mcp",
    "run_server",
]
