"""MCP tool definitions for Obsidian knowledge base operations.

This module imports all tool submodules to register them with the MCP server.
Each tool module uses the @mcp.tool() decorator to auto-register its tools.
"""

# Import all tool modules to register their @mcp.tool() decorated functions
from obsidian_kb.tools import vault_tools
from obsidian_kb.tools import kb_tools
from obsidian_kb.tools import note_tools

__all__ = [
    "vault_tools",
    "kb_tools",
    "note_tools",
]
