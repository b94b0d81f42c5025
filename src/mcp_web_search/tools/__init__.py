# mcp_web_search/tools/__init__.py
"""
MCP tool implementations.

Tools here take the channel identity as an explicit argument and always return
text for the agent, never raise.
"""

from .search import SearchBridge

__all__ = [
    'SearchBridge',
]
