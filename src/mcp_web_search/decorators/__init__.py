# mcp_web_search/decorators/__init__.py

from .envelope import tool_envelope

__all__ = [
    "tool_envelope",
]
