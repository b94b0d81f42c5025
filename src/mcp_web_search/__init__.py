"""
MCP server exposing a single `search_web` tool over SSE.

Each agent opens its own event stream and supplies its own search API key when
connecting. Follow-up requests carry the channel identity handed out on
connect, which is the only thing that ties them to the channel and its key.
"""

__version__ = "0.1.0"
