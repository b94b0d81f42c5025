"""Configuration management for the web search server."""

from .environment import (
    get_env_config,
    parse_bool,
)

__all__ = [
    "get_env_config",
    "parse_bool",
]
