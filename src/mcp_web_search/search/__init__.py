"""Client for the upstream search provider and formatting of its results."""

from .client import SearchResult, SerperClient
from .report import format_report

__all__ = [
    "SearchResult",
    "SerperClient",
    "format_report",
]
