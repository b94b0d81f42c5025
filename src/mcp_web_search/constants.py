"""
Global constants and configuration defaults.
No dependencies - safe to import from anywhere.
"""

# ============================================================================
# Transport Configuration
# ============================================================================

SSE_PATH = "/sse"
"""Endpoint a client opens its long-lived event stream on."""

MESSAGES_PATH = "/messages"
"""Endpoint follow-up JSON-RPC requests are posted to."""

SESSION_QUERY_PARAM = "sessionId"
"""Query parameter carrying the channel identity on follow-up requests."""

API_KEY_HEADER = "x-serper-api-key"
"""Connection header carrying the per-channel search credential."""

API_KEY_HEADER_DISPLAY = "X-Serper-Api-Key"
"""Header name as shown to clients and operators."""

DEFAULT_PORT = 3000
"""Listening port when PORT is not set."""


# ============================================================================
# Search Provider Configuration
# ============================================================================

SERPER_SEARCH_URL = "https://google.serper.dev/search"
"""Default search endpoint of the upstream provider."""

SEARCH_RESULT_COUNT = 3
"""Number of results requested from the provider per query."""

SEARCH_TIMEOUT_SECS = 10.0
"""Default timeout applied to each provider call in seconds (MWS_SEARCH_TIMEOUT)."""


# ============================================================================
# Tool Messages
# ============================================================================

MISSING_SESSION_MESSAGE = "Error: Internal server error (missing session ID)."
MISSING_API_KEY_MESSAGE = (
    f"Error: API key not configured for this session. "
    f"Supply the {API_KEY_HEADER_DISPLAY} header when connecting."
)
SEARCH_FAILED_MESSAGE = "Error: Could not complete the search."
NO_TRANSPORT_MESSAGE = "No transport found for sessionId"


__all__ = [
    "SSE_PATH",
    "MESSAGES_PATH",
    "SESSION_QUERY_PARAM",
    "API_KEY_HEADER",
    "API_KEY_HEADER_DISPLAY",
    "DEFAULT_PORT",
    "SERPER_SEARCH_URL",
    "SEARCH_RESULT_COUNT",
    "SEARCH_TIMEOUT_SECS",
    "MISSING_SESSION_MESSAGE",
    "MISSING_API_KEY_MESSAGE",
    "SEARCH_FAILED_MESSAGE",
    "NO_TRANSPORT_MESSAGE",
]
