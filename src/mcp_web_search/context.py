"""
Centralized session state management.

One ServerContext per process holds the credential store, the channel registry
and the components built on them, giving a single source of truth for which
channels are open and which key each one supplied.

Thread Safety:
    The ServerContext is NOT thread-safe. All access happens on the event loop
    thread, where each individual map operation is atomic.

Usage:
    from mcp_web_search.context import get_context

    ctx = get_context()
    handle = ctx.correlator.resolve(session_id)
"""

from dataclasses import dataclass, field
from typing import Optional

from .constants import SERPER_SEARCH_URL, SEARCH_TIMEOUT_SECS
from .search.client import SerperClient
from .sessions import (
    ChannelLifecycleManager,
    ChannelRegistry,
    CredentialStore,
    RequestCorrelator,
)
from .tools.search import SearchBridge


@dataclass
class ServerContext:
    """
    Encapsulates all per-process session state.

    Attributes:
        config: Environment configuration dictionary
        credentials: Channel identity -> API key
        registry: Channel identity -> open ChannelHandle
        lifecycle: Opens and tears down channels
        correlator: Routes follow-up requests to their channel
        search_client: Client for the upstream search provider
        bridge: Implementation behind the search_web tool
    """

    config: dict = field(default_factory=dict)
    credentials: CredentialStore = field(default_factory=CredentialStore)
    registry: ChannelRegistry = field(default_factory=ChannelRegistry)
    search_client: Optional[SerperClient] = None
    lifecycle: ChannelLifecycleManager = field(init=False)
    correlator: RequestCorrelator = field(init=False)
    bridge: SearchBridge = field(init=False)

    def __post_init__(self):
        if self.search_client is None:
            self.search_client = SerperClient(
                url=self.config.get("search_url") or SERPER_SEARCH_URL,
                timeout=self.config.get("search_timeout") or SEARCH_TIMEOUT_SECS,
            )
        self.lifecycle = ChannelLifecycleManager(self.credentials, self.registry)
        self.correlator = RequestCorrelator(self.registry)
        self.bridge = SearchBridge(self.credentials, self.search_client)

    @property
    def require_api_key(self) -> bool:
        return bool(self.config.get("require_api_key"))


# ============================================================================
# Global Context Management
# ============================================================================

_global_context: Optional[ServerContext] = None


def get_context() -> ServerContext:
    """
    Get or create the global server context.

    This is a singleton pattern - all calls return the same context instance.
    Use reset_context() to clear the singleton (mainly for testing).

    Returns:
        The global ServerContext instance
    """
    global _global_context

    if _global_context is None:
        from .config.environment import get_env_config

        _global_context = ServerContext(config=get_env_config())

    return _global_context


def set_context(ctx: ServerContext) -> ServerContext:
    """Install a prebuilt context, e.g. one with a fake search client."""
    global _global_context
    _global_context = ctx
    return ctx


def reset_context() -> None:
    """
    Reset the global context.

    ⚠️  WARNING: This is primarily for testing. Open channels are forgotten,
    not torn down.
    """
    global _global_context
    _global_context = None


__all__ = [
    "ServerContext",
    "get_context",
    "set_context",
    "reset_context",
]
