"""Session layer: credentials, channel registry, lifecycle and request correlation."""

from .credentials import CredentialStore
from .registry import ChannelState, ChannelHandle, ChannelRegistry
from .lifecycle import ChannelLifecycleManager
from .correlator import (
    MALFORMED_REQUEST,
    NO_ACTIVE_CHANNEL,
    Unroutable,
    InvocationRequest,
    RequestCorrelator,
)

__all__ = [
    "CredentialStore",
    "ChannelState",
    "ChannelHandle",
    "ChannelRegistry",
    "ChannelLifecycleManager",
    "MALFORMED_REQUEST",
    "NO_ACTIVE_CHANNEL",
    "Unroutable",
    "InvocationRequest",
    "RequestCorrelator",
]
