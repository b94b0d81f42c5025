"""Correlate follow-up requests with the channel that opened them."""

from dataclasses import dataclass
from typing import Any, Optional, Union

from .registry import ChannelHandle, ChannelRegistry
from ..errors import ChannelClosedError

import logging
logger = logging.getLogger(__name__)


MALFORMED_REQUEST = "malformed request"
NO_ACTIVE_CHANNEL = "no active channel"


@dataclass(frozen=True)
class Unroutable:
    """A follow-up request that cannot be matched to an open channel."""

    identity: Optional[str]
    reason: str


@dataclass(frozen=True)
class InvocationRequest:
    """
    Transient per-request data attached to a message routed into a channel.

    The tool handler reads the channel identity from here instead of from any
    ambient state.
    """

    identity: str
    http_request: Any = None


class RequestCorrelator:

    def __init__(self, registry: ChannelRegistry):
        self.registry = registry

    def resolve(self, identity: Optional[str]) -> Union[ChannelHandle, Unroutable]:
        if not identity:
            return Unroutable(identity, MALFORMED_REQUEST)
        handle = self.registry.lookup(identity)
        if handle is None or not handle.is_open:
            return Unroutable(identity, NO_ACTIVE_CHANNEL)
        return handle

    async def route(self, identity: Optional[str], message) -> Optional[Unroutable]:
        """
        Resolve the identity and deliver the message to its channel.

        Returns None on success, or an Unroutable describing why the message
        could not be delivered. A channel that closes between lookup and
        delivery is reported as having no active channel.
        """
        resolved = self.resolve(identity)
        if isinstance(resolved, Unroutable):
            logger.warning(f"Unroutable request for sessionId={identity!r}: {resolved.reason}")
            return resolved
        try:
            await resolved.deliver(message)
        except ChannelClosedError:
            logger.warning(f"Channel {identity} closed before the request could be delivered")
            return Unroutable(identity, NO_ACTIVE_CHANNEL)
        return None


__all__ = [
    "MALFORMED_REQUEST",
    "NO_ACTIVE_CHANNEL",
    "Unroutable",
    "InvocationRequest",
    "RequestCorrelator",
]
