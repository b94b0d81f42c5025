"""Registry of open SSE channels."""

import enum
import anyio
from typing import Any, Callable, Dict, List, Optional

from ..errors import ChannelAlreadyRegisteredError, ChannelClosedError

import logging
logger = logging.getLogger(__name__)


class ChannelState(str, enum.Enum):
    CONNECTING = "connecting"
    OPEN = "open"
    CLOSED = "closed"


class ChannelHandle:
    """
    One open outbound stream to a client.

    The handle owns the writing end of the stream feeding the channel's MCP
    session. Messages posted by the client are pushed through `deliver`, and the
    session answers on the client's event stream.

    Attributes:
        identity: Channel identity minted at connect time
        state: Current ChannelState
    """

    def __init__(self, identity: str, stream_writer):
        self.identity = identity
        self.state = ChannelState.CONNECTING
        self._stream_writer = stream_writer
        self._close_callbacks: List[Callable[["ChannelHandle"], Any]] = []

    @property
    def is_open(self) -> bool:
        return self.state is ChannelState.OPEN

    def mark_open(self) -> None:
        if self.state is ChannelState.CONNECTING:
            self.state = ChannelState.OPEN

    def add_close_callback(self, callback: Callable[["ChannelHandle"], Any]) -> None:
        """Register a callback run once when the handle closes."""
        self._close_callbacks.append(callback)

    async def deliver(self, message) -> None:
        """
        Push an inbound protocol message into the channel's session.

        Raises:
            ChannelClosedError: if the channel is closed or its stream went away
                between lookup and use.
        """
        if self.state is ChannelState.CLOSED:
            raise ChannelClosedError(self.identity)
        try:
            await self._stream_writer.send(message)
        except (anyio.ClosedResourceError, anyio.BrokenResourceError):
            raise ChannelClosedError(self.identity)

    def close(self) -> bool:
        """
        Transition to CLOSED and notify close callbacks.

        Returns False if the handle was already closed, so duplicate close
        notifications are harmless.
        """
        if self.state is ChannelState.CLOSED:
            return False
        self.state = ChannelState.CLOSED
        callbacks, self._close_callbacks = self._close_callbacks, []
        for callback in callbacks:
            try:
                callback(self)
            except Exception:
                logger.exception(f"Close callback failed for channel {self.identity}")
        return True

    def __repr__(self) -> str:
        return f"ChannelHandle(identity={self.identity!r}, state={self.state.value})"


class ChannelRegistry:
    """Process-wide mapping from channel identity to its open handle."""

    def __init__(self):
        self._handles: Dict[str, ChannelHandle] = {}

    def register(self, identity: str, handle: ChannelHandle) -> None:
        if identity in self._handles:
            raise ChannelAlreadyRegisteredError(f"Channel {identity} is already registered")
        self._handles[identity] = handle

    def lookup(self, identity: str) -> Optional[ChannelHandle]:
        return self._handles.get(identity)

    def remove(self, identity: str) -> Optional[ChannelHandle]:
        return self._handles.pop(identity, None)

    def identities(self) -> List[str]:
        return list(self._handles)

    def __contains__(self, identity) -> bool:
        return identity in self._handles

    def __len__(self) -> int:
        return len(self._handles)


__all__ = [
    "ChannelState",
    "ChannelHandle",
    "ChannelRegistry",
]
