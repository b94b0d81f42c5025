"""
Channel lifecycle: connect, register, teardown.

Each channel moves CONNECTING -> OPEN -> CLOSED. CLOSED is terminal. The
credential entry and the registry entry are created together on connect and
removed together on teardown, so at any observation point the number of stored
credentials equals the number of open channels.
"""

import uuid
from contextlib import asynccontextmanager
from typing import Optional

from .credentials import CredentialStore
from .registry import ChannelHandle, ChannelRegistry

import logging
logger = logging.getLogger(__name__)


class ChannelLifecycleManager:

    def __init__(self, credentials: CredentialStore, registry: ChannelRegistry):
        self.credentials = credentials
        self.registry = registry

    def mint_identity(self) -> str:
        """Return a fresh, unguessable identity (122 random bits) not held by an open channel."""
        identity = uuid.uuid4().hex
        while identity in self.registry:
            identity = uuid.uuid4().hex
        return identity

    def open_channel(self, stream_writer, secret: Optional[str]) -> ChannelHandle:
        """
        Create and register a channel for a new connection.

        A missing secret is stored as an empty string. The failure is reported
        by the search tool on first use, not here.
        """
        identity = self.mint_identity()
        handle = ChannelHandle(identity, stream_writer)
        self.credentials.put(identity, secret or "")
        try:
            self.registry.register(identity, handle)
        except Exception:
            self.credentials.remove(identity)
            raise
        handle.add_close_callback(self._on_closed)
        handle.mark_open()

        logger.info(
            f"SSE session started: {identity} "
            f"({'with' if secret else 'without'} API key provided)"
        )
        return handle

    def close_channel(self, identity: str) -> bool:
        """
        Tear down a channel. Safe to call more than once.

        Returns True if this call performed the teardown.
        """
        handle = self.registry.lookup(identity)
        if handle is None:
            # Already torn down; make sure nothing was left behind.
            self.credentials.remove(identity)
            return False
        return handle.close()

    def _on_closed(self, handle: ChannelHandle) -> None:
        self.registry.remove(handle.identity)
        self.credentials.remove(handle.identity)
        logger.info(f"SSE session closed: {handle.identity}")

    @asynccontextmanager
    async def channel(self, stream_writer, secret: Optional[str]):
        """Open a channel for the duration of the block; teardown always runs on exit."""
        handle = self.open_channel(stream_writer, secret)
        try:
            yield handle
        finally:
            self.close_channel(handle.identity)

    @property
    def open_count(self) -> int:
        return len(self.registry)


__all__ = ["ChannelLifecycleManager"]
