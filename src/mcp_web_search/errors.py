"""Exceptions raised by the session layer and the search client."""


class ChannelAlreadyRegisteredError(RuntimeError):
    """An identity was registered twice. Identities are minted unique, so this is a bug."""


class ChannelClosedError(RuntimeError):
    """A message could not be delivered because the channel's stream is gone."""

    def __init__(self, identity: str):
        super().__init__(f"Channel {identity} is closed")
        self.identity = identity


class SearchProviderError(RuntimeError):
    """
    The upstream search call failed.

    Attributes:
        status_code: HTTP status returned by the provider, if one was received.
    """

    def __init__(self, message: str, status_code=None):
        super().__init__(message)
        self.status_code = status_code


__all__ = [
    "ChannelAlreadyRegisteredError",
    "ChannelClosedError",
    "SearchProviderError",
]
