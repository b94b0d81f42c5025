"""Per-channel credential storage."""

from typing import Dict, Optional


class CredentialStore:
    """
    Process-wide mapping from channel identity to the secret supplied on connect.

    An empty string is a real entry ("connected without a credential") and is
    distinct from a missing entry. Entries never expire on their own; the
    lifecycle manager removes them when the channel closes.

    Every operation is synchronous, so under the event loop each one is atomic.
    """

    def __init__(self):
        self._secrets: Dict[str, str] = {}

    def put(self, identity: str, secret: str) -> None:
        self._secrets[identity] = secret

    def get(self, identity: str) -> Optional[str]:
        return self._secrets.get(identity)

    def remove(self, identity: str) -> None:
        self._secrets.pop(identity, None)

    def __contains__(self, identity) -> bool:
        return identity in self._secrets

    def __len__(self) -> int:
        return len(self._secrets)


__all__ = ["CredentialStore"]
