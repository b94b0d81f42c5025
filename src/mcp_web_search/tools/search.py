"""`search_web` tool implementation: credential lookup and provider call."""

from typing import Optional

from ..constants import (
    MISSING_API_KEY_MESSAGE,
    MISSING_SESSION_MESSAGE,
    SEARCH_FAILED_MESSAGE,
    SEARCH_RESULT_COUNT,
)
from ..errors import SearchProviderError
from ..search.report import format_report
from ..sessions.credentials import CredentialStore

import logging
logger = logging.getLogger(__name__)


class SearchBridge:
    """
    Connects a tool call on a channel to the search provider.

    Args:
        credentials: Store holding each channel's API key
        client: Anything with `async search(query, api_key, num) -> list`
    """

    def __init__(self, credentials: CredentialStore, client):
        self.credentials = credentials
        self.client = client

    async def invoke(self, identity: Optional[str], query: str) -> str:
        if not identity:
            logger.error("Could not determine sessionId for the request.")
            return MISSING_SESSION_MESSAGE

        # Read once; a teardown while the search is in flight must not change
        # the key used for this call.
        api_key = self.credentials.get(identity)
        if api_key is None:
            logger.error(f"No session found for sessionId {identity}")
            return MISSING_SESSION_MESSAGE
        if not api_key:
            logger.error(f"API key not found for session {identity}")
            return MISSING_API_KEY_MESSAGE

        try:
            results = await self.client.search(query, api_key, num=SEARCH_RESULT_COUNT)
        except SearchProviderError as e:
            logger.error(f"Search failed for session {identity}: {e}")
            return SEARCH_FAILED_MESSAGE
        except Exception:
            logger.exception(f"Unexpected error while searching for session {identity}")
            return SEARCH_FAILED_MESSAGE

        return format_report(query, results)


__all__ = ["SearchBridge"]
