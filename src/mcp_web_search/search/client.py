"""HTTP client for the Serper search API."""

from dataclasses import dataclass
from typing import List, Optional

import httpx

from ..constants import SERPER_SEARCH_URL, SEARCH_RESULT_COUNT, SEARCH_TIMEOUT_SECS
from ..errors import SearchProviderError
from ..utils.diagnostics import describe_http_error, mask_secret

import logging
logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SearchResult:
    title: str
    link: str
    snippet: str


class SerperClient:
    """
    Thin async wrapper around `POST /search`.

    A single httpx.AsyncClient is shared by all channels and created on first
    use. The credential is passed per call, never stored on the client.
    """

    def __init__(
        self,
        url: str = SERPER_SEARCH_URL,
        timeout: float = SEARCH_TIMEOUT_SECS,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        self.url = url
        self.timeout = timeout
        self._http_client = http_client

    def _client(self) -> httpx.AsyncClient:
        if self._http_client is None:
            self._http_client = httpx.AsyncClient(timeout=self.timeout)
        return self._http_client

    async def search(self, query: str, api_key: str, num: int = SEARCH_RESULT_COUNT) -> List[SearchResult]:
        """
        Run a web search.

        Args:
            query: The search query
            api_key: Serper API key of the calling channel
            num: Maximum number of results to request

        Returns:
            Organic results in the order returned by the provider

        Raises:
            SearchProviderError: on network errors, non-2xx responses or a
                malformed payload
        """
        logger.info(f"Searching for query: {query!r} (API key {mask_secret(api_key)}, length {len(api_key)})")
        try:
            response = await self._client().post(
                self.url,
                json={"q": query, "num": num},
                headers={"X-API-KEY": api_key, "Content-Type": "application/json"},
            )
            logger.info(f"Search API responded with status: {response.status_code}")
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPStatusError as e:
            logger.error(f"Search API call failed:\n{describe_http_error(e)}")
            raise SearchProviderError(
                f"Search provider returned HTTP {e.response.status_code}",
                status_code=e.response.status_code,
            ) from e
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"Search API call failed:\n{describe_http_error(e)}")
            raise SearchProviderError(f"Search provider call failed: {type(e).__name__}") from e

        return self._parse(data)

    def _parse(self, data) -> List[SearchResult]:
        if not isinstance(data, dict):
            logger.error(f"Unexpected search payload type: {type(data).__name__}")
            raise SearchProviderError("Malformed search payload")

        organic = data.get("organic")
        if organic is None:
            logger.info(f"No organic results in the response; keys: {sorted(data)}")
            return []
        if not isinstance(organic, list):
            logger.error(f"Unexpected 'organic' type: {type(organic).__name__}")
            raise SearchProviderError("Malformed search payload")

        results = []
        for item in organic:
            if not isinstance(item, dict):
                continue
            results.append(SearchResult(
                title=str(item.get("title") or ""),
                link=str(item.get("link") or ""),
                snippet=str(item.get("snippet") or ""),
            ))
        logger.info(f"Found {len(results)} organic results")
        return results

    async def aclose(self) -> None:
        if self._http_client is not None:
            await self._http_client.aclose()
            self._http_client = None


__all__ = ["SearchResult", "SerperClient"]
