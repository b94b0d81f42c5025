"""Tests for the search_web tool implementation (SearchBridge)."""

import asyncio

import httpx
import pytest

from mcp_web_search.constants import (
    MISSING_API_KEY_MESSAGE,
    MISSING_SESSION_MESSAGE,
    SEARCH_FAILED_MESSAGE,
)
from mcp_web_search.errors import SearchProviderError
from mcp_web_search.search import SearchResult, SerperClient
from mcp_web_search.sessions import (
    ChannelLifecycleManager,
    ChannelRegistry,
    CredentialStore,
)
from mcp_web_search.tools import SearchBridge


@pytest.fixture(scope="function")
def event_loop():
    loop = asyncio.new_event_loop()
    asyncio.set_event_loop(loop)
    yield loop
    loop.close()


class FakeSearchClient:
    """Stands in for the search provider and records every call."""

    def __init__(self, results=None, error=None):
        self.results = results or []
        self.error = error
        self.calls = []

    async def search(self, query, api_key, num=3):
        self.calls.append((query, api_key, num))
        if self.error is not None:
            raise self.error
        return list(self.results)


@pytest.fixture
def manager():
    return ChannelLifecycleManager(CredentialStore(), ChannelRegistry())


def test_single_result_is_reported(manager, event_loop):
    client = FakeSearchClient(results=[SearchResult(title="A", link="http://a", snippet="s")])
    bridge = SearchBridge(manager.credentials, client)
    handle = manager.open_channel(stream_writer=None, secret="key-1")

    text = event_loop.run_until_complete(bridge.invoke(handle.identity, "what is a"))

    assert client.calls == [("what is a", "key-1", 3)]
    assert text.startswith("Search results for: what is a\n\n")
    assert "1. A\n   http://a\n   s\n" in text
    assert "2. " not in text


def test_results_keep_provider_order(manager, event_loop):
    client = FakeSearchClient(results=[
        SearchResult(title="First", link="http://1", snippet="one"),
        SearchResult(title="Second", link="http://2", snippet="two"),
    ])
    bridge = SearchBridge(manager.credentials, client)
    handle = manager.open_channel(stream_writer=None, secret="key-1")

    text = event_loop.run_until_complete(bridge.invoke(handle.identity, "q"))

    assert text.index("1. First") < text.index("2. Second")


def test_zero_results_say_so(manager, event_loop):
    client = FakeSearchClient(results=[])
    bridge = SearchBridge(manager.credentials, client)
    handle = manager.open_channel(stream_writer=None, secret="key-1")

    text = event_loop.run_until_complete(bridge.invoke(handle.identity, "nothing"))

    assert "No results found." in text
    assert "Search results for: nothing" in text


def test_empty_credential_skips_provider(manager, event_loop):
    client = FakeSearchClient()
    bridge = SearchBridge(manager.credentials, client)
    handle = manager.open_channel(stream_writer=None, secret="")

    text = event_loop.run_until_complete(bridge.invoke(handle.identity, "q"))

    assert text == MISSING_API_KEY_MESSAGE
    assert "API key not configured" in text
    assert "X-Serper-Api-Key" in text
    assert len(client.calls) == 0


def test_unregistered_identity_reports_missing_session(manager, event_loop):
    client = FakeSearchClient()
    bridge = SearchBridge(manager.credentials, client)

    text = event_loop.run_until_complete(bridge.invoke("never-registered", "q"))

    assert text == MISSING_SESSION_MESSAGE
    assert len(client.calls) == 0


@pytest.mark.parametrize("identity", [None, ""])
def test_missing_identity_reports_missing_session(manager, event_loop, identity):
    client = FakeSearchClient()
    bridge = SearchBridge(manager.credentials, client)

    text = event_loop.run_until_complete(bridge.invoke(identity, "q"))

    assert text == MISSING_SESSION_MESSAGE
    assert len(client.calls) == 0


def test_closed_channel_reports_missing_session(manager, event_loop):
    client = FakeSearchClient()
    bridge = SearchBridge(manager.credentials, client)
    handle = manager.open_channel(stream_writer=None, secret="key-1")
    manager.close_channel(handle.identity)

    text = event_loop.run_until_complete(bridge.invoke(handle.identity, "q"))

    assert text == MISSING_SESSION_MESSAGE
    assert len(client.calls) == 0


def test_provider_error_is_generic(manager, event_loop):
    client = FakeSearchClient(error=SearchProviderError("HTTP 403 secret-internal-detail", status_code=403))
    bridge = SearchBridge(manager.credentials, client)
    handle = manager.open_channel(stream_writer=None, secret="key-1")

    text = event_loop.run_until_complete(bridge.invoke(handle.identity, "q"))

    assert text == SEARCH_FAILED_MESSAGE
    assert "secret-internal-detail" not in text


def test_unexpected_provider_exception_does_not_escape(manager, event_loop):
    client = FakeSearchClient(error=KeyError("organic"))
    bridge = SearchBridge(manager.credentials, client)
    handle = manager.open_channel(stream_writer=None, secret="key-1")

    text = event_loop.run_until_complete(bridge.invoke(handle.identity, "q"))

    assert text == SEARCH_FAILED_MESSAGE


def test_non_2xx_from_real_client_is_generic_error(manager, event_loop):
    def handler(request):
        return httpx.Response(500, json={"message": "upstream exploded"})

    http_client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    bridge = SearchBridge(manager.credentials, SerperClient(http_client=http_client))
    handle = manager.open_channel(stream_writer=None, secret="key-1")

    async def test_logic():
        try:
            return await bridge.invoke(handle.identity, "q")
        finally:
            await http_client.aclose()

    text = event_loop.run_until_complete(test_logic())

    assert text == SEARCH_FAILED_MESSAGE
    assert "exploded" not in text


def test_teardown_during_search_does_not_abort_call(manager, event_loop):
    handle = manager.open_channel(stream_writer=None, secret="key-1")

    class SlowClient(FakeSearchClient):
        async def search(self, query, api_key, num=3):
            self.calls.append((query, api_key, num))
            manager.close_channel(handle.identity)
            await asyncio.sleep(0)
            return [SearchResult(title="A", link="http://a", snippet="s")]

    client = SlowClient()
    bridge = SearchBridge(manager.credentials, client)

    text = event_loop.run_until_complete(bridge.invoke(handle.identity, "q"))

    assert client.calls == [("q", "key-1", 3)]
    assert "1. A" in text
    # No new resolution is possible once the channel is gone.
    again = event_loop.run_until_complete(bridge.invoke(handle.identity, "q"))
    assert again == MISSING_SESSION_MESSAGE
    assert len(client.calls) == 1
