# tests/tests_sessions/test_store_and_registry.py
import asyncio

import anyio
import pytest

from mcp_web_search.errors import ChannelAlreadyRegisteredError, ChannelClosedError
from mcp_web_search.sessions import (
    ChannelHandle,
    ChannelRegistry,
    ChannelState,
    CredentialStore,
)

## We DO NOT want to use pytest-asyncio.
## Instead, use event_loop.run_until_complete()!


@pytest.fixture(scope="function")
def event_loop():
    loop = asyncio.new_event_loop()
    asyncio.set_event_loop(loop)
    yield loop
    loop.close()


# ------------------------------
# CredentialStore
# ------------------------------

def test_store_get_unknown_identity_returns_none():
    store = CredentialStore()
    assert store.get("never-inserted") is None
    assert "never-inserted" not in store


def test_store_put_overwrites_and_keeps_empty_secret():
    store = CredentialStore()
    store.put("a", "")
    assert store.get("a") == ""
    assert "a" in store

    store.put("a", "key-1")
    assert store.get("a") == "key-1"
    assert len(store) == 1


def test_store_remove_is_noop_for_missing_identity():
    store = CredentialStore()
    store.put("a", "k")
    store.remove("b")
    assert len(store) == 1
    store.remove("a")
    store.remove("a")
    assert len(store) == 0


# ------------------------------
# ChannelRegistry
# ------------------------------

def test_registry_register_lookup_remove():
    registry = ChannelRegistry()
    handle = ChannelHandle("a", stream_writer=None)
    registry.register("a", handle)

    assert registry.lookup("a") is handle
    assert registry.lookup("b") is None
    assert registry.remove("a") is handle
    assert registry.remove("a") is None
    assert len(registry) == 0


def test_registry_rejects_duplicate_identity():
    registry = ChannelRegistry()
    registry.register("a", ChannelHandle("a", stream_writer=None))
    with pytest.raises(ChannelAlreadyRegisteredError):
        registry.register("a", ChannelHandle("a", stream_writer=None))


def test_registry_entries_are_independent():
    registry = ChannelRegistry()
    a = ChannelHandle("a", stream_writer=None)
    b = ChannelHandle("b", stream_writer=None)
    registry.register("a", a)
    registry.register("b", b)

    registry.remove("a")

    assert registry.lookup("b") is b
    assert registry.identities() == ["b"]


# ------------------------------
# ChannelHandle
# ------------------------------

def test_handle_close_runs_callbacks_once():
    handle = ChannelHandle("a", stream_writer=None)
    handle.mark_open()
    seen = []
    handle.add_close_callback(lambda h: seen.append(h.identity))

    assert handle.close() is True
    assert handle.close() is False
    assert seen == ["a"]
    assert handle.state is ChannelState.CLOSED


def test_handle_close_survives_failing_callback():
    handle = ChannelHandle("a", stream_writer=None)
    seen = []

    def boom(_h):
        raise RuntimeError("callback failed")

    handle.add_close_callback(boom)
    handle.add_close_callback(lambda h: seen.append(h.identity))

    assert handle.close() is True
    assert seen == ["a"]


def test_handle_deliver_pushes_into_stream(event_loop):
    writer, reader = anyio.create_memory_object_stream(1)
    handle = ChannelHandle("a", writer)
    handle.mark_open()

    async def test_logic():
        await handle.deliver({"msg": 1})
        assert reader.receive_nowait() == {"msg": 1}

    event_loop.run_until_complete(test_logic())


def test_handle_deliver_after_close_raises(event_loop):
    writer, reader = anyio.create_memory_object_stream(1)
    handle = ChannelHandle("a", writer)
    handle.mark_open()
    handle.close()

    async def test_logic():
        with pytest.raises(ChannelClosedError):
            await handle.deliver({"msg": 1})

    event_loop.run_until_complete(test_logic())


def test_handle_deliver_to_stale_stream_raises(event_loop):
    writer, reader = anyio.create_memory_object_stream(1)
    handle = ChannelHandle("a", writer)
    handle.mark_open()
    reader.close()

    async def test_logic():
        with pytest.raises(ChannelClosedError):
            await handle.deliver({"msg": 1})

    event_loop.run_until_complete(test_logic())
