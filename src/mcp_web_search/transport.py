"""
SSE transport for MCP with per-channel credentials.

A client opens `GET /sse`, optionally with an `X-Serper-Api-Key` header. The
lifecycle manager mints the channel identity, stores the key and registers the
channel before the first event is sent; the first event tells the client where
to post its JSON-RPC messages (`/messages?sessionId=<identity>`). Every POST is
correlated back to its channel by that identity and fed into the channel's MCP
session, whose answers go out on the event stream.

When the event stream ends, whether the client disconnected or the server shut
it down, the channel is torn down exactly once and later POSTs for the same
identity are rejected.
"""

from urllib.parse import quote

import anyio
from pydantic import ValidationError
from sse_starlette import EventSourceResponse
from starlette.requests import Request
from starlette.responses import PlainTextResponse, Response
from starlette.types import Receive, Scope, Send

import mcp.types as types
from mcp.shared.message import ServerMessageMetadata, SessionMessage

from .constants import (
    API_KEY_HEADER,
    API_KEY_HEADER_DISPLAY,
    MESSAGES_PATH,
    NO_TRANSPORT_MESSAGE,
    SESSION_QUERY_PARAM,
)
from .sessions import (
    ChannelLifecycleManager,
    InvocationRequest,
    RequestCorrelator,
    Unroutable,
)

import logging
logger = logging.getLogger(__name__)


class ChannelTransport:
    """
    Args:
        server: Low-level MCP server run once per channel
        lifecycle: Opens and tears down channels
        correlator: Resolves follow-up requests to channels
        endpoint: Path the client posts messages to
        require_api_key: Reject connections without the API key header
            instead of deferring the failure to the first tool call
    """

    def __init__(
        self,
        server,
        lifecycle: ChannelLifecycleManager,
        correlator: RequestCorrelator,
        endpoint: str = MESSAGES_PATH,
        require_api_key: bool = False,
    ):
        self.server = server
        self.lifecycle = lifecycle
        self.correlator = correlator
        self.endpoint = endpoint
        self.require_api_key = require_api_key

    async def handle_connect(self, scope: Scope, receive: Receive, send: Send) -> None:
        """ASGI handler for the long-lived event stream."""
        request = Request(scope, receive)
        api_key = request.headers.get(API_KEY_HEADER, "").strip()

        if not api_key and self.require_api_key:
            logger.error(f"Connection rejected: Missing {API_KEY_HEADER_DISPLAY} header.")
            response = PlainTextResponse(f"Missing {API_KEY_HEADER_DISPLAY} header", status_code=400)
            await response(scope, receive, send)
            return

        read_stream_writer, read_stream = anyio.create_memory_object_stream(0)
        write_stream, write_stream_reader = anyio.create_memory_object_stream(0)
        sse_stream_writer, sse_stream_reader = anyio.create_memory_object_stream(0)

        async with self.lifecycle.channel(read_stream_writer, api_key) as handle:
            root_path = scope.get("root_path", "")
            message_path = quote(root_path.rstrip("/") + self.endpoint)
            endpoint_uri = f"{message_path}?{SESSION_QUERY_PARAM}={handle.identity}"

            async def sse_writer():
                async with sse_stream_writer, write_stream_reader:
                    await sse_stream_writer.send({"event": "endpoint", "data": endpoint_uri})
                    async for session_message in write_stream_reader:
                        await sse_stream_writer.send({
                            "event": "message",
                            "data": session_message.message.model_dump_json(by_alias=True, exclude_none=True),
                        })

            async def response_wrapper():
                try:
                    await EventSourceResponse(
                        content=sse_stream_reader,
                        data_sender_callable=sse_writer,
                    )(scope, receive, send)
                finally:
                    self.lifecycle.close_channel(handle.identity)
                    await read_stream_writer.aclose()
                    await write_stream_reader.aclose()

            async with anyio.create_task_group() as tg:
                tg.start_soon(response_wrapper)
                try:
                    await self.server.run(
                        read_stream,
                        write_stream,
                        self.server.create_initialization_options(),
                    )
                except Exception:
                    logger.exception(f"MCP session for channel {handle.identity} failed")
                finally:
                    # The session is over; end the event stream too.
                    tg.cancel_scope.cancel()

    async def handle_post_message(self, request: Request) -> Response:
        """Endpoint for follow-up JSON-RPC messages."""
        identity = request.query_params.get(SESSION_QUERY_PARAM, "")

        resolved = self.correlator.resolve(identity)
        if isinstance(resolved, Unroutable):
            logger.warning(f"Rejected message for sessionId={identity!r}: {resolved.reason}")
            return PlainTextResponse(NO_TRANSPORT_MESSAGE, status_code=400)

        body = await request.body()
        try:
            message = types.JSONRPCMessage.model_validate_json(body)
        except ValidationError as e:
            logger.warning(f"Could not parse message for channel {identity}: {e}")
            return PlainTextResponse("Could not parse message", status_code=400)

        metadata = ServerMessageMetadata(
            request_context=InvocationRequest(identity=identity, http_request=request),
        )
        unroutable = await self.correlator.route(identity, SessionMessage(message, metadata=metadata))
        if unroutable is not None:
            return PlainTextResponse(NO_TRANSPORT_MESSAGE, status_code=400)

        return PlainTextResponse("Accepted", status_code=202)


class ASGIEndpoint:
    """Expose an async (scope, receive, send) callable as a Starlette route endpoint."""

    def __init__(self, handler):
        self.handler = handler

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        await self.handler(scope, receive, send)


__all__ = ["ChannelTransport", "ASGIEndpoint"]
