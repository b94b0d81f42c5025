#region Overview
"""
## How Multiple Agents are Handled

Every agent opens its own SSE channel on `GET /sse` and passes its own Serper
API key in the `X-Serper-Api-Key` header. The key belongs to that channel only:
it is stored under the channel identity when the channel opens and removed when
the channel closes. Agents never see each other's keys and a closed channel's
identity is never accepted again.

A connection without the header is accepted by default. The agent learns about
the missing key from the `search_web` result the first time it searches. Set
MWS_REQUIRE_API_KEY=1 to reject such connections with HTTP 400 instead.

## Required Tools

```
search_web
```
> Search the web for the given query.
>
>     Args:
>         query (str): The search query to look up on the web.
>
>     Returns:
>         str: The top three results (title, link, snippet), or a one-line
>         error description.
"""
#endregion

#region Imports
import argparse
import logging
from contextlib import asynccontextmanager
from typing import Annotated, Optional

import uvicorn
from mcp.server.fastmcp import Context, FastMCP
from pydantic import Field
from starlette.applications import Starlette
from starlette.routing import Route
#endregion

#region Import from your package
from mcp_web_search.config import get_env_config
from mcp_web_search.constants import API_KEY_HEADER_DISPLAY, MESSAGES_PATH, SSE_PATH
from mcp_web_search.context import ServerContext, get_context, set_context
from mcp_web_search.decorators import tool_envelope
from mcp_web_search.sessions import InvocationRequest
from mcp_web_search.transport import ASGIEndpoint, ChannelTransport
#endregion

#region Logger
logger = logging.getLogger(__name__)
#endregion

#region Helper Functions
def channel_identity(ctx: Context) -> Optional[str]:
    """Return the identity of the channel a tool call arrived on, or None."""
    try:
        request = ctx.request_context.request
    except (ValueError, AttributeError):
        return None
    if isinstance(request, InvocationRequest):
        return request.identity
    return None
#endregion

#region FastMCP Initialization
mcp = FastMCP("mcp_web_search")
#endregion

#region Tools
@mcp.tool()
@tool_envelope
async def search_web(
    query: Annotated[str, Field(description="The search query to look up on the web")],
    ctx: Context,
) -> str:
    """Search the web for the given query"""
    return await get_context().bridge.invoke(channel_identity(ctx), query)
#endregion

#region App
def build_app(ctx: Optional[ServerContext] = None) -> Starlette:
    """Assemble the Starlette app serving the SSE and message endpoints."""
    ctx = set_context(ctx) if ctx is not None else get_context()
    transport = ChannelTransport(
        mcp._mcp_server,
        ctx.lifecycle,
        ctx.correlator,
        endpoint=MESSAGES_PATH,
        require_api_key=ctx.require_api_key,
    )

    @asynccontextmanager
    async def lifespan(app):
        try:
            yield
        finally:
            await ctx.search_client.aclose()

    return Starlette(
        routes=[
            Route(SSE_PATH, endpoint=ASGIEndpoint(transport.handle_connect), methods=["GET"]),
            Route(MESSAGES_PATH, endpoint=transport.handle_post_message, methods=["POST"]),
        ],
        lifespan=lifespan,
    )
#endregion

#region Entry Point
def main() -> None:
    config = get_env_config()

    parser = argparse.ArgumentParser(description="MCP web search server (SSE)")
    parser.add_argument("--host", default=config["host"])
    parser.add_argument("--port", type=int, default=config["port"])
    args = parser.parse_args()

    logging.basicConfig(
        level=getattr(logging, config["log_level"], logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    logger.info("----------------------------------------")
    logger.info("SERVER STARTUP - ENVIRONMENT CHECK")
    logger.info("----------------------------------------")
    logger.info(f"PORT: {args.port}")
    logger.info(f"Search endpoint: {config['search_url']}")
    logger.info(f"Server expects '{API_KEY_HEADER_DISPLAY}' header for API key.")
    if config["require_api_key"]:
        logger.info("Connections without the API key header are rejected.")
    logger.info("----------------------------------------")

    app = build_app()
    logger.info(f"MCP Server running on port {args.port}")
    uvicorn.run(app, host=args.host, port=args.port, log_level=config["log_level"].lower())


if __name__ == "__main__":
    main()
#endregion
