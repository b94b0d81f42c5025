# mcp_web_search/decorators/envelope.py

import os
import json
import asyncio
import inspect
import functools
import logging
from typing import Any, Callable


__all__ = [
    "tool_envelope",
    "INTERNAL_ERROR_MESSAGE",
]

logger = logging.getLogger(__name__)

INTERNAL_ERROR_MESSAGE = "Error: Internal server error."


def tool_envelope(func: Callable):
    """
    Minimal decorator for MCP tool functions:
      - Works with both async and sync callables.
      - On success: ensures the return value is a string (json.dumps for non-strings).
      - On error: logs the traceback and returns a one-line error text, so the
        agent always gets a parseable answer instead of a protocol error.
    Environment:
      - Set MWS_TOOL_ERRORS_DETAIL=1 to append the exception type and message
        to the error text. Leave it off in production; it can leak upstream details.
    """
    include_detail = os.getenv("MWS_TOOL_ERRORS_DETAIL", "0") in ("1", "true", "True")

    def _normalize(value: Any) -> str:
        if value is None:
            return ""
        if isinstance(value, str):
            return value
        if isinstance(value, bytes):
            return value.decode("utf-8", "replace")
        try:
            return json.dumps(value, ensure_ascii=False, default=lambda o: getattr(o, "__dict__", repr(o)))
        except (TypeError, ValueError):
            return str(value)

    def _error_text(err: Exception) -> str:
        logger.exception(f"Tool {func.__name__} failed")
        if include_detail:
            return f"{INTERNAL_ERROR_MESSAGE} Details: {err.__class__.__name__}: {err}"
        return INTERNAL_ERROR_MESSAGE

    if inspect.iscoroutinefunction(func):
        @functools.wraps(func)
        async def wrapper(*args, **kwargs):
            try:
                result = await func(*args, **kwargs)
            except asyncio.CancelledError:
                # Preserve cooperative cancellation semantics
                raise
            except Exception as e:
                return _error_text(e)
            return _normalize(result)
        return wrapper
    else:
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            try:
                result = func(*args, **kwargs)
            except Exception as e:
                return _error_text(e)
            return _normalize(result)
        return wrapper
