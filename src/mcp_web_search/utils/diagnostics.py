"""Operator-facing diagnostics. Nothing here is ever returned to a tool caller."""

from typing import Optional

import httpx


def mask_secret(secret: Optional[str]) -> str:
    """Show only the first and last four characters of a secret."""
    if not secret:
        return "<none>"
    if len(secret) > 8:
        return f"{secret[:4]}...{secret[-4:]}"
    return "***short-key***"


def describe_http_error(exc: Exception) -> str:
    """
    Build a multi-line description of a failed provider call for the log.

    Args:
        exc: The exception raised by httpx (or while decoding its response)

    Returns:
        str: Formatted diagnostic information
    """
    parts = [
        f"Error type        : {type(exc).__name__}",
        f"Error message     : {exc}",
    ]

    if isinstance(exc, httpx.HTTPStatusError):
        response = exc.response
        headers = dict(response.headers)
        parts += [
            f"Response status   : {response.status_code}",
            f"Response headers  : {headers}",
            f"Response body     : {response.text[:2000]}",
        ]
    elif isinstance(exc, httpx.RequestError):
        try:
            request = exc.request
            parts.append(f"Request           : {request.method} {request.url}")
        except RuntimeError:
            # .request is unset when the error was raised outside a request
            pass
        parts.append("No response received from server")

    return "\n".join(parts)


__all__ = ["mask_secret", "describe_http_error"]
