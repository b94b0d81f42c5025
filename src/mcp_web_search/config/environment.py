"""Environment configuration and validation."""

import os

from dotenv import load_dotenv

from ..constants import DEFAULT_PORT, SERPER_SEARCH_URL, SEARCH_TIMEOUT_SECS

load_dotenv()


def parse_bool(value, default: bool = False) -> bool:
    if value is None:
        return default
    return str(value).strip().lower() in ("1", "true", "yes", "on")


def get_env_config() -> dict:
    """
    Read environment variables and validate them.

    Optional:   PORT (default 3000)
                HOST (default 0.0.0.0)
                SERPER_SEARCH_URL
                MWS_SEARCH_TIMEOUT (seconds, default 10)
                MWS_REQUIRE_API_KEY (reject connections without the
                    X-Serper-Api-Key header instead of deferring the
                    failure to the first tool call; default 0)
                MWS_LOG_LEVEL (default INFO)
    """
    port_env = (os.getenv("PORT") or "").strip()
    if not port_env:
        port = DEFAULT_PORT
    elif port_env.isdigit() and 0 < int(port_env) < 65536:
        port = int(port_env)
    else:
        raise EnvironmentError(f"PORT must be a number between 1 and 65535, got {port_env!r}.")

    timeout_env = (os.getenv("MWS_SEARCH_TIMEOUT") or "").strip()
    try:
        search_timeout = float(timeout_env) if timeout_env else SEARCH_TIMEOUT_SECS
    except ValueError:
        raise EnvironmentError(f"MWS_SEARCH_TIMEOUT must be a number of seconds, got {timeout_env!r}.")

    return {
        "host": (os.getenv("HOST") or "").strip() or "0.0.0.0",
        "port": port,
        "search_url": (os.getenv("SERPER_SEARCH_URL") or "").strip() or SERPER_SEARCH_URL,
        "search_timeout": search_timeout,
        "require_api_key": parse_bool(os.getenv("MWS_REQUIRE_API_KEY")),
        "log_level": ((os.getenv("MWS_LOG_LEVEL") or "").strip() or "INFO").upper(),
    }
