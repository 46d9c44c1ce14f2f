"""
Supabase client initialization.

This module contains the database connection setup and exposes a single
`supabase` client object for other repository modules to import and use,
plus `execute`, the one place where Supabase failures become PersistenceError.

Environment variables:
- SUPABASE_URL: Your Supabase project URL (required)
- SUPABASE_KEY: Your Supabase API key (required; use a server-side key on the backend)
- SUPABASE_TIMEOUT_SECONDS: Per-request timeout for table and RPC calls (default: 10)
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any, List

import httpx
from dotenv import load_dotenv
from postgrest.exceptions import APIError

# The dependency is `supabase` (supabase-py). If your editor can't resolve it,
# install it in your environment: `pip install supabase`.
from supabase import Client, ClientOptions, create_client  # type: ignore[import-not-found]

from domain.errors import PersistenceError

logger = logging.getLogger(__name__)

# Load environment variables from the .env file at the project root
env_path = Path(__file__).parent.parent / ".env"
load_dotenv(dotenv_path=env_path)

# Read credentials from the environment to avoid hard-coding secrets in code.
SUPABASE_URL: str | None = os.getenv("SUPABASE_URL")
SUPABASE_KEY: str | None = os.getenv("SUPABASE_KEY")
SUPABASE_TIMEOUT_SECONDS: int = int(os.getenv("SUPABASE_TIMEOUT_SECONDS", "10"))

if not SUPABASE_URL:
    raise RuntimeError(
        "Missing environment variable: SUPABASE_URL. "
        "Set SUPABASE_URL to your Supabase project URL."
    )

if not SUPABASE_KEY:
    raise RuntimeError(
        "Missing environment variable: SUPABASE_KEY. "
        "Set SUPABASE_KEY to your Supabase API key."
    )

# Official Supabase Python client instance to be imported by other modules.
# A stalled request must not leave a sale "saving" forever.
supabase: Client = create_client(
    SUPABASE_URL,
    SUPABASE_KEY,
    options=ClientOptions(postgrest_client_timeout=SUPABASE_TIMEOUT_SECONDS),
)


def execute(query: Any, action: str) -> Any:
    """
    Execute a PostgREST query builder and return the response.

    Raises:
        PersistenceError: with the literal database message, prefixed by `action`
            (e.g. "Failed to record sale: duplicate key value ...").
    """

    try:
        response = query.execute()
    except APIError as e:
        logger.error(f"{action} failed", extra={"action": action, "error": e.message})
        raise PersistenceError(f"Failed to {action}: {e.message}") from e
    except httpx.HTTPError as e:
        logger.error(f"{action} failed", extra={"action": action, "error": str(e)})
        raise PersistenceError(f"Failed to {action}: {e}") from e

    error = getattr(response, "error", None)
    if error:
        raise PersistenceError(f"Failed to {action}: {error}")
    return response


def rows_of(response: Any) -> List[dict]:
    data = getattr(response, "data", None) or []
    if isinstance(data, dict):
        return [data]
    return list(data)


__all__ = ["supabase", "execute", "rows_of", "SUPABASE_TIMEOUT_SECONDS"]
