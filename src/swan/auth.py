"""API key access gate for the SWAN relay.

Empty key = development mode (no auth required).
Non-empty key = must match X-API-Key header.
"""

from __future__ import annotations

import hmac

from fastapi import Security
from fastapi.security import APIKeyHeader

from swan.errors import AuthorizationError

_api_key_header = APIKeyHeader(name="X-API-Key", auto_error=False)


def make_access_checker(expected_key: str):
    """Return a FastAPI dependency that checks the API key.

    If expected_key is empty, all requests are allowed (development mode).
    The dependency runs before the route body, so a denied request never
    reaches the storage network.
    """

    async def check_access(
        api_key: str | None = Security(_api_key_header),
    ) -> str | None:
        if not expected_key:
            return None
        if api_key is None or not hmac.compare_digest(
            api_key.encode("utf-8"), expected_key.encode("utf-8")
        ):
            raise AuthorizationError("Not authorized")
        return api_key

    return check_access
