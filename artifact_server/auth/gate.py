"""Download gate -- token extraction and verification for protected routes.

A token is accepted from three places, first match wins:

1. ``Authorization: Bearer <token>`` header
2. ``token`` query parameter
3. a ``[<token>]`` marker inside the final path component, on download
   routes only (browser downloads cannot set headers)
"""

from __future__ import annotations

from typing import Any

from fastapi import Request

from artifact_server.dependencies import get_settings, get_token_service
from artifact_server.utils.exceptions import NoTokenError
from artifact_server.utils.file_utils import find_token_marker, strip_token_marker

__all__ = ["extract_token", "strip_token_marker", "require_download_token", "require_bearer"]


def extract_token(
    authorization: str | None,
    query_token: str | None,
    path: str = "",
    *,
    allow_path_marker: bool = False,
) -> str | None:
    if authorization:
        parts = authorization.split(" ")
        if len(parts) == 2 and parts[0] == "Bearer" and parts[1]:
            return parts[1]

    if query_token:
        return query_token

    if allow_path_marker and path:
        return find_token_marker(path.rsplit("/", 1)[-1])

    return None


def _authorize(request: Request, *, allow_path_marker: bool) -> dict[str, Any]:
    token = extract_token(
        request.headers.get("authorization"),
        request.query_params.get("token"),
        request.url.path,
        allow_path_marker=allow_path_marker,
    )
    if not token:
        raise NoTokenError()

    claims = get_token_service(request).verify(token)
    request.state.claims = claims
    return claims


async def require_download_token(request: Request) -> dict[str, Any]:
    """Dependency for artifact download routes."""
    return _authorize(request, allow_path_marker=True)


async def require_bearer(request: Request) -> dict[str, Any]:
    """Dependency for API routes; path markers are not honoured here."""
    if not get_settings(request).protect_api:
        return {}
    return _authorize(request, allow_path_marker=False)
