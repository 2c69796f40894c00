"""Global error-handling middleware.

Catches application-specific exceptions and translates them into the
standard response envelope with the appropriate HTTP status code.
"""

from __future__ import annotations

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.responses import Response

from artifact_server.api.schemas.common import service_response
from artifact_server.utils.exceptions import (
    ArtifactNotFoundError,
    ArtifactServerError,
    AuthError,
    FileStorageError,
    PathTraversalError,
    RenderError,
    UpstreamError,
    ValidationError,
)
from artifact_server.utils.file_utils import strip_token_marker
from artifact_server.utils.logging import get_logger

logger = get_logger(__name__)

# Map exception types to HTTP status codes; subclasses inherit their base's code.
_STATUS_MAP: dict[type, int] = {
    ValidationError: 400,
    AuthError: 401,
    PathTraversalError: 403,
    ArtifactNotFoundError: 404,
    RenderError: 500,
    FileStorageError: 500,
    UpstreamError: 500,
}


def status_for(exc: ArtifactServerError) -> int:
    for cls in type(exc).__mro__:
        if cls in _STATUS_MAP:
            return _STATUS_MAP[cls]
    return 500


class ErrorHandlerMiddleware(BaseHTTPMiddleware):
    """Middleware that wraps every request in a try/except and converts
    known exceptions to enveloped error responses.

    Unknown exceptions are logged and returned as HTTP 500 without
    internal details.
    """

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        try:
            return await call_next(request)

        except ArtifactServerError as exc:
            status_code = status_for(exc)
            logger.warning(
                "handled_error",
                error_type=type(exc).__name__,
                status_code=status_code,
                detail=exc.message,
                path=strip_token_marker(request.url.path),
            )
            return service_response(False, exc.message, exc.response_object, status_code)

        except Exception as exc:
            logger.error(
                "unhandled_error",
                error_type=type(exc).__name__,
                detail=str(exc),
                path=strip_token_marker(request.url.path),
                exc_info=True,
            )
            return service_response(
                False,
                "An unexpected error occurred.  Please try again later.",
                None,
                500,
            )
