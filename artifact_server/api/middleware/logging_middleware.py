"""Request / response logging middleware using structlog.

Logs each request with method, path, status code, and timing.  Access
tokens are never logged: the ``token`` query parameter is masked and
``[token]`` markers are cut out of the path.
"""

from __future__ import annotations

import time

import structlog
from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.responses import Response

from artifact_server.utils.file_utils import strip_token_marker
from artifact_server.utils.logging import get_logger

logger = get_logger(__name__)


def _safe_query(request: Request) -> str:
    if not request.url.query:
        return ""
    return "&".join(
        f"{key}=***" if key == "token" else f"{key}={value}"
        for key, value in request.query_params.multi_items()
    )


class LoggingMiddleware(BaseHTTPMiddleware):
    """Logs every HTTP request with timing and response status."""

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        start = time.perf_counter()
        method = request.method
        path = strip_token_marker(request.url.path)

        request_id = request.headers.get("x-request-id", "")
        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(request_id=request_id)

        logger.info(
            "request_started",
            method=method,
            path=path,
            query=_safe_query(request),
        )

        try:
            response = await call_next(request)
        except Exception:
            elapsed_ms = round((time.perf_counter() - start) * 1000, 2)
            logger.error(
                "request_failed",
                method=method,
                path=path,
                elapsed_ms=elapsed_ms,
            )
            raise

        elapsed_ms = round((time.perf_counter() - start) * 1000, 2)
        status_code = response.status_code

        log_fn = logger.info if status_code < 400 else logger.warning
        log_fn(
            "request_completed",
            method=method,
            path=path,
            status_code=status_code,
            elapsed_ms=elapsed_ms,
        )
        return response
