from __future__ import annotations

from typing import Any
from urllib.parse import urlparse

from fastapi import APIRouter, Depends, Query

from artifact_server.api.schemas.common import ServiceResponse, service_response
from artifact_server.api.schemas.content import WebContent
from artifact_server.auth.gate import require_bearer
from artifact_server.clients.web_reader import WebReader
from artifact_server.dependencies import get_web_reader
from artifact_server.utils.exceptions import ValidationError

router = APIRouter()


@router.get(
    "/web-content",
    response_model=ServiceResponse,
    summary="Fetch a web page and return its title and readable text",
)
async def web_content(
    url: str = Query(..., min_length=1),
    _claims: dict[str, Any] = Depends(require_bearer),
    reader: WebReader = Depends(get_web_reader),
):
    if urlparse(url).scheme not in ("http", "https"):
        raise ValidationError("URL must be an http(s) address")

    content = WebContent(**await reader.fetch(url))
    return service_response(True, "Content fetched successfully", content.model_dump(), 200)
