"""Generation and download endpoints, one router per document kind.

Each generator gets the same pair of routes under its kind's prefix:

* ``POST /{route}/generate`` -- render, store and return a tokenised
  download URL.
* ``GET /{route}/downloads/{file_name}`` -- serve the stored file behind
  the download gate.
"""

from typing import Any

from fastapi import APIRouter, Depends
from fastapi.responses import FileResponse, JSONResponse

from artifact_server.api.schemas.common import ServiceResponse, service_response
from artifact_server.auth.gate import require_bearer, require_download_token, strip_token_marker
from artifact_server.dependencies import get_pipeline, get_store
from artifact_server.engine.pipeline import GenerationPipeline
from artifact_server.generators.base import BaseGenerator
from artifact_server.storage.store import ArtifactStore
from artifact_server.utils.logging import get_logger

logger = get_logger(__name__)


def build_generator_router(generator: BaseGenerator) -> APIRouter:
    """Create the ``/generate`` and ``/downloads`` routes for *generator*."""
    spec = generator.spec
    request_model = generator.request_model
    router = APIRouter(prefix=f"/{spec.route}", tags=[spec.label])

    @router.post(
        "/generate",
        response_model=ServiceResponse,
        summary=f"Generate a {spec.extension} file",
        responses={
            400: {"model": ServiceResponse, "description": "Invalid request"},
            401: {"model": ServiceResponse, "description": "Missing or invalid token"},
            500: {"model": ServiceResponse, "description": "Generation failed"},
        },
    )
    async def generate(
        payload: request_model,  # type: ignore[valid-type]
        claims: dict[str, Any] = Depends(require_bearer),
        pipeline: GenerationPipeline = Depends(get_pipeline),
    ) -> JSONResponse:
        result = await pipeline.run(generator, payload, claims)
        return service_response(
            True,
            "File generated successfully",
            {"downloadUrl": result.download_url},
            200,
        )

    @router.get(
        "/downloads/{file_name:path}",
        response_class=FileResponse,
        summary=f"Download a generated {spec.extension} file",
        responses={
            401: {"model": ServiceResponse, "description": "Missing or invalid token"},
            403: {"model": ServiceResponse, "description": "Path escapes the export directory"},
            404: {"model": ServiceResponse, "description": "File not found or expired"},
        },
    )
    async def download(
        file_name: str,
        _claims: dict[str, Any] = Depends(require_download_token),
        store: ArtifactStore = Depends(get_store),
    ) -> FileResponse:
        name = strip_token_marker(file_name)
        path = store.resolve(generator.kind, name)
        logger.info("artifact_served", kind=generator.kind.value, file_name=name)
        return FileResponse(path, media_type=spec.content_type, filename=name)

    return router
