"""Image generation and public image serving."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends
from fastapi.responses import FileResponse

from artifact_server.api.schemas.common import ServiceResponse, service_response
from artifact_server.api.schemas.content import ImageRequest, ImageResult
from artifact_server.auth.gate import require_bearer
from artifact_server.clients.stability import StabilityClient
from artifact_server.config import Settings
from artifact_server.dependencies import get_settings, get_stability_client, get_store
from artifact_server.storage.store import KIND_SPECS, ArtifactKind, ArtifactStore
from artifact_server.utils.file_utils import generate_filename
from artifact_server.utils.logging import get_logger

logger = get_logger(__name__)

router = APIRouter()

IMAGE_SPEC = KIND_SPECS[ArtifactKind.IMAGE]


@router.post(
    "/stability/generate-image",
    response_model=ServiceResponse,
    summary="Generate an image from a text prompt",
)
async def generate_image(
    body: ImageRequest,
    _claims: dict[str, Any] = Depends(require_bearer),
    client: StabilityClient = Depends(get_stability_client),
    store: ArtifactStore = Depends(get_store),
    settings: Settings = Depends(get_settings),
):
    png = await client.generate_image(body.api_key, body.prompt)

    file_name = generate_filename(IMAGE_SPEC.prefix, IMAGE_SPEC.extension)
    await store.write(ArtifactKind.IMAGE, file_name, png)

    image_url = f"{settings.public_base_url.rstrip('/')}/{IMAGE_SPEC.route}/{file_name}"
    result = ImageResult(image_url=image_url)
    return service_response(True, "Image generated successfully", result.model_dump(by_alias=True), 200)


@router.get(
    "/images/{file_name:path}",
    response_class=FileResponse,
    summary="Serve a generated image",
)
async def get_image(
    file_name: str,
    store: ArtifactStore = Depends(get_store),
):
    path = store.resolve(ArtifactKind.IMAGE, file_name)
    return FileResponse(path, media_type=IMAGE_SPEC.content_type)
