from __future__ import annotations

from typing import Any, Optional

from fastapi import APIRouter, Depends, Query

from artifact_server.api.schemas.common import ServiceResponse, service_response
from artifact_server.api.schemas.content import Transcript
from artifact_server.auth.gate import require_bearer
from artifact_server.clients.transcript import TranscriptClient
from artifact_server.dependencies import get_transcript_client
from artifact_server.utils.exceptions import ValidationError

router = APIRouter(prefix="/youtube-transcript")


@router.get(
    "/get-transcript",
    response_model=ServiceResponse,
    summary="Return the transcript of a video as a single string",
)
async def get_transcript(
    video_id: Optional[str] = Query(None, alias="videoId"),
    _claims: dict[str, Any] = Depends(require_bearer),
    client: TranscriptClient = Depends(get_transcript_client),
):
    if not video_id or not video_id.strip():
        raise ValidationError("Please provide a videoId query parameter.")

    transcript = Transcript(text_only=await client.fetch_text(video_id.strip()))
    return service_response(
        True, "Transcript fetched successfully", transcript.model_dump(by_alias=True), 200
    )
