import time
from datetime import datetime, timezone

from fastapi import APIRouter

from artifact_server.api.schemas.common import service_response

router = APIRouter()

_STARTED_AT = time.monotonic()


@router.get("/")
async def root():
    return service_response(True, "API is running", None, 200)


@router.get("/health-check")
async def health_check():
    return service_response(
        True,
        "Service is healthy",
        {
            "status": "OK",
            "timestamp": datetime.now(timezone.utc).isoformat(timespec="milliseconds"),
            "uptime": round(time.monotonic() - _STARTED_AT, 3),
        },
        200,
    )
