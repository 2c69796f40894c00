"""Common response envelope used across all API endpoints."""

from typing import Any

from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class ServiceResponse(BaseModel):
    """Standard envelope returned by every endpoint, success or failure."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    success: bool
    message: str
    response_object: Any = None
    status_code: int


def service_response(
    success: bool,
    message: str,
    response_object: Any = None,
    status_code: int = 200,
) -> JSONResponse:
    """Wrap a result in the envelope; the HTTP status mirrors ``statusCode``."""
    envelope = ServiceResponse(
        success=success,
        message=message,
        response_object=response_object,
        status_code=status_code,
    )
    return JSONResponse(
        status_code=status_code,
        content=jsonable_encoder(envelope, by_alias=True),
    )
