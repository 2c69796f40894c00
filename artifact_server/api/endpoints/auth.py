"""Login and token verification endpoints."""

from __future__ import annotations

import secrets
import time
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, Request

from artifact_server.api.schemas.auth import LoginRequest, TokenResponse
from artifact_server.api.schemas.common import ServiceResponse, service_response
from artifact_server.auth.gate import extract_token
from artifact_server.auth.tokens import TokenService
from artifact_server.config import Settings
from artifact_server.dependencies import get_settings, get_token_service
from artifact_server.utils.exceptions import InvalidCredentialsError, NoTokenError, ValidationError
from artifact_server.utils.logging import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/auth")

CLIENT_ID = "powerpoint-plugin"


def _check_credentials(body: LoginRequest, settings: Settings) -> None:
    if not body.username or not body.password:
        raise ValidationError("Username and password are required")

    # Without configured credentials any non-empty pair is accepted.
    if not settings.auth_username and not settings.auth_password:
        return

    user_ok = secrets.compare_digest(body.username, settings.auth_username)
    password_ok = secrets.compare_digest(body.password, settings.auth_password)
    if not (user_ok and password_ok):
        logger.warning("login_rejected", username=body.username)
        raise InvalidCredentialsError()


@router.post(
    "/login",
    response_model=ServiceResponse,
    summary="Exchange credentials for an access token",
)
async def login(
    body: LoginRequest,
    settings: Settings = Depends(get_settings),
    tokens: TokenService = Depends(get_token_service),
):
    _check_credentials(body, settings)

    now = datetime.now(timezone.utc)
    token = tokens.issue(
        {
            "sub": str(int(time.time() * 1000)),
            "email": body.username,
            "loginTime": now.isoformat(timespec="milliseconds"),
            "clientId": CLIENT_ID,
        }
    )
    logger.info("login_succeeded", username=body.username)

    result = TokenResponse(
        access_token=token,
        expires_in=int(tokens.default_expires_in.total_seconds()),
        generated_at=now.isoformat(timespec="milliseconds"),
    )
    return service_response(True, "Login successful", result.model_dump(), 200)


@router.post(
    "/verify",
    response_model=ServiceResponse,
    summary="Check a bearer token and return its claims",
)
async def verify(
    request: Request,
    tokens: TokenService = Depends(get_token_service),
):
    token = extract_token(request.headers.get("authorization"), None)
    if not token:
        raise NoTokenError()

    claims = tokens.verify(token)
    return service_response(True, "Token is valid", {"valid": True, "claims": claims}, 200)
