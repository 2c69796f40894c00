"""FastAPI dependency functions for injection into endpoint handlers.

Long-lived services (artifact store, token service, pipeline, sweeper,
upstream clients) are built once by :func:`init_app_state` during the
lifespan and stored on ``app.state``; the getters here simply look them up.
"""

from __future__ import annotations

from fastapi import FastAPI, Request

from artifact_server.auth.tokens import TokenService
from artifact_server.clients.stability import StabilityClient
from artifact_server.clients.transcript import TranscriptClient
from artifact_server.clients.web_reader import WebReader
from artifact_server.config import Settings
from artifact_server.engine.pipeline import GenerationPipeline
from artifact_server.storage.store import ArtifactStore
from artifact_server.storage.sweeper import RetentionSweeper
from artifact_server.utils.logging import get_logger

logger = get_logger(__name__)


def init_app_state(app: FastAPI, settings: Settings) -> None:
    """Build the shared services and attach them to ``app.state``."""
    store = ArtifactStore(settings.exports_dir)
    store.ensure_all()

    tokens = TokenService(
        settings.jwt_secret,
        algorithm=settings.jwt_algorithm,
        default_expires_in=settings.token_expires_in,
    )

    app.state.settings = settings
    app.state.store = store
    app.state.tokens = tokens
    app.state.pipeline = GenerationPipeline(store, tokens, settings.public_base_url)
    app.state.sweeper = RetentionSweeper(
        store,
        retention=settings.retention,
        schedule=settings.sweep_schedule,
    )
    app.state.web_reader = WebReader(timeout=settings.upstream_timeout)
    app.state.stability = StabilityClient(
        api_url=settings.stability_api_url,
        timeout=settings.upstream_timeout,
    )
    app.state.transcripts = TranscriptClient(timeout=settings.upstream_timeout)
    logger.info("app_state_initialized", exports_dir=settings.exports_dir)


# ---------------------------------------------------------------------------
# Getters
# ---------------------------------------------------------------------------

def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_store(request: Request) -> ArtifactStore:
    return request.app.state.store


def get_token_service(request: Request) -> TokenService:
    return request.app.state.tokens


def get_pipeline(request: Request) -> GenerationPipeline:
    return request.app.state.pipeline


def get_web_reader(request: Request) -> WebReader:
    return request.app.state.web_reader


def get_stability_client(request: Request) -> StabilityClient:
    return request.app.state.stability


def get_transcript_client(request: Request) -> TranscriptClient:
    return request.app.state.transcripts
