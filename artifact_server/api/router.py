from fastapi import APIRouter

from artifact_server.api.endpoints import auth, health, images, transcript, web_content
from artifact_server.api.endpoints.generators import build_generator_router
from artifact_server.generators import GENERATORS

api_router = APIRouter()
api_router.include_router(health.router, tags=["health"])
api_router.include_router(auth.router, tags=["auth"])
for _generator in GENERATORS:
    api_router.include_router(build_generator_router(_generator))
api_router.include_router(web_content.router, tags=["web-content"])
api_router.include_router(images.router, tags=["images"])
api_router.include_router(transcript.router, tags=["transcript"])
