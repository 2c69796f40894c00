from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException

from artifact_server.api.middleware.error_handler import ErrorHandlerMiddleware
from artifact_server.api.middleware.logging_middleware import LoggingMiddleware
from artifact_server.api.router import api_router
from artifact_server.api.schemas.common import service_response
from artifact_server.config import Settings, settings as default_settings
from artifact_server.dependencies import init_app_state
from artifact_server.utils.logging import get_logger, setup_logging


def _describe_validation_error(exc: RequestValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return "[Validation Error] Invalid request"
    first = errors[0]
    location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    detail = f"{location}: {first.get('msg', 'invalid value')}" if location else first.get("msg", "")
    return f"[Validation Error] {detail}"


async def _validation_exception_handler(request: Request, exc: RequestValidationError):
    return service_response(False, _describe_validation_error(exc), None, 400)


async def _http_exception_handler(request: Request, exc: StarletteHTTPException):
    return service_response(False, str(exc.detail), None, exc.status_code)


def create_app(settings: Settings | None = None) -> FastAPI:
    settings = settings or default_settings

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        setup_logging(debug=settings.debug)
        logger = get_logger("startup")
        logger.info("Starting artifact server", version="0.1.0")

        if not hasattr(app.state, "store"):
            init_app_state(app, settings)
        app.state.sweeper.start()

        yield

        app.state.sweeper.shutdown()
        logger.info("Shutting down")

    app = FastAPI(
        title="Artifact Server",
        description="Office document generation with expiring, token-gated downloads",
        version="0.1.0",
        lifespan=lifespan,
    )

    # Middleware is applied in reverse order -- outermost first.
    # 1. CORS (outermost -- handles preflight before anything else)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    # 2. Error handler (catches exceptions from inner layers)
    app.add_middleware(ErrorHandlerMiddleware)
    # 3. Request/response logger (innermost -- logs timing around handler)
    app.add_middleware(LoggingMiddleware)

    app.add_exception_handler(RequestValidationError, _validation_exception_handler)
    app.add_exception_handler(StarletteHTTPException, _http_exception_handler)

    app.include_router(api_router)

    return app


app = create_app()
