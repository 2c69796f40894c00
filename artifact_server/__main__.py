import uvicorn

from artifact_server.config import settings


def main() -> None:
    uvicorn.run(
        "artifact_server.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
    )


if __name__ == "__main__":
    main()
