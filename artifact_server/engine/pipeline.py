"""Generation pipeline -- validate, render, store, sign.

The :class:`GenerationPipeline` is shared by every document endpoint:

1. Asks the generator to validate the request (no file is written on
   failure).
2. Renders the file bytes.
3. Writes them under a fresh timestamped name in the kind's directory.
4. Issues an access token and builds the tokenised download URL.

Only after step 3 has completed is a URL handed back, so a caller can
never receive a link to a file that is not yet on disk.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel

from artifact_server.auth.tokens import TokenService
from artifact_server.generators.base import BaseGenerator
from artifact_server.storage.store import ArtifactStore, StoredArtifact
from artifact_server.utils.exceptions import ArtifactServerError, RenderError
from artifact_server.utils.file_utils import generate_filename
from artifact_server.utils.logging import get_logger

logger = get_logger("engine.pipeline")

# Claims copied from the caller's token onto the download token.
FORWARDED_CLAIMS = ("sub", "email", "clientId")


class GenerationResult(BaseModel):
    """Outcome of one successful generation request.

    Attributes:
        download_url: Absolute URL carrying the access token as ``?token=``.
        artifact: Metadata of the file written to the store.
        token: The access token embedded in ``download_url``.
    """

    download_url: str
    artifact: StoredArtifact
    token: str


class GenerationPipeline:
    """Orchestrates one generation request end to end.

    Parameters
    ----------
    store:
        The :class:`ArtifactStore` receiving rendered files.
    tokens:
        The :class:`TokenService` that signs download tokens.
    public_base_url:
        Externally reachable origin used to build download URLs.
    """

    def __init__(self, store: ArtifactStore, tokens: TokenService, public_base_url: str) -> None:
        self.store = store
        self.tokens = tokens
        self.public_base_url = public_base_url.rstrip("/")

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def run(
        self,
        generator: BaseGenerator,
        payload: Any,
        claims: dict[str, Any] | None = None,
    ) -> GenerationResult:
        """Generate, persist and sign one artifact.

        Raises
        ------
        ValidationError
            The request is malformed; nothing was written.
        RenderError
            The renderer failed; nothing was written.
        FileStorageError
            The rendered bytes could not be persisted.
        """
        spec = generator.spec
        logger.info("generation_started", kind=generator.kind.value)

        generator.validate(payload)

        try:
            content = await generator.render(payload)
        except ArtifactServerError:
            raise
        except Exception as exc:
            logger.error("render_failed", kind=generator.kind.value, error=str(exc), exc_info=True)
            raise RenderError(spec.label, str(exc)) from exc

        file_name = generate_filename(spec.prefix, spec.extension)
        artifact = await self.store.write(generator.kind, file_name, content)

        token = self.tokens.issue(self._subject_claims(claims))
        download_url = self.download_url(spec.route, file_name, token)

        logger.info(
            "generation_completed",
            kind=generator.kind.value,
            file_name=file_name,
            size_bytes=artifact.size_bytes,
        )
        return GenerationResult(download_url=download_url, artifact=artifact, token=token)

    def download_url(self, route: str, file_name: str, token: str) -> str:
        return f"{self.public_base_url}/{route}/downloads/{file_name}?token={token}"

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _subject_claims(claims: dict[str, Any] | None) -> dict[str, Any]:
        subject = {k: claims[k] for k in FORWARDED_CLAIMS if claims and k in claims}
        return subject or {"sub": "anonymous"}
