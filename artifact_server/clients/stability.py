"""Text-to-image client for the Stability AI REST API."""

from __future__ import annotations

import base64

import httpx

from artifact_server.utils.exceptions import UpstreamError, UpstreamTimeoutError
from artifact_server.utils.logging import get_logger

logger = get_logger(__name__)

SERVICE = "Stability AI"

DEFAULT_URL = "https://api.stability.ai/v1/generation/stable-diffusion-v1-6/text-to-image"


class StabilityClient:
    """Generates one PNG per prompt using the caller's own API key."""

    def __init__(
        self,
        api_url: str = DEFAULT_URL,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.api_url = api_url
        self.timeout = timeout
        self.transport = transport

    async def generate_image(self, api_key: str, prompt: str) -> bytes:
        """Return the decoded PNG bytes of the first generated image.

        Raises
        ------
        UpstreamTimeoutError
            Stability did not answer within ``timeout`` seconds.
        UpstreamError
            Non-2xx response (its body is included) or an unusable payload.
        """
        body = {
            "text_prompts": [{"text": prompt}],
            "cfg_scale": 7,
            "samples": 1,
            "steps": 30,
        }
        headers = {
            "Content-Type": "application/json",
            "Accept": "application/json",
            "Authorization": f"Bearer {api_key}",
        }

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                response = await client.post(self.api_url, json=body, headers=headers)
        except httpx.TimeoutException as exc:
            logger.warning("stability_timeout", timeout=self.timeout)
            raise UpstreamTimeoutError(SERVICE, self.timeout) from exc
        except httpx.HTTPError as exc:
            logger.warning("stability_request_failed", error=str(exc))
            raise UpstreamError(SERVICE, str(exc)) from exc

        if response.is_error:
            logger.warning("stability_rejected", status_code=response.status_code)
            raise UpstreamError(SERVICE, response.text)

        try:
            encoded = response.json()["artifacts"][0]["base64"]
            return base64.b64decode(encoded, validate=True)
        except (ValueError, KeyError, IndexError, TypeError) as exc:
            raise UpstreamError(SERVICE, "response did not contain an image") from exc
