"""Fetch the caption track of a video and flatten it to plain text."""

from __future__ import annotations

import asyncio
from typing import Any

from youtube_transcript_api import CouldNotRetrieveTranscript, YouTubeTranscriptApi

from artifact_server.utils.exceptions import UpstreamError, UpstreamTimeoutError
from artifact_server.utils.logging import get_logger

logger = get_logger(__name__)

SERVICE = "Transcript"


class TranscriptClient:
    """Async wrapper around the synchronous transcript API.

    Parameters
    ----------
    timeout:
        Seconds to wait for the transcript before giving up.
    api:
        Object exposing ``fetch(video_id)``; defaults to
        :class:`YouTubeTranscriptApi`.  Tests pass a stub.
    """

    def __init__(self, timeout: float = 30.0, api: Any | None = None) -> None:
        self.timeout = timeout
        self.api = api if api is not None else YouTubeTranscriptApi()

    def _fetch_text(self, video_id: str) -> str:
        return " ".join(snippet.text for snippet in self.api.fetch(video_id))

    async def fetch_text(self, video_id: str) -> str:
        """Return every caption entry of *video_id* joined with spaces.

        Raises
        ------
        UpstreamTimeoutError
            No transcript within ``timeout`` seconds.
        UpstreamError
            The video has no retrievable transcript, or the request failed.
        """
        loop = asyncio.get_running_loop()
        try:
            text = await asyncio.wait_for(
                loop.run_in_executor(None, self._fetch_text, video_id),
                timeout=self.timeout,
            )
        except asyncio.TimeoutError as exc:
            logger.warning("transcript_timeout", video_id=video_id, timeout=self.timeout)
            raise UpstreamTimeoutError(SERVICE, self.timeout) from exc
        except CouldNotRetrieveTranscript as exc:
            logger.warning("transcript_unavailable", video_id=video_id, reason=type(exc).__name__)
            raise UpstreamError(SERVICE, f"no transcript available for video '{video_id}'") from exc
        except OSError as exc:
            # requests' exceptions derive from IOError
            logger.warning("transcript_fetch_failed", video_id=video_id, error=str(exc))
            raise UpstreamError(SERVICE, str(exc)) from exc

        logger.info("transcript_fetched", video_id=video_id, chars=len(text))
        return text
