"""Fetch a web page and reduce it to its title and readable text."""

from __future__ import annotations

import re

import httpx
from bs4 import BeautifulSoup

from artifact_server.utils.exceptions import UpstreamError, UpstreamTimeoutError
from artifact_server.utils.logging import get_logger

logger = get_logger(__name__)

SERVICE = "Web content"

# Elements that never carry article text.
STRIP_TAGS = [
    "footer", "header", "nav", "script", "style", "link", "meta", "noscript",
    "img", "picture", "video", "audio", "iframe", "object", "embed", "param",
    "track", "source", "canvas", "map", "area", "svg", "math", "table",
    "caption", "colgroup", "col",
]

_WHITESPACE = re.compile(r"\s+")


def extract_content(html: str) -> dict[str, str]:
    """Return ``{"title", "content"}`` for an HTML document."""
    soup = BeautifulSoup(html, "html.parser")
    title = soup.title.get_text(strip=True) if soup.title else ""

    for tag in soup.find_all(STRIP_TAGS):
        tag.decompose()
    # <title> lives in <head>; keep it out of the body text.
    if soup.title:
        soup.title.decompose()

    text = _WHITESPACE.sub(" ", soup.get_text(" ")).strip()
    return {"title": title, "content": text}


class WebReader:
    """Async page fetcher.

    Parameters
    ----------
    timeout:
        Seconds to wait for the upstream server.
    transport:
        Optional httpx transport, e.g. ``httpx.MockTransport`` in tests.
    """

    def __init__(self, timeout: float = 30.0, transport: httpx.AsyncBaseTransport | None = None) -> None:
        self.timeout = timeout
        self.transport = transport

    async def fetch(self, url: str) -> dict[str, str]:
        """Download *url* and extract its title and text.

        Raises
        ------
        UpstreamTimeoutError
            The page did not answer within ``timeout`` seconds.
        UpstreamError
            Network failure or a non-2xx response.
        """
        try:
            async with httpx.AsyncClient(
                timeout=self.timeout,
                transport=self.transport,
                follow_redirects=True,
            ) as client:
                response = await client.get(url)
                response.raise_for_status()
        except httpx.TimeoutException as exc:
            logger.warning("web_content_timeout", url=url, timeout=self.timeout)
            raise UpstreamTimeoutError(SERVICE, self.timeout) from exc
        except httpx.HTTPStatusError as exc:
            logger.warning("web_content_http_error", url=url, status_code=exc.response.status_code)
            raise UpstreamError(SERVICE, f"upstream returned {exc.response.status_code}") from exc
        except httpx.HTTPError as exc:
            logger.warning("web_content_fetch_failed", url=url, error=str(exc))
            raise UpstreamError(SERVICE, str(exc)) from exc

        content = extract_content(response.text)
        logger.info("web_content_fetched", url=url, chars=len(content["content"]))
        return content
