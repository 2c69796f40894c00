"""Tests for the upstream HTTP clients."""
import base64
import json
import time
from types import SimpleNamespace

import httpx
import pytest
from youtube_transcript_api import TranscriptsDisabled

from artifact_server.clients.stability import StabilityClient
from artifact_server.clients.transcript import TranscriptClient
from artifact_server.clients.web_reader import WebReader, extract_content
from artifact_server.utils.exceptions import UpstreamError, UpstreamTimeoutError

PAGE = """<html>
<head><title> Sample Page </title><style>body {color: red}</style></head>
<body>
<header>Site header</header>
<nav>Menu</nav>
<p>First   paragraph.</p>
<script>alert(1)</script>
<p>Second
paragraph.</p>
<table><tr><td>cell</td></tr></table>
<footer>Copyright</footer>
</body>
</html>"""


def test_extract_content_strips_noise():
    content = extract_content(PAGE)
    assert content["title"] == "Sample Page"
    assert content["content"] == "First paragraph. Second paragraph."


@pytest.mark.asyncio
async def test_web_reader_fetch():
    def handler(request):
        assert request.url == "https://example.com/article"
        return httpx.Response(200, text=PAGE)

    reader = WebReader(transport=httpx.MockTransport(handler))
    content = await reader.fetch("https://example.com/article")
    assert content["title"] == "Sample Page"


@pytest.mark.asyncio
async def test_web_reader_http_error():
    reader = WebReader(transport=httpx.MockTransport(lambda request: httpx.Response(503)))
    with pytest.raises(UpstreamError) as exc_info:
        await reader.fetch("https://example.com/")
    assert "503" in exc_info.value.message


@pytest.mark.asyncio
async def test_web_reader_timeout():
    def handler(request):
        raise httpx.ReadTimeout("slow", request=request)

    reader = WebReader(timeout=2, transport=httpx.MockTransport(handler))
    with pytest.raises(UpstreamTimeoutError):
        await reader.fetch("https://example.com/")


@pytest.mark.asyncio
async def test_stability_generate_image():
    png = b"\x89PNG\r\n\x1a\nfake"

    def handler(request):
        assert request.headers["authorization"] == "Bearer sk-test"
        body = json.loads(request.content)
        assert body["text_prompts"] == [{"text": "a cat"}]
        assert body["cfg_scale"] == 7
        assert body["samples"] == 1
        assert body["steps"] == 30
        return httpx.Response(200, json={"artifacts": [{"base64": base64.b64encode(png).decode()}]})

    client = StabilityClient(api_url="https://stability.test/generate", transport=httpx.MockTransport(handler))
    assert await client.generate_image("sk-test", "a cat") == png


@pytest.mark.asyncio
async def test_stability_error_includes_body():
    client = StabilityClient(
        api_url="https://stability.test/generate",
        transport=httpx.MockTransport(lambda request: httpx.Response(401, text="bad key")),
    )
    with pytest.raises(UpstreamError) as exc_info:
        await client.generate_image("sk-wrong", "a cat")
    assert exc_info.value.message == "Stability AI error: bad key"


class FakeTranscriptApi:
    def __init__(self, texts=None, error=None, delay=0.0):
        self.texts = texts or []
        self.error = error
        self.delay = delay
        self.requested = []

    def fetch(self, video_id):
        self.requested.append(video_id)
        if self.delay:
            time.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return [SimpleNamespace(text=text, start=i, duration=1.0) for i, text in enumerate(self.texts)]


@pytest.mark.asyncio
async def test_transcript_joins_entries():
    api = FakeTranscriptApi(["hello", "there", "world"])
    client = TranscriptClient(api=api)
    assert await client.fetch_text("abc123") == "hello there world"
    assert api.requested == ["abc123"]


@pytest.mark.asyncio
async def test_transcript_unavailable():
    client = TranscriptClient(api=FakeTranscriptApi(error=TranscriptsDisabled("abc123")))
    with pytest.raises(UpstreamError) as exc_info:
        await client.fetch_text("abc123")
    assert exc_info.value.message == "Transcript error: no transcript available for video 'abc123'"


@pytest.mark.asyncio
async def test_transcript_network_failure():
    client = TranscriptClient(api=FakeTranscriptApi(error=ConnectionError("connection reset")))
    with pytest.raises(UpstreamError) as exc_info:
        await client.fetch_text("abc123")
    assert "connection reset" in exc_info.value.message


@pytest.mark.asyncio
async def test_transcript_timeout():
    client = TranscriptClient(timeout=0.05, api=FakeTranscriptApi(["late"], delay=0.5))
    with pytest.raises(UpstreamTimeoutError):
        await client.fetch_text("abc123")
