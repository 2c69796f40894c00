"""Tests for the generation pipeline."""
import re

import pytest

from artifact_server.auth.tokens import TokenService
from artifact_server.engine.pipeline import GenerationPipeline
from artifact_server.generators.docx_generator import DOCXGenerator
from artifact_server.generators.models import WordRequest
from artifact_server.storage.store import ArtifactKind
from artifact_server.utils.exceptions import RenderError, ValidationError


class ExplodingGenerator(DOCXGenerator):
    def build(self, payload):
        raise RuntimeError("disk on fire")


@pytest.fixture
def tokens():
    return TokenService("pipeline-secret")


@pytest.fixture
def pipeline(store, tokens):
    return GenerationPipeline(store, tokens, "http://files.example.com/")


@pytest.mark.asyncio
async def test_run_writes_file_and_signs_url(pipeline, store, tokens, word_payload):
    result = await pipeline.run(
        DOCXGenerator(),
        WordRequest.model_validate(word_payload),
        {"sub": "7", "email": "x@y.z", "loginTime": "ignored"},
    )

    assert re.match(
        r"^http://files\.example\.com/word-generator/downloads/word-file-\d+\.docx\?token=.+$",
        result.download_url,
    )
    assert store.exists(ArtifactKind.DOCUMENT, result.artifact.file_name)

    claims = tokens.verify(result.token)
    assert claims["sub"] == "7"
    assert claims["email"] == "x@y.z"
    assert "loginTime" not in claims


@pytest.mark.asyncio
async def test_run_without_claims_uses_anonymous_subject(pipeline, tokens, word_payload):
    result = await pipeline.run(DOCXGenerator(), WordRequest.model_validate(word_payload))
    assert tokens.verify(result.token)["sub"] == "anonymous"


@pytest.mark.asyncio
async def test_validation_failure_writes_nothing(pipeline, store):
    with pytest.raises(ValidationError):
        await pipeline.run(DOCXGenerator(), WordRequest.model_validate({"title": "T"}))
    assert list(store.list(ArtifactKind.DOCUMENT)) == []


@pytest.mark.asyncio
async def test_render_failure_becomes_render_error(pipeline, store, word_payload):
    with pytest.raises(RenderError) as exc_info:
        await pipeline.run(ExplodingGenerator(), WordRequest.model_validate(word_payload))

    assert exc_info.value.message == "Error disk on fire"
    assert exc_info.value.response_object == "Sorry, we couldn't generate word file."
    assert list(store.list(ArtifactKind.DOCUMENT)) == []
