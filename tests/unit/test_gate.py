"""Tests for token extraction and file-name helpers."""
from datetime import datetime, timezone

from artifact_server.auth.gate import extract_token
from artifact_server.utils.file_utils import (
    find_token_marker,
    generate_filename,
    strip_token_marker,
    timestamp_digits,
)


def test_header_wins_over_query_and_marker():
    token = extract_token(
        "Bearer from-header",
        "from-query",
        "/word-generator/downloads/[from-path]word-file-1.docx",
        allow_path_marker=True,
    )
    assert token == "from-header"


def test_query_wins_over_marker():
    token = extract_token(
        None,
        "from-query",
        "/word-generator/downloads/[from-path]word-file-1.docx",
        allow_path_marker=True,
    )
    assert token == "from-query"


def test_marker_only_when_allowed():
    path = "/word-generator/downloads/word-file-1[from-path].docx"
    assert extract_token(None, None, path, allow_path_marker=True) == "from-path"
    assert extract_token(None, None, path) is None


def test_malformed_header_is_ignored():
    assert extract_token("Basic abc", None) is None
    assert extract_token("Bearer", None) is None
    assert extract_token("Bearer ", "q") == "q"


def test_marker_helpers():
    assert find_token_marker("[abc.def]word-file-1.docx") == "abc.def"
    assert strip_token_marker("[abc.def]word-file-1.docx") == "word-file-1.docx"
    assert strip_token_marker("word-file-1.docx") == "word-file-1.docx"


def test_generate_filename_uses_utc_digits():
    now = datetime(2024, 1, 2, 3, 4, 5, 678000, tzinfo=timezone.utc)
    assert timestamp_digits(now) == "20240102030405678"
    assert generate_filename("word-file", "docx", now) == "word-file-20240102030405678.docx"
