"""Extraction client: request shape and reply validation (requests is mocked)."""

import base64
from unittest.mock import MagicMock, patch

import pytest
import requests

from kendo_bracket.services.extraction_client import ExtractionClient, ExtractionError


def _response(payload):
    response = MagicMock()
    response.json.return_value = payload
    response.raise_for_status.return_value = None
    return response


def test_not_configured():
    with pytest.raises(ExtractionError):
        ExtractionClient(base_url="").analyze(b"img")


def test_analyze_posts_base64_and_parses_reply():
    client = ExtractionClient(base_url="http://extract.local/analyze", api_key="k", timeout=5)
    reply = {"title": "Men's Open", "totalMatches": 7, "players": ["A", "B"]}
    with patch("kendo_bracket.services.extraction_client.requests.post", return_value=_response(reply)) as post:
        extracted = client.analyze(b"\x89PNG", "image/png")

    assert extracted.title == "Men's Open"
    assert extracted.total_matches == 7
    assert extracted.players == ["A", "B"]

    _, kwargs = post.call_args
    assert kwargs["json"] == {"mimeType": "image/png", "data": base64.b64encode(b"\x89PNG").decode()}
    assert kwargs["headers"]["Authorization"] == "Bearer k"
    assert kwargs["timeout"] == 5


def test_transport_failure_wrapped():
    client = ExtractionClient(base_url="http://extract.local", api_key="", timeout=1)
    with patch(
        "kendo_bracket.services.extraction_client.requests.post",
        side_effect=requests.ConnectionError("down"),
    ):
        with pytest.raises(ExtractionError):
            client.analyze(b"img")


def test_unexpected_reply_shape():
    client = ExtractionClient(base_url="http://extract.local", api_key="", timeout=1)
    with patch(
        "kendo_bracket.services.extraction_client.requests.post",
        return_value=_response({"totalMatches": "many"}),
    ):
        with pytest.raises(ExtractionError):
            client.analyze(b"img")
