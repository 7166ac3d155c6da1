# tests/test_conversion_client.py
"""
Tests for docrelay.services.conversion_client.
The HTTP session is mocked; no network access.
"""

from unittest.mock import MagicMock, Mock

import pytest
import requests

from docrelay.services.conversion_client import ConversionClient, ConversionTask
from docrelay.services.exceptions import UpstreamCallFailedError

START_URL = "https://api.example.com/v1/start/officepdf"


def _response(json_body=None, content=b"", status_error=None):
    response = Mock(spec=requests.Response)
    response.json.return_value = json_body
    response.content = content
    if status_error is not None:
        response.raise_for_status.side_effect = status_error
    return response


@pytest.fixture
def deck(tmp_path):
    path = tmp_path / "deck.pptx"
    path.write_bytes(b"pptx bytes")
    return path


@pytest.fixture
def session():
    session = MagicMock(spec=requests.Session)
    session.request.side_effect = [
        _response({"server": "api11.example.com", "task": "t-1", "token": "tok"}),
        _response({"server_filename": "srv-deck.pptx"}),
        _response({"status": "TaskSuccess"}),
        _response(content=b"%PDF-1.7 converted"),
    ]
    return session


class TestConversionTask:
    def test_urls_and_headers(self):
        task = ConversionTask(server="api11.example.com", task="t-1", token="tok")
        assert task.base_url == "https://api11.example.com/v1"
        assert task.auth_headers == {"Authorization": "Bearer tok"}


class TestConvert:
    """Full workflow: start -> upload -> process -> download"""

    def test_returns_pdf_bytes(self, session, deck):
        client = ConversionClient(START_URL, timeout=30, session=session)
        assert client.convert(deck) == b"%PDF-1.7 converted"
        assert session.request.call_count == 4

    def test_request_sequence(self, session, deck):
        ConversionClient(START_URL, timeout=30, session=session).convert(deck, "Deck Final.pptx")
        start, upload, process, download = session.request.call_args_list

        assert start.args == ("POST", START_URL)
        assert start.kwargs["timeout"] == 30

        assert upload.args == ("POST", "https://api11.example.com/v1/upload")
        assert upload.kwargs["data"] == {"task": "t-1"}
        assert upload.kwargs["files"]["file"][0] == "Deck Final.pptx"
        assert upload.kwargs["headers"] == {"Authorization": "Bearer tok"}

        assert process.args == ("POST", "https://api11.example.com/v1/process")
        assert process.kwargs["json"] == {
            "task": "t-1",
            "tool": "officepdf",
            "files": [{"server_filename": "srv-deck.pptx", "filename": "Deck Final.pptx"}],
        }
        assert process.kwargs["headers"] == {"Authorization": "Bearer tok"}

        assert download.args == ("GET", "https://api11.example.com/v1/download/t-1")
        assert download.kwargs["headers"] == {"Authorization": "Bearer tok"}


class TestErrors:
    """Every failure surfaces as UpstreamCallFailedError("conversion", ...)"""

    def test_api_error_message_used(self, deck):
        error_response = _response({"error": {"message": "Invalid file"}})
        session = MagicMock(spec=requests.Session)
        session.request.side_effect = [
            _response({"server": "api11.example.com", "task": "t-1", "token": "tok"}),
            _response(status_error=requests.HTTPError("400 Client Error", response=error_response)),
        ]

        with pytest.raises(UpstreamCallFailedError) as exc:
            ConversionClient(START_URL, session=session).convert(deck)
        assert exc.value.service == "conversion"
        assert str(exc.value) == "upload failed: Invalid file"

    def test_http_error_without_json_body(self, deck):
        error_response = _response()
        error_response.json.side_effect = ValueError("no json")
        session = MagicMock(spec=requests.Session)
        session.request.return_value = _response(
            status_error=requests.HTTPError("503 Server Error", response=error_response)
        )

        with pytest.raises(UpstreamCallFailedError) as exc:
            ConversionClient(START_URL, session=session).convert(deck)
        assert str(exc.value) == "start task failed: 503 Server Error"

    def test_connection_error(self, deck):
        session = MagicMock(spec=requests.Session)
        session.request.side_effect = requests.ConnectionError("connection refused")

        with pytest.raises(UpstreamCallFailedError) as exc:
            ConversionClient(START_URL, session=session).convert(deck)
        assert str(exc.value) == "start task failed: connection refused"

    def test_incomplete_start_response(self, deck):
        session = MagicMock(spec=requests.Session)
        session.request.return_value = _response({"server": "api11.example.com", "task": "t-1"})

        with pytest.raises(UpstreamCallFailedError) as exc:
            ConversionClient(START_URL, session=session).convert(deck)
        assert str(exc.value) == "start task response is missing token"

    def test_invalid_json(self, deck):
        response = _response()
        response.json.side_effect = ValueError("Expecting value")
        session = MagicMock(spec=requests.Session)
        session.request.return_value = response

        with pytest.raises(UpstreamCallFailedError) as exc:
            ConversionClient(START_URL, session=session).convert(deck)
        assert str(exc.value) == "start task returned invalid JSON"
