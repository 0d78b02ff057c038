"""Tests for the inference client with the HTTP layer mocked out."""

import json
from unittest.mock import MagicMock, patch

import pytest
import requests

from matching.llm_client import ExternalServiceError, InferenceClient
from matching.prompts import CATEGORIZE_MAX_CHARS
from parsers.pdf import ExtractionFailed
from schemas import StructuredCandidate


def make_response(status_code=200, body=None):
    response = MagicMock()
    response.status_code = status_code
    response.text = json.dumps(body or {})
    response.json.return_value = body
    return response


def tool_call_body(name, arguments):
    return {
        "choices": [
            {"message": {"tool_calls": [{"function": {"name": name, "arguments": arguments}}]}}
        ]
    }


CANDIDATE_ARGS = {
    "name": "Jane Doe",
    "email": "jane@acme.io",
    "phone": "+44 20 7946 0958",
    "links": ["https://github.com/jane"],
    "skills": ["Python", "Airflow"],
}


@pytest.fixture
def client():
    return InferenceClient(api_key="test-key", api_url="https://inference.test/v1/chat", min_interval=0)


class TestTranscribe:
    @patch("matching.llm_client.requests.post")
    def test_returns_message_content(self, mock_post, client):
        mock_post.return_value = make_response(body={"choices": [{"message": {"content": "Jane Doe\nPython"}}]})

        assert client.transcribe(b"%PDF-1.4", "application/pdf") == "Jane Doe\nPython"

        payload = mock_post.call_args.kwargs["json"]
        parts = payload["messages"][0]["content"]
        assert parts[1]["type"] == "file"
        assert parts[1]["file"]["file_data"].startswith("data:application/pdf;base64,")
        assert mock_post.call_args.kwargs["headers"]["Authorization"] == "Bearer test-key"

    @patch("matching.llm_client.requests.post")
    def test_images_sent_as_image_url(self, mock_post, client):
        mock_post.return_value = make_response(body={"choices": [{"message": {"content": "text"}}]})
        client.transcribe(b"\x89PNG", "image/png")
        part = mock_post.call_args.kwargs["json"]["messages"][0]["content"][1]
        assert part["type"] == "image_url"

    @patch("matching.llm_client.requests.post")
    def test_missing_content(self, mock_post, client):
        mock_post.return_value = make_response(body={"choices": [{"message": {"content": None}}]})
        with pytest.raises(ExternalServiceError):
            client.transcribe(b"data")


class TestExtractStructured:
    """Forced extract_cv_data tool call"""

    @patch("matching.llm_client.requests.post")
    def test_string_arguments(self, mock_post, client):
        mock_post.return_value = make_response(body=tool_call_body("extract_cv_data", json.dumps(CANDIDATE_ARGS)))

        result = client.extract_structured(b"%PDF-1.4")

        assert isinstance(result, StructuredCandidate)
        assert result.name == "Jane Doe"
        payload = mock_post.call_args.kwargs["json"]
        assert payload["tool_choice"]["function"]["name"] == "extract_cv_data"
        assert payload["tools"][0]["function"]["parameters"]["required"] == [
            "name", "email", "phone", "links", "skills",
        ]

    @patch("matching.llm_client.requests.post")
    def test_object_arguments(self, mock_post, client):
        mock_post.return_value = make_response(body=tool_call_body("extract_cv_data", CANDIDATE_ARGS))
        assert client.extract_structured(b"%PDF-1.4").skills == ["Python", "Airflow"]

    @patch("matching.llm_client.requests.post")
    def test_missing_tool_call(self, mock_post, client):
        mock_post.return_value = make_response(body={"choices": [{"message": {"content": "sorry"}}]})
        with pytest.raises(ExternalServiceError, match="No tool call"):
            client.extract_structured(b"%PDF-1.4")

    @patch("matching.llm_client.requests.post")
    def test_invalid_json_arguments(self, mock_post, client):
        mock_post.return_value = make_response(body=tool_call_body("extract_cv_data", "{not json"))
        with pytest.raises(ExternalServiceError, match="not valid JSON"):
            client.extract_structured(b"%PDF-1.4")

    @patch("matching.llm_client.requests.post")
    def test_schema_violation(self, mock_post, client):
        args = dict(CANDIDATE_ARGS)
        del args["skills"]
        mock_post.return_value = make_response(body=tool_call_body("extract_cv_data", args))
        with pytest.raises(ExternalServiceError, match="violate the schema"):
            client.extract_structured(b"%PDF-1.4")


class TestErrors:
    """HTTP failures map to ExternalServiceError"""

    @pytest.mark.parametrize(
        "status, message",
        [(429, "Rate limit exceeded"), (402, "Payment required"), (500, "Inference API error: 500")],
    )
    @patch("matching.llm_client.requests.post")
    def test_status_codes(self, mock_post, status, message, client):
        mock_post.return_value = make_response(status_code=status, body={"error": "x"})
        with pytest.raises(ExternalServiceError, match=message) as exc:
            client.transcribe(b"data")
        assert exc.value.status_code == status

    @patch("matching.llm_client.requests.post")
    def test_transport_error(self, mock_post, client):
        mock_post.side_effect = requests.ConnectionError("boom")
        with pytest.raises(ExternalServiceError, match="request failed"):
            client.transcribe(b"data")

    @patch("matching.llm_client.requests.post")
    def test_invalid_json_body(self, mock_post, client):
        response = make_response()
        response.json.side_effect = ValueError("no json")
        mock_post.return_value = response
        with pytest.raises(ExternalServiceError, match="invalid JSON"):
            client.transcribe(b"data")

    @patch("matching.llm_client.requests.post")
    def test_no_api_key(self, mock_post):
        client = InferenceClient(api_key="", min_interval=0)
        with pytest.raises(ExternalServiceError, match="not configured"):
            client.transcribe(b"data")
        mock_post.assert_not_called()

    @pytest.mark.parametrize(
        "body",
        [
            {"choices": [{"message": None}]},
            {"choices": [{"message": "text"}]},
            {"choices": []},
            ["not", "an", "object"],
        ],
    )
    @patch("matching.llm_client.requests.post")
    def test_malformed_message(self, mock_post, body, client):
        mock_post.return_value = make_response(body=body)
        with pytest.raises(ExternalServiceError, match="no message"):
            client.transcribe(b"data")

    @pytest.mark.parametrize(
        "message",
        [
            {"tool_calls": [{"function": "oops"}]},
            {"tool_calls": [None]},
            {"tool_calls": "oops"},
        ],
    )
    @patch("matching.llm_client.requests.post")
    def test_malformed_tool_call(self, mock_post, message, client):
        mock_post.return_value = make_response(body={"choices": [{"message": message}]})
        with pytest.raises(ExternalServiceError, match="No tool call"):
            client.extract_structured(b"%PDF-1.4")

    def test_is_an_extraction_failure(self):
        assert issubclass(ExternalServiceError, ExtractionFailed)


class TestCategorize:
    @patch("matching.llm_client.requests.post")
    def test_categorize(self, mock_post, client):
        args = {"category": "Information Technology", "confidence": 88, "reasoning": "Backend engineer"}
        mock_post.return_value = make_response(body=tool_call_body("categorize_cv", json.dumps(args)))

        result = client.categorize("x" * (CATEGORIZE_MAX_CHARS + 500))

        assert result.category == "Information Technology"
        assert result.confidence == 88
        sent = mock_post.call_args.kwargs["json"]["messages"][1]["content"]
        assert sent.count("x") == CATEGORIZE_MAX_CHARS

    @patch("matching.llm_client.requests.post")
    def test_unknown_category(self, mock_post, client):
        args = {"category": "Astronaut", "confidence": 50, "reasoning": ""}
        mock_post.return_value = make_response(body=tool_call_body("categorize_cv", args))
        with pytest.raises(ExternalServiceError, match="Unknown category"):
            client.categorize("CV text")

    @patch("matching.llm_client.requests.post")
    def test_confidence_out_of_range(self, mock_post, client):
        args = {"category": "HR", "confidence": 140, "reasoning": ""}
        mock_post.return_value = make_response(body=tool_call_body("categorize_cv", args))
        with pytest.raises(ExternalServiceError):
            client.categorize("CV text")


class TestRateLimit:
    @patch("matching.llm_client.time.sleep")
    @patch("matching.llm_client.requests.post")
    def test_calls_are_spaced(self, mock_post, mock_sleep):
        mock_post.return_value = make_response(body={"choices": [{"message": {"content": "ok"}}]})
        client = InferenceClient(api_key="k", min_interval=0.5)
        client.transcribe(b"a")
        client.transcribe(b"b")
        assert mock_sleep.call_count == 1
        assert 0 < mock_sleep.call_args[0][0] <= 0.5
