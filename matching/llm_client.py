import base64
import json
import logging
import threading
import time
from functools import lru_cache
from typing import Any, Dict, Optional

import requests
from pydantic import ValidationError

import config
from matching.prompts import (
    CATEGORIZE_MAX_CHARS,
    CATEGORIZE_SYSTEM_PROMPT,
    CATEGORIZE_TOOL,
    CATEGORIZE_USER_TEMPLATE,
    EXTRACT_SYSTEM_PROMPT,
    EXTRACT_TOOL,
    EXTRACT_USER_PROMPT,
    JOB_CATEGORIES,
    TRANSCRIBE_PROMPT,
)
from parsers.pdf import ExtractionFailed
from schemas import CategoryResult, StructuredCandidate

logger = logging.getLogger(__name__)


class ExternalServiceError(ExtractionFailed):
    """The inference provider failed or answered with something unusable."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class InferenceClient:
    """
    Thin client for an OpenAI-compatible chat completions endpoint with
    multimodal input and forced tool calls.

    Calls are spaced at least ``min_interval`` seconds apart across all
    threads sharing the client, to stay under provider rate limits. Nothing is
    retried: every failure surfaces as ExternalServiceError.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        api_url: Optional[str] = None,
        model: Optional[str] = None,
        timeout: Optional[float] = None,
        min_interval: Optional[float] = None,
    ):
        self.api_key = api_key if api_key is not None else config.INFERENCE_API_KEY
        self.api_url = api_url or config.INFERENCE_API_URL
        self.model = model or config.INFERENCE_MODEL
        self.timeout = timeout if timeout is not None else config.INFERENCE_TIMEOUT
        self.min_interval = min_interval if min_interval is not None else config.INFERENCE_MIN_INTERVAL
        self._lock = threading.Lock()
        self._last_call = 0.0

    def _wait_turn(self) -> None:
        with self._lock:
            delay = self._last_call + self.min_interval - time.monotonic()
            if delay > 0:
                time.sleep(delay)
            self._last_call = time.monotonic()

    def _post(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        if not self.api_key:
            raise ExternalServiceError("INFERENCE_API_KEY not configured")

        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }
        self._wait_turn()
        try:
            response = requests.post(self.api_url, headers=headers, json=payload, timeout=self.timeout)
        except requests.RequestException as e:
            logger.error(f"[ERROR] Inference request failed: {e}")
            raise ExternalServiceError(f"Inference request failed: {e}") from e

        if response.status_code == 429:
            raise ExternalServiceError("Rate limit exceeded. Please try again later.", 429)
        if response.status_code == 402:
            raise ExternalServiceError("Payment required by the inference provider.", 402)
        if not 200 <= response.status_code < 300:
            logger.error(f"[ERROR] Inference API error: {response.status_code} {response.text[:200]}")
            raise ExternalServiceError(f"Inference API error: {response.status_code}", response.status_code)

        try:
            return response.json()
        except ValueError as e:
            raise ExternalServiceError("Inference API returned invalid JSON") from e

    def _payload(self, messages, tool: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"model": self.model, "messages": messages}
        if tool:
            payload["tools"] = [tool]
            payload["tool_choice"] = {"type": "function", "function": {"name": tool["function"]["name"]}}
        return payload

    @staticmethod
    def _document_part(data: bytes, mime_type: str) -> Dict[str, Any]:
        encoded = base64.b64encode(data).decode("ascii")
        data_url = f"data:{mime_type};base64,{encoded}"
        if mime_type.startswith("image/"):
            return {"type": "image_url", "image_url": {"url": data_url}}
        return {"type": "file", "file": {"filename": "cv", "file_data": data_url}}

    @staticmethod
    def _message(data: Dict[str, Any]) -> Dict[str, Any]:
        try:
            message = data["choices"][0]["message"]
        except (KeyError, IndexError, TypeError) as e:
            raise ExternalServiceError("Inference response has no message") from e
        if not isinstance(message, dict):
            raise ExternalServiceError("Inference response has no message")
        return message

    def _tool_arguments(self, data: Dict[str, Any], tool_name: str) -> Dict[str, Any]:
        message = self._message(data)
        try:
            call = message["tool_calls"][0]["function"]
        except (KeyError, IndexError, TypeError) as e:
            raise ExternalServiceError("No tool call in inference response") from e
        if not isinstance(call, dict):
            raise ExternalServiceError("No tool call in inference response")

        if call.get("name") not in (None, tool_name):
            raise ExternalServiceError(f"Unexpected tool call: {call.get('name')}")

        args = call.get("arguments")
        # Handle stringified JSON as well as already-decoded objects
        if isinstance(args, str):
            try:
                args = json.loads(args)
            except json.JSONDecodeError as e:
                raise ExternalServiceError("Tool call arguments are not valid JSON") from e
        if not isinstance(args, dict):
            raise ExternalServiceError("Tool call arguments are not an object")
        return args

    def transcribe(self, data: bytes, mime_type: str = "application/pdf") -> str:
        """Plain-text transcription of a document by the vision model."""
        messages = [
            {
                "role": "user",
                "content": [
                    {"type": "text", "text": TRANSCRIBE_PROMPT},
                    self._document_part(data, mime_type),
                ],
            }
        ]
        content = self._message(self._post(self._payload(messages))).get("content")
        if not isinstance(content, str):
            raise ExternalServiceError("Inference response has no text content")
        logger.info(f"[INFO] Vision model transcribed {len(content)} characters")
        return content

    def extract_structured(self, data: bytes, mime_type: str = "application/pdf") -> StructuredCandidate:
        """Name, contact details, links and skills via the extract_cv_data tool."""
        messages = [
            {"role": "system", "content": EXTRACT_SYSTEM_PROMPT},
            {
                "role": "user",
                "content": [
                    {"type": "text", "text": EXTRACT_USER_PROMPT},
                    self._document_part(data, mime_type),
                ],
            },
        ]
        args = self._tool_arguments(self._post(self._payload(messages, EXTRACT_TOOL)), "extract_cv_data")
        try:
            return StructuredCandidate.model_validate(args)
        except ValidationError as e:
            raise ExternalServiceError(f"extract_cv_data arguments violate the schema: {e}") from e

    def categorize(self, cv_text: str) -> CategoryResult:
        messages = [
            {"role": "system", "content": CATEGORIZE_SYSTEM_PROMPT},
            {"role": "user", "content": CATEGORIZE_USER_TEMPLATE.format(cv_text=cv_text[:CATEGORIZE_MAX_CHARS])},
        ]
        args = self._tool_arguments(self._post(self._payload(messages, CATEGORIZE_TOOL)), "categorize_cv")
        try:
            result = CategoryResult.model_validate(args)
        except ValidationError as e:
            raise ExternalServiceError(f"categorize_cv arguments violate the schema: {e}") from e
        if result.category not in JOB_CATEGORIES:
            raise ExternalServiceError(f"Unknown category: {result.category}")
        return result


@lru_cache(maxsize=1)
def default_client() -> Optional[InferenceClient]:
    """Process-wide client (one shared rate limit), or None without an API key."""
    if not config.inference_enabled():
        return None
    return InferenceClient()
