"""Google Gemini client for template-driven structured extraction.

The model is treated as an oracle: it gets the template's system instruction,
the pasted text and a response schema, and must answer with a JSON object.
HTTP failures are classified into the error hierarchy so only transient ones
are retried.
"""

import json
from typing import Any, Mapping, Optional

import requests
from tenacity import (
    Retrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from registro_formazione.config import RegistroConfig
from registro_formazione.errors import (
    AuthenticationError,
    ExtractionError,
    PermanentError,
    RateLimitError,
    TransientError,
)
from registro_formazione.logging import get_logger
from registro_formazione.models import TemplateConfig
from registro_formazione.schema import (
    build_extraction_schema,
    build_system_instruction,
    build_user_prompt,
)

logger = get_logger(__name__)


class GeminiExtractor:
    """Calls Gemini ``generateContent`` with a response schema and parses the JSON."""

    def __init__(
        self,
        api_key: str,
        model: str = "gemini-2.5-flash",
        base_url: str = "https://generativelanguage.googleapis.com/v1beta",
        timeout: int = 120,
        max_retries: int = 3,
        retry_wait_seconds: float = 2.0,
        session: Optional[requests.Session] = None,
    ) -> None:
        """Initialize the extractor.

        Args:
            api_key: Gemini API key.
            model: Model name, e.g. "gemini-2.5-flash".
            base_url: REST base URL up to the API version.
            timeout: Per-request timeout in seconds.
            max_retries: Total attempts on transient errors.
            retry_wait_seconds: Base of the exponential backoff.
            session: Optional requests session (tests inject a mock).
        """
        self.api_key = api_key
        self.model = model
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.max_retries = max(1, max_retries)
        self.retry_wait_seconds = retry_wait_seconds
        self.session = session or requests.Session()

    @classmethod
    def from_config(cls, config: RegistroConfig) -> "GeminiExtractor":
        return cls(
            api_key=config.gemini_api_key.get_secret_value(),
            model=config.gemini_model,
            base_url=config.gemini_base_url,
            timeout=config.request_timeout_seconds,
            max_retries=config.max_retries,
        )

    @property
    def endpoint(self) -> str:
        return f"{self.base_url}/models/{self.model}:generateContent"

    def build_payload(
        self,
        config: TemplateConfig,
        text: str,
        additional_context: Mapping[str, Any] | None = None,
    ) -> dict[str, Any]:
        """Request body for one extraction call."""
        return {
            "systemInstruction": {"parts": [{"text": build_system_instruction(config)}]},
            "contents": [
                {"role": "user", "parts": [{"text": build_user_prompt(text, additional_context)}]}
            ],
            "generationConfig": {
                "responseMimeType": "application/json",
                "responseSchema": build_extraction_schema(config),
                "temperature": 0.1,
            },
        }

    def extract(
        self,
        config: TemplateConfig,
        text: str,
        additional_context: Mapping[str, Any] | None = None,
    ) -> dict[str, Any]:
        """Extract the template's variables from free text.

        Values in ``additional_context`` (typed in by the user) are sent as
        hints and also override whatever the model returned.

        Raises:
            AuthenticationError: Missing or rejected API key.
            RateLimitError / TransientError: Still failing after all retries.
            PermanentError: Request rejected by the API.
            ExtractionError: Response is not a JSON object.
        """
        if not self.api_key:
            raise AuthenticationError("Gemini API key is not configured")

        payload = self.build_payload(config, text, additional_context)
        logger.info(
            "extraction_started",
            template=config.name,
            model=self.model,
            text_chars=len(text),
        )

        retrying = Retrying(
            stop=stop_after_attempt(self.max_retries),
            wait=wait_exponential(multiplier=self.retry_wait_seconds, max=30),
            retry=retry_if_exception_type(TransientError),
            reraise=True,
        )
        body = retrying(self._post, payload)

        extracted = self._parse_response(body)
        if additional_context:
            extracted.update(additional_context)

        logger.info("extraction_completed", template=config.name, fields=len(extracted))
        return extracted

    def _post(self, payload: dict[str, Any]) -> dict[str, Any]:
        try:
            response = self.session.post(
                self.endpoint,
                headers={"Content-Type": "application/json", "x-goog-api-key": self.api_key},
                json=payload,
                timeout=self.timeout,
            )
        except requests.exceptions.Timeout as e:
            logger.warning("extraction_timeout", error=str(e))
            raise TransientError(f"Gemini request timed out: {e}") from e
        except requests.exceptions.ConnectionError as e:
            logger.warning("extraction_connection_error", error=str(e))
            raise TransientError(f"Gemini connection failed: {e}") from e

        status = response.status_code
        if status == 200:
            try:
                return response.json()
            except ValueError as e:
                raise ExtractionError("Gemini returned a non-JSON HTTP body") from e

        detail = response.text[:200]
        if status == 429:
            logger.warning("extraction_rate_limited")
            raise RateLimitError(f"Gemini rate limit exceeded: {detail}")
        if status >= 500:
            logger.warning("extraction_server_error", status=status)
            raise TransientError(f"Gemini HTTP {status}: {detail}")
        if status in (401, 403):
            logger.error("extraction_auth_failed", status=status)
            raise AuthenticationError(f"Gemini rejected the API key (HTTP {status})")

        logger.error("extraction_rejected", status=status, detail=detail)
        raise PermanentError(f"Gemini HTTP {status}: {detail}")

    @staticmethod
    def _parse_response(body: Mapping[str, Any]) -> dict[str, Any]:
        try:
            text = body["candidates"][0]["content"]["parts"][0]["text"]
        except (KeyError, IndexError, TypeError) as e:
            finish = None
            candidates = body.get("candidates") if isinstance(body, Mapping) else None
            if candidates and isinstance(candidates[0], Mapping):
                finish = candidates[0].get("finishReason")
            raise ExtractionError(f"Unexpected Gemini response (finishReason={finish})") from e

        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            raise ExtractionError(f"Gemini response is not valid JSON: {e}") from e

        if not isinstance(data, dict):
            raise ExtractionError(f"Expected a JSON object, got {type(data).__name__}")
        return data
