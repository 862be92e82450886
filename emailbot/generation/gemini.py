"""Gemini text generation over the REST API (httpx, synchronous)."""

from typing import Any

import httpx

from emailbot.errors import GenerationFailure
from emailbot.utils.logger import get_logger

logger = get_logger("emailbot.generation.gemini")

GEMINI_BASE_URL = "https://generativelanguage.googleapis.com/v1beta"
VALID_MODELS = ("gemini-2.0-flash-001", "gemini-2.5-flash", "gemini-flash-latest", "gemini-2.0-flash")
DEFAULT_MODEL = "gemini-2.0-flash-001"


class GeminiGenerator:
    """Calls models/{model}:generateContent. Every failure surfaces as GenerationFailure."""

    def __init__(
        self,
        api_key: str,
        model: str | None = None,
        generation_config: dict[str, Any] | None = None,
        client: httpx.Client | None = None,
        base_url: str = GEMINI_BASE_URL,
    ):
        self._api_key = api_key
        # Unknown model names produce 404s from the API; fall back to a known one
        self._model = model if model in VALID_MODELS else DEFAULT_MODEL
        self._generation_config = generation_config or {
            "temperature": 0.4,
            "topP": 0.95,
            "maxOutputTokens": 5000,
        }
        self._client = client or httpx.Client()
        self._base_url = base_url.rstrip("/")

    @property
    def model(self) -> str:
        return self._model

    def generate(self, prompt: str, timeout_seconds: float) -> str:
        if not self._api_key:
            logger.error("gemini.not_configured", model=self._model)
            raise GenerationFailure("GEMINI_API_KEY is not set")

        url = f"{self._base_url}/models/{self._model}:generateContent"
        payload = {
            "contents": [{"role": "user", "parts": [{"text": prompt}]}],
            "generationConfig": self._generation_config,
        }
        log = logger.bind(model=self._model, prompt_length=len(prompt), timeout_seconds=timeout_seconds)
        try:
            response = self._client.post(
                url,
                params={"key": self._api_key},
                json=payload,
                timeout=timeout_seconds,
            )
            response.raise_for_status()
        except httpx.TimeoutException as e:
            log.error("gemini.timeout", error=str(e))
            raise GenerationFailure(f"Gemini request timed out after {timeout_seconds}s") from e
        except httpx.HTTPStatusError as e:
            log.error("gemini.http_error", status=e.response.status_code, body=e.response.text[:500])
            raise GenerationFailure(f"Gemini API error: HTTP {e.response.status_code}") from e
        except httpx.HTTPError as e:
            log.error("gemini.request_failed", error=str(e))
            raise GenerationFailure(f"Gemini request failed: {e}") from e

        try:
            data = response.json()
        except ValueError as e:
            raise GenerationFailure("Gemini returned a non-JSON response") from e

        candidates = data.get("candidates") or []
        candidate = candidates[0] if candidates else {}
        parts = (candidate.get("content") or {}).get("parts") or []
        text = "".join(p.get("text", "") for p in parts if isinstance(p, dict)).strip()
        finish_reason = candidate.get("finishReason")

        if not text:
            log.error("gemini.empty_content", finish_reason=finish_reason)
            raise GenerationFailure("Gemini returned empty content")
        if finish_reason and finish_reason != "STOP":
            log.error("gemini.non_stop_finish", finish_reason=finish_reason, text_length=len(text))
            raise GenerationFailure(f"Gemini finished with reason {finish_reason}")

        log.info("gemini.generated", text_length=len(text))
        return text

    def close(self) -> None:
        self._client.close()
