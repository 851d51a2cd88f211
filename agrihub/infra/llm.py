from __future__ import annotations

from functools import lru_cache
from typing import Any, Dict, List, Optional

import httpx

from ..domain.errors import UpstreamRequestError
from ..observability.logging_utils import log_event, log_failure, summarize_text
from ..schemas import GenerationConfig, ImageUpload
from .config import get_config


def build_generate_body(
    prompt: str,
    generation: GenerationConfig,
    image: Optional[ImageUpload] = None,
) -> Dict[str, Any]:
    parts: List[Dict[str, Any]] = [{"text": prompt}]
    if image is not None:
        parts.append({"inlineData": image.to_inline_data()})
    return {
        "contents": [{"role": "user", "parts": parts}],
        "generationConfig": generation.to_payload(),
    }


def extract_reply_text(payload: object) -> str:
    """Return ``candidates[0].content.parts[0].text`` or an empty string."""
    if not isinstance(payload, dict):
        return ""
    candidates = payload.get("candidates")
    if not isinstance(candidates, list) or not candidates:
        return ""
    first = candidates[0] if isinstance(candidates[0], dict) else {}
    content = first.get("content") or {}
    parts = content.get("parts") if isinstance(content, dict) else None
    if not isinstance(parts, list) or not parts or not isinstance(parts[0], dict):
        return ""
    text = parts[0].get("text")
    return text if isinstance(text, str) else ""


class GenerativeClient:
    """Thin client for the ``models/{model}:generateContent`` REST endpoint."""

    def __init__(self, api_base: str, api_key: Optional[str], timeout: float):
        self._api_base = api_base.rstrip("/")
        self._api_key = api_key
        self._timeout = timeout

    def _headers(self) -> Dict[str, str]:
        headers = {"Content-Type": "application/json", "Accept": "application/json"}
        if self._api_key:
            headers["x-goog-api-key"] = self._api_key
        return headers

    def send(self, model: str, body: Dict[str, Any]) -> Dict[str, Any]:
        """POST a prepared ``generateContent`` body and return the decoded reply."""
        if not self._api_key:
            raise UpstreamRequestError("GENAI_API_KEY is not configured")
        url = f"{self._api_base}/models/{model}:generateContent"
        log_event("genai_request", model=model, parts=_count_parts(body))
        try:
            with httpx.Client(timeout=self._timeout, trust_env=False) as client:
                response = client.post(url, json=body, headers=self._headers())
        except httpx.HTTPError as exc:
            log_failure("genai_transport_error", model=model, error=str(exc))
            raise UpstreamRequestError(f"request failed: {exc}") from exc
        if response.is_error:
            log_failure(
                "genai_http_error",
                model=model,
                status_code=response.status_code,
                body=summarize_text(response.text, 400),
            )
            raise UpstreamRequestError(
                f"generative API returned {response.status_code}",
                status_code=response.status_code,
            )
        try:
            payload = response.json()
        except ValueError as exc:
            raise UpstreamRequestError("generative API returned a non-JSON body") from exc
        if not isinstance(payload, dict):
            raise UpstreamRequestError("generative API returned an unexpected body")
        log_event("genai_response", model=model, status_code=response.status_code)
        return payload

    def generate(
        self,
        prompt: str,
        *,
        model: str,
        generation: GenerationConfig,
        image: Optional[ImageUpload] = None,
    ) -> str:
        log_event("genai_prompt", model=model, prompt=summarize_text(prompt, 200))
        payload = self.send(model, build_generate_body(prompt, generation, image))
        return extract_reply_text(payload)


def _count_parts(body: Dict[str, Any]) -> int:
    contents = body.get("contents") or []
    return sum(len(item.get("parts") or []) for item in contents if isinstance(item, dict))


@lru_cache(maxsize=1)
def get_generative_client() -> GenerativeClient:
    cfg = get_config()
    return GenerativeClient(
        api_base=cfg.genai_api_base,
        api_key=cfg.genai_api_key,
        timeout=cfg.genai_timeout_seconds,
    )
