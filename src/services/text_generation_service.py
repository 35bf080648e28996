from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Any, Dict, Optional

import httpx

from src.core.config import Settings, get_settings

logger = logging.getLogger(__name__)

CHAT_COMPLETIONS_URL = "https://api.openai.com/v1/chat/completions"
FALLBACK_MODEL_NAME = "deterministic-fallback"


@dataclass
class TextGenerationResult:
    text: str
    model_name: str
    tokens_used: int
    latency_ms: int
    used_fallback: bool


class TextGenerationService:
    """Thin client for an external chat-completion model.

    Never raises for model trouble: a missing key, disabled generation or
    repeated failures all return the caller's fallback text instead.
    """

    def __init__(self, settings: Optional[Settings] = None) -> None:
        self.settings = settings or get_settings()

    async def generate(self, *, system_prompt: str, user_prompt: str, fallback_text: str) -> TextGenerationResult:
        api_key = self.settings.openai_api_key
        if not api_key or not self.settings.ai_generation_enabled:
            return self._fallback(fallback_text)

        attempts = max(self.settings.openai_max_retries, 0) + 1
        model_name = self.settings.openai_model
        last_error: Optional[Exception] = None
        async with httpx.AsyncClient(timeout=self.settings.openai_timeout_seconds) as client:
            for _ in range(attempts):
                started = time.perf_counter()
                try:
                    response = await client.post(
                        CHAT_COMPLETIONS_URL,
                        headers={
                            "Authorization": f"Bearer {api_key}",
                            "Content-Type": "application/json",
                        },
                        json={
                            "model": model_name,
                            "temperature": 0.4,
                            "messages": [
                                {"role": "system", "content": system_prompt},
                                {"role": "user", "content": user_prompt},
                            ],
                        },
                    )
                    response.raise_for_status()
                    payload = response.json()
                    text = self._extract_content(payload)
                    usage = payload.get("usage") or {}
                    return TextGenerationResult(
                        text=text,
                        model_name=model_name,
                        tokens_used=int(usage.get("total_tokens", 0) or 0),
                        latency_ms=int((time.perf_counter() - started) * 1000),
                        used_fallback=False,
                    )
                except (httpx.HTTPError, ValueError) as exc:
                    last_error = exc
                    continue

        logger.warning("Text generation failed after %s attempts: %s", attempts, last_error)
        return self._fallback(fallback_text)

    @staticmethod
    def _fallback(fallback_text: str) -> TextGenerationResult:
        return TextGenerationResult(
            text=fallback_text,
            model_name=FALLBACK_MODEL_NAME,
            tokens_used=0,
            latency_ms=0,
            used_fallback=True,
        )

    @staticmethod
    def _extract_content(response_payload: Dict[str, Any]) -> str:
        choices = response_payload.get("choices")
        if not isinstance(choices, list) or not choices:
            raise ValueError("Model response choices missing")
        message = choices[0].get("message") if isinstance(choices[0], dict) else None
        if not isinstance(message, dict):
            raise ValueError("Model response message missing")
        content = message.get("content")
        if not isinstance(content, str) or not content.strip():
            raise ValueError("Model response content missing")
        return content.strip()
