"""Article translation through an OpenAI-compatible chat completions API."""

from __future__ import annotations

import logging
import time
from typing import Any

import httpx

from .config import Settings


logger = logging.getLogger(__name__)

LANGUAGE_NAMES = {"hi": "Hindi (Devanagari script)", "en": "English"}


class Translator:
    def __init__(
        self,
        base_url: str,
        api_key: str | None,
        model: str,
        timeout: float = 15.0,
        max_retries: int = 2,
        retry_delay: float = 2.0,
    ) -> None:
        self.endpoint = base_url.rstrip("/") + "/chat/completions"
        self.api_key = api_key
        self.model = model
        self.timeout = timeout
        self.max_retries = max_retries
        self.retry_delay = retry_delay

    @classmethod
    def from_settings(cls, settings: Settings) -> "Translator":
        return cls(
            base_url=str(settings.openai_base_url),
            api_key=settings.openai_api_key,
            model=settings.openai_model,
            timeout=settings.translation_timeout_seconds,
            max_retries=settings.translation_max_retries,
            retry_delay=settings.translation_retry_delay_seconds,
        )

    @property
    def configured(self) -> bool:
        return bool(self.api_key)

    def translate(self, text: str, target_language: str = "hi") -> str:
        """Translate ``text``; the input comes back unchanged if translation is unavailable."""
        translated = self.try_translate(text, target_language)
        return text if translated is None else translated

    def try_translate(self, text: str, target_language: str = "hi") -> str | None:
        if not text.strip():
            return text
        if not self.configured:
            return None
        language = LANGUAGE_NAMES.get(target_language, target_language)
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }
        payload = {
            "model": self.model,
            "temperature": 0.2,
            "max_tokens": 1000,
            "messages": [
                {
                    "role": "system",
                    "content": (
                        "You are a professional translator specializing in Indian financial and "
                        f"stock market content. Translate the given text to {language}. Keep stock "
                        "symbols, percentages and numbers in their original format. Return only "
                        "the translation without any explanations."
                    ),
                },
                {"role": "user", "content": text},
            ],
        }
        attempt = 0
        while True:
            try:
                response = httpx.post(self.endpoint, headers=headers, json=payload, timeout=self.timeout)
                response.raise_for_status()
                translated = self._extract_content(response.json()).strip()
                return translated or None
            except (httpx.HTTPError, ValueError) as exc:
                if attempt >= self.max_retries:
                    logger.warning("Translation failed after %s attempts: %s", attempt + 1, exc)
                    return None
                attempt += 1
                logger.warning("Translation attempt %s failed, retrying: %s", attempt, exc)
                time.sleep(self.retry_delay)

    @staticmethod
    def _extract_content(data: dict[str, Any]) -> str:
        choices = data.get("choices")
        if isinstance(choices, list) and choices:
            message = choices[0].get("message")
            if isinstance(message, dict):
                content = message.get("content")
                if isinstance(content, str):
                    return content
        raise ValueError("Unexpected response payload from translation API")


__all__ = ["Translator"]
