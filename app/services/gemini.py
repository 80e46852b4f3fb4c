"""Integration helpers for the Google Generative Language API."""

from __future__ import annotations

import logging
from typing import Any

from .generative import GenerationError, GenerativeClient

logger = logging.getLogger(__name__)


class GeminiClient(GenerativeClient):
    """Client responsible for talking to Gemini's ``generateContent`` endpoint."""

    engine = "gemini"

    async def _complete(self, prompt: str, schema: dict[str, Any]) -> str:
        api_key = self._settings.gemini_api_key
        if not api_key:
            raise GenerationError("Gemini API key is required to generate content")
        logger.debug("Requesting %s content", self._settings.gemini_model)

        payload = {
            "contents": [{"role": "user", "parts": [{"text": prompt}]}],
            "generationConfig": {
                "responseMimeType": "application/json",
                "responseSchema": schema,
            },
        }
        headers = {
            "x-goog-api-key": api_key,
            "Content-Type": "application/json",
        }
        path = f"/models/{self._settings.gemini_model}:generateContent"

        response = await self._client.post(path, json=payload, headers=headers)
        if response.status_code >= 400:
            raise GenerationError(response.text)

        data = response.json()
        return self._extract_text(data)

    @staticmethod
    def _extract_text(data: dict[str, Any]) -> str:
        candidates = data.get("candidates") or []
        if not candidates:
            feedback = data.get("promptFeedback") or {}
            reason = feedback.get("blockReason") if isinstance(feedback, dict) else None
            raise GenerationError(
                f"Model returned no candidates (block reason: {reason or 'none'})"
            )
        content = candidates[0].get("content") or {}
        parts = content.get("parts") or []
        texts = [
            part["text"]
            for part in parts
            if isinstance(part, dict) and isinstance(part.get("text"), str)
        ]
        if not texts:
            raise GenerationError("Model response missing text")
        return "".join(texts)
