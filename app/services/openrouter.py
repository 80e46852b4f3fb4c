"""Integration helpers for the OpenRouter API.

This client mirrors the interface of GeminiClient so the archive can switch
engines through ``AI_ENGINE`` without branching call sites.
"""

from __future__ import annotations

import json
import logging
from typing import Any

from .generative import GenerationError, GenerativeClient

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = (
    "You are the indexing system of a personal film archive. You always respond "
    "with a single JSON object that matches the documented schema and never include "
    "commentary outside JSON."
)


def _schema_example(schema: dict[str, Any]) -> dict[str, Any]:
    """Render a response skeleton from a Gemini-style schema."""

    example: dict[str, Any] = {}
    for name, spec in (schema.get("properties") or {}).items():
        kind = spec.get("type")
        if kind == "ARRAY":
            example[name] = [""]
        elif kind == "NUMBER":
            example[name] = 2000
        else:
            example[name] = ""
    return example


class OpenRouterClient(GenerativeClient):
    """Client responsible for talking to OpenRouter's chat completions."""

    engine = "openrouter"

    async def _complete(self, prompt: str, schema: dict[str, Any]) -> str:
        api_key = self._settings.openrouter_api_key
        if not api_key:
            raise GenerationError("OpenRouter API key is required to generate content")
        logger.debug("Requesting %s content", self._settings.openrouter_model)

        skeleton = json.dumps(_schema_example(schema), ensure_ascii=False)
        required = schema.get("required") or []
        instructions = f"{prompt}\n\nRespond strictly with JSON following this structure:\n{skeleton}"
        if required:
            instructions += "\nRequired fields: " + ", ".join(required)

        payload = {
            "model": self._settings.openrouter_model,
            "temperature": 0.7,
            "messages": [
                {"role": "system", "content": SYSTEM_PROMPT},
                {"role": "user", "content": instructions},
            ],
        }
        headers = {
            "Authorization": f"Bearer {api_key}",
            "Content-Type": "application/json",
            "X-Title": self._settings.app_name,
        }

        response = await self._client.post("/chat/completions", json=payload, headers=headers)
        if response.status_code >= 400:
            raise GenerationError(response.text)

        data = response.json()
        choices = data.get("choices", [])
        if not choices:
            raise GenerationError("Model returned no choices")
        message = choices[0].get("message", {})
        content = message.get("content")
        if not isinstance(content, str):
            raise GenerationError("Model response missing content")
        return content
