"""Shared behaviour for the generative metadata/analysis clients.

Engines only differ in how a prompt reaches the provider and how the text
comes back; prompt wording, JSON parsing, validation and the fixed fallback
objects live here so every engine honours the same contract: neither
operation ever raises.
"""

from __future__ import annotations

import logging
from datetime import datetime
from textwrap import dedent
from typing import Any

import httpx

from ..config import Settings
from ..constants import (
    FALLBACK_DIRECTOR,
    FALLBACK_GENRE,
    FALLBACK_MOTIFS,
    FALLBACK_PROFILE,
    FALLBACK_RISK,
    FALLBACK_STYLE_KEYWORDS,
    FALLBACK_SYNOPSIS,
    FALLBACK_SYSTEM_NOTES,
)
from ..models import AnalysisResult, MetadataSuggestion
from ..utils import extract_json_object

logger = logging.getLogger(__name__)


METADATA_SCHEMA: dict[str, Any] = {
    "type": "OBJECT",
    "properties": {
        "year": {"type": "NUMBER"},
        "director": {"type": "STRING"},
        "genre": {"type": "ARRAY", "items": {"type": "STRING"}},
        "synopsis": {"type": "STRING"},
        "styleKeywords": {"type": "ARRAY", "items": {"type": "STRING"}},
        "systemNotes": {"type": "STRING"},
    },
}

ANALYSIS_SCHEMA: dict[str, Any] = {
    "type": "OBJECT",
    "properties": {
        "psychologicalProfile": {
            "type": "STRING",
            "description": "A clinical, detached analysis of the protagonist's mental state.",
        },
        "visualMotifs": {
            "type": "ARRAY",
            "items": {"type": "STRING"},
            "description": "3-4 key visual elements observed.",
        },
        "riskAssessment": {
            "type": "STRING",
            "description": "High, Medium, or Low threat level based on intensity.",
        },
    },
    "required": ["psychologicalProfile", "visualMotifs", "riskAssessment"],
}

METADATA_REQUEST_TEMPLATE = dedent(
    """
    Identify the film "{title}". Return a JSON object with the following fields.
    Important: the 'synopsis', 'systemNotes', 'styleKeywords' and 'genre' MUST be in {language}.

    - year (number)
    - director (string - keep the original name if famous, or a {language} translation)
    - genre (array of strings in {language})
    - synopsis (a single sentence summary in {language})
    - styleKeywords (3 adjectives describing the visual style in {language})
    - systemNotes (a short, cryptic, sci-fi style status report about the film's content in {language})
    """
).strip()

ANALYSIS_REQUEST_TEMPLATE = dedent(
    """
    Analyze the following film resource as if you are a high-tech surveillance system
    profiling a suspect or an event. Return the analysis in {language}.

    Film: {title}
    Synopsis: {synopsis}

    Provide a psychological profile of the main character(s), key visual motifs, and a
    "risk assessment" of the film's themes (e.g. is it disturbing, revolutionary, calm?).
    """
).strip()


def fallback_metadata() -> MetadataSuggestion:
    """Return the fixed metadata object used when generation fails."""

    return MetadataSuggestion(
        year=datetime.now().year,
        director=FALLBACK_DIRECTOR,
        genre=list(FALLBACK_GENRE),
        synopsis=FALLBACK_SYNOPSIS,
        style_keywords=list(FALLBACK_STYLE_KEYWORDS),
        system_notes=FALLBACK_SYSTEM_NOTES,
    )


def fallback_analysis() -> AnalysisResult:
    """Return the fixed analysis object used when generation fails."""

    return AnalysisResult(
        psychological_profile=FALLBACK_PROFILE,
        visual_motifs=list(FALLBACK_MOTIFS),
        risk_assessment=FALLBACK_RISK,
    )


class GenerationError(RuntimeError):
    """Raised internally when a provider call cannot produce usable text."""


class GenerativeClient:
    """Base client turning prompts into validated archive payloads."""

    engine = "generic"

    def __init__(self, settings: Settings, http_client: httpx.AsyncClient):
        self._settings = settings
        self._client = http_client

    @property
    def language(self) -> str:
        return self._settings.display_language

    async def fetch_metadata(self, title: str) -> MetadataSuggestion:
        """Suggest metadata for ``title``; the fallback object replaces any failure."""

        prompt = self.build_metadata_prompt(title)
        try:
            data = await self._generate_json(prompt, METADATA_SCHEMA)
            return MetadataSuggestion.model_validate(data)
        except Exception as exc:
            logger.warning(
                "Metadata generation failed for %r via %s: %s",
                title,
                self.engine,
                exc,
            )
            return fallback_metadata()

    async def analyze(self, title: str, synopsis: str) -> AnalysisResult:
        """Produce a profiling report for an entry; never raises."""

        prompt = self.build_analysis_prompt(title, synopsis)
        try:
            data = await self._generate_json(prompt, ANALYSIS_SCHEMA)
            return AnalysisResult.model_validate(data)
        except Exception as exc:
            logger.warning(
                "Analysis failed for %r via %s: %s", title, self.engine, exc
            )
            return fallback_analysis()

    def build_metadata_prompt(self, title: str) -> str:
        return METADATA_REQUEST_TEMPLATE.format(title=title, language=self.language)

    def build_analysis_prompt(self, title: str, synopsis: str) -> str:
        return ANALYSIS_REQUEST_TEMPLATE.format(
            title=title, synopsis=synopsis, language=self.language
        )

    async def _generate_json(
        self, prompt: str, schema: dict[str, Any]
    ) -> dict[str, Any]:
        content = await self._complete(prompt, schema)
        if not content.strip():
            raise GenerationError("Model returned empty content")
        return extract_json_object(content)

    async def _complete(self, prompt: str, schema: dict[str, Any]) -> str:
        """Send ``prompt`` to the provider and return the raw response text."""

        raise NotImplementedError
