"""Archive service wiring the catalog store to the generative client."""

from __future__ import annotations

import logging
from dataclasses import dataclass

import httpx

from ..config import Settings
from ..models import AnalysisResult, CatalogView, Entry, EntryDraft
from ..seed_catalog import seed_entries
from ..store import CatalogStore
from .gemini import GeminiClient
from .generative import GenerativeClient
from .openrouter import OpenRouterClient

logger = logging.getLogger(__name__)


class IngestInProgress(RuntimeError):
    """Raised when a second ingest starts before the first one resolved."""


@dataclass(slots=True)
class DetailsTicket:
    """Handle returned when the details view opens for an entry."""

    entry: Entry
    token: int

    def to_payload(self) -> dict[str, object]:
        return {"entry": self.entry.to_payload(), "token": self.token}


@dataclass(slots=True)
class AnalysisOutcome:
    """Result of an analysis request and whether it still applies."""

    entry_id: str
    token: int
    result: AnalysisResult
    current: bool

    def to_payload(self) -> dict[str, object]:
        return {
            "entryId": self.entry_id,
            "token": self.token,
            "current": self.current,
            "analysis": self.result.to_payload(),
        }


def build_generative_client(
    settings: Settings, http_client: httpx.AsyncClient
) -> GenerativeClient:
    """Return the client for the configured ``AI_ENGINE``."""

    if settings.ai_engine == "openrouter":
        return OpenRouterClient(settings, http_client)
    return GeminiClient(settings, http_client)


class ArchiveService:
    """Owns the catalog store and the UI state that outlives a single request.

    Every open/close of the details view bumps a generation counter. Analysis
    results carry the generation they were requested under and only land when
    it is still current, so a slow response for a previously opened entry
    cannot replace what the user is looking at now.
    """

    def __init__(self, store: CatalogStore, client: GenerativeClient) -> None:
        self.store = store
        self._client = client
        self._ingesting = False
        self._generation = 0
        self._analysis_seq = 0
        self._open_entry_id: str | None = None
        self._analysis: AnalysisResult | None = None

    @classmethod
    def from_settings(
        cls, settings: Settings, http_client: httpx.AsyncClient
    ) -> "ArchiveService":
        client = build_generative_client(settings, http_client)
        store = CatalogStore(
            client,
            id_prefix=settings.id_prefix,
            id_width=settings.id_width,
            entries=seed_entries() if settings.seed_catalog else (),
        )
        return cls(store, client)

    @property
    def ingesting(self) -> bool:
        return self._ingesting

    @property
    def open_entry_id(self) -> str | None:
        return self._open_entry_id

    @property
    def analysis(self) -> AnalysisResult | None:
        """Return the analysis shown for the open entry, if any."""

        return self._analysis

    def view(self, query: str = "", genre: str = "") -> CatalogView:
        return self.store.view(query, genre)

    def get(self, entry_id: str) -> Entry | None:
        return self.store.get(entry_id)

    async def ingest(self, draft: EntryDraft) -> Entry | None:
        if not draft.is_actionable():
            return None
        if self._ingesting:
            raise IngestInProgress("An ingest request is already being processed")
        self._ingesting = True
        try:
            return await self.store.create(draft)
        finally:
            self._ingesting = False

    def update(self, entry_id: str, record: Entry) -> None:
        self.store.update(entry_id, record)

    def delete(self, entry_id: str) -> None:
        self.store.delete(entry_id)
        if self._open_entry_id == entry_id:
            self.close_details()

    def open_details(self, entry_id: str) -> DetailsTicket | None:
        entry = self.store.get(entry_id)
        if entry is None:
            return None
        self._generation += 1
        self._open_entry_id = entry_id
        self._analysis = None
        return DetailsTicket(entry=entry, token=self._generation)

    def close_details(self) -> None:
        self._generation += 1
        self._open_entry_id = None
        self._analysis = None

    async def request_analysis(
        self, entry_id: str, token: int
    ) -> AnalysisOutcome | None:
        """Analyze an entry; the result is kept only if ``token`` is still current."""

        entry = self.store.get(entry_id)
        if entry is None:
            return None

        self._analysis_seq += 1
        sequence = self._analysis_seq
        result = await self._client.analyze(entry.title, entry.synopsis)

        current = (
            token == self._generation
            and self._open_entry_id == entry_id
            and sequence == self._analysis_seq
        )
        if current:
            self._analysis = result
        else:
            logger.info(
                "Discarding stale analysis for %s (token %s, generation %s)",
                entry_id,
                token,
                self._generation,
            )
        return AnalysisOutcome(
            entry_id=entry_id, token=token, result=result, current=current
        )
