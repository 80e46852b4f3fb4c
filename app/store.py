"""In-memory catalog store owning the archive entries."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Iterable, Iterator, Protocol

from .constants import (
    DEFAULT_COUNTRY,
    DEFAULT_DIRECTOR,
    DEFAULT_GENRE,
    DEFAULT_STYLE_KEYWORDS,
    DEFAULT_SYNOPSIS,
    DEFAULT_SYSTEM_NOTES,
    LINK_PLACEHOLDER,
    POSTER_URL_TEMPLATE,
)
from .models import CatalogGroup, CatalogView, Entry, EntryDraft, MetadataSuggestion
from .utils import (
    collation_key,
    contains_folded,
    format_sequence_id,
    parse_sequence_number,
)

logger = logging.getLogger(__name__)


class MetadataProvider(Protocol):
    async def fetch_metadata(self, title: str) -> MetadataSuggestion: ...


def _first_text(*candidates: str | None, default: str) -> str:
    for candidate in candidates:
        if candidate is not None and candidate.strip():
            return candidate
    return default


def _first_tags(*candidates: list[str] | None, default: Iterable[str]) -> list[str]:
    for candidate in candidates:
        if candidate:
            cleaned = [tag for tag in candidate if tag and tag.strip()]
            if cleaned:
                return list(cleaned)
    return list(default)


class CatalogStore:
    """Insertion-ordered collection of entries keyed by id.

    Identifiers come from a counter that only moves forward, so an id freed by
    a delete is never handed out again.
    """

    def __init__(
        self,
        metadata_provider: MetadataProvider,
        *,
        id_prefix: str = "M",
        id_width: int = 3,
        entries: Iterable[Entry] = (),
    ) -> None:
        self._metadata = metadata_provider
        self._id_prefix = id_prefix
        self._id_width = id_width
        self._entries: dict[str, Entry] = {}
        self._next_number = 1
        for entry in entries:
            self._load(entry)

    def _load(self, entry: Entry) -> None:
        if entry.id in self._entries:
            raise ValueError(f"Duplicate entry id {entry.id!r}")
        self._entries[entry.id] = entry
        number = parse_sequence_number(self._id_prefix, entry.id)
        floor = max(number or 0, len(self._entries))
        self._next_number = max(self._next_number, floor + 1)

    def _allocate_id(self) -> str:
        while True:
            candidate = format_sequence_id(
                self._id_prefix, self._next_number, self._id_width
            )
            self._next_number += 1
            if candidate not in self._entries:
                return candidate

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, entry_id: object) -> bool:
        return entry_id in self._entries

    def __iter__(self) -> Iterator[Entry]:
        return iter(list(self._entries.values()))

    def entries(self) -> list[Entry]:
        return list(self._entries.values())

    def get(self, entry_id: str) -> Entry | None:
        return self._entries.get(entry_id)

    def genres(self) -> list[str]:
        """Return every genre tag in use, in first-seen order."""

        seen: dict[str, None] = {}
        for entry in self._entries.values():
            for tag in entry.genre:
                seen.setdefault(tag, None)
        return list(seen)

    async def create(self, draft: EntryDraft) -> Entry | None:
        """Ingest a new entry, filling blanks from the metadata provider.

        A blank title is a precondition failure: nothing is created and the
        provider is not contacted.
        """

        if not draft.is_actionable():
            logger.debug("Ignoring ingest request without a title")
            return None

        entry_id = self._allocate_id()
        suggestion = await self._metadata.fetch_metadata(draft.title)
        entry = self._resolve_entry(entry_id, draft, suggestion)
        self._entries[entry_id] = entry
        logger.info("Archived %s as %s", entry.title, entry_id)
        return entry

    @staticmethod
    def _resolve_entry(
        entry_id: str, draft: EntryDraft, suggestion: MetadataSuggestion
    ) -> Entry:
        return Entry(
            id=entry_id,
            title=draft.title,
            link=draft.link or LINK_PLACEHOLDER,
            poster_url=POSTER_URL_TEMPLATE.format(entry_id=entry_id),
            year=suggestion.year or datetime.now().year,
            director=_first_text(suggestion.director, default=DEFAULT_DIRECTOR),
            genre=_first_tags(draft.genre, suggestion.genre, default=DEFAULT_GENRE),
            country=_first_text(draft.country, default=DEFAULT_COUNTRY),
            synopsis=_first_text(suggestion.synopsis, default=DEFAULT_SYNOPSIS),
            style_keywords=_first_tags(
                suggestion.style_keywords, default=DEFAULT_STYLE_KEYWORDS
            ),
            system_notes=_first_text(
                suggestion.system_notes, default=DEFAULT_SYSTEM_NOTES
            ),
        )

    def update(self, entry_id: str, record: Entry) -> None:
        """Replace an entry in place; unknown ids are ignored."""

        if entry_id not in self._entries:
            logger.debug("Skipping update for unknown entry %s", entry_id)
            return
        if record.id != entry_id:
            record = record.model_copy(update={"id": entry_id})
        self._entries[entry_id] = record

    def delete(self, entry_id: str) -> None:
        """Remove an entry; unknown ids are ignored."""

        removed = self._entries.pop(entry_id, None)
        if removed is None:
            logger.debug("Skipping delete for unknown entry %s", entry_id)
            return
        logger.info("Removed %s (%s)", removed.title, entry_id)

    def view(self, query: str = "", genre: str = "") -> CatalogView:
        """Return the filtered, sorted and grouped projection of the catalog."""

        query = query or ""
        genre = genre or ""
        matches = [
            entry
            for entry in self._entries.values()
            if (
                not query
                or contains_folded(entry.title, query)
                or contains_folded(entry.director, query)
            )
            and (not genre or genre in entry.genre)
        ]
        # sorted() is stable, so equal titles keep their insertion order.
        matches = sorted(matches, key=lambda entry: collation_key(entry.title))

        grouped: dict[str, list[Entry]] = {}
        for entry in matches:
            grouped.setdefault(entry.title_initial(), []).append(entry)

        groups = [CatalogGroup(key=key, entries=grouped[key]) for key in sorted(grouped)]
        return CatalogView(query=query, genre=genre, groups=groups)
