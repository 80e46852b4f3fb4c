"""Archive service: ingest guard and stale-analysis protection."""

from __future__ import annotations

import asyncio

import httpx
import pytest
from fakes import FakeGenerativeClient

from app.config import Settings
from app.models import EntryDraft
from app.seed_catalog import seed_entries
from app.services.archive import ArchiveService, IngestInProgress
from app.services.gemini import GeminiClient
from app.store import CatalogStore


def _make_service(client: FakeGenerativeClient | None = None) -> ArchiveService:
    fake = client or FakeGenerativeClient()
    store = CatalogStore(fake, entries=seed_entries())
    return ArchiveService(store, fake)  # type: ignore[arg-type]


def test_from_settings_seeds_catalog_and_picks_engine() -> None:
    async def runner() -> tuple[ArchiveService, ArchiveService]:
        async with httpx.AsyncClient() as http_client:
            seeded = ArchiveService.from_settings(
                Settings(_env_file=None, AI_ENGINE="gemini", SEED_CATALOG=True), http_client
            )
            empty = ArchiveService.from_settings(
                Settings(_env_file=None, SEED_CATALOG=False, ID_PREFIX="RV"), http_client
            )
            return seeded, empty

    seeded, empty = asyncio.run(runner())

    assert len(seeded.store) == 8
    assert isinstance(seeded._client, GeminiClient)
    assert len(empty.store) == 0


def test_second_ingest_while_pending_is_rejected() -> None:
    client = FakeGenerativeClient()
    service = _make_service(client)

    async def runner() -> None:
        gate = asyncio.Event()
        client.gates.append(gate)
        first = asyncio.create_task(service.ingest(EntryDraft(title="Dune")))
        await asyncio.sleep(0)
        assert service.ingesting
        with pytest.raises(IngestInProgress):
            await service.ingest(EntryDraft(title="Dune Part Two"))
        gate.set()
        entry = await first
        assert entry is not None and entry.title == "Dune"

    asyncio.run(runner())

    assert not service.ingesting
    assert client.metadata_calls == ["Dune"]


def test_blank_ingest_is_ignored_without_guard() -> None:
    client = FakeGenerativeClient()
    service = _make_service(client)

    assert asyncio.run(service.ingest(EntryDraft(title=" "))) is None
    assert client.metadata_calls == []
    assert not service.ingesting


def test_analysis_for_open_entry_is_kept() -> None:
    service = _make_service()

    ticket = service.open_details("M002")
    assert ticket is not None
    outcome = asyncio.run(service.request_analysis("M002", ticket.token))

    assert outcome is not None and outcome.current
    assert service.analysis == outcome.result
    assert service.analysis.psychological_profile == "profile of Arrival"  # type: ignore[union-attr]


def test_stale_analysis_does_not_overwrite_newer_details() -> None:
    client = FakeGenerativeClient()
    service = _make_service(client)

    async def runner():
        first = service.open_details("M001")
        gate = asyncio.Event()
        client.gates.append(gate)
        pending = asyncio.create_task(service.request_analysis("M001", first.token))
        await asyncio.sleep(0)
        second = service.open_details("M002")
        gate.set()
        return await pending, second

    outcome, second = asyncio.run(runner())

    assert outcome is not None and not outcome.current
    assert service.open_entry_id == "M002"
    assert service.analysis is None
    assert second is not None and second.token > outcome.token


def test_latest_analysis_request_wins_within_same_details() -> None:
    client = FakeGenerativeClient()
    service = _make_service(client)

    async def runner():
        ticket = service.open_details("M005")
        slow, fast = asyncio.Event(), asyncio.Event()
        client.gates.extend([slow, fast])
        older = asyncio.create_task(service.request_analysis("M005", ticket.token))
        await asyncio.sleep(0)
        newer = asyncio.create_task(service.request_analysis("M005", ticket.token))
        await asyncio.sleep(0)
        fast.set()
        newer_outcome = await newer
        slow.set()
        older_outcome = await older
        return older_outcome, newer_outcome

    older, newer = asyncio.run(runner())

    assert newer.current
    assert not older.current
    assert service.analysis == newer.result


def test_closing_details_discards_analysis() -> None:
    service = _make_service()
    ticket = service.open_details("M003")
    asyncio.run(service.request_analysis("M003", ticket.token))  # type: ignore[union-attr]

    service.close_details()

    assert service.open_entry_id is None
    assert service.analysis is None


def test_deleting_open_entry_closes_details() -> None:
    service = _make_service()
    service.open_details("M004")

    service.delete("M004")

    assert service.open_entry_id is None
    assert service.get("M004") is None


def test_unknown_entries_yield_no_ticket_or_outcome() -> None:
    client = FakeGenerativeClient()
    service = _make_service(client)

    assert service.open_details("M404") is None
    assert asyncio.run(service.request_analysis("M404", 1)) is None
    assert client.analysis_calls == []
