"""Entry point for the FastAPI-powered media archive."""

from __future__ import annotations

import json
import logging
from contextlib import AsyncExitStack, asynccontextmanager
from typing import Any

import httpx
from fastapi import FastAPI, HTTPException, Request, Response
from fastapi.responses import HTMLResponse, JSONResponse
from pydantic import ValidationError

from . import __version__
from .config import settings
from .constants import COUNTRY_OPTIONS, GENRE_OPTIONS, LINK_PLACEHOLDER
from .models import Entry, EntryDraft
from .services.archive import ArchiveService, IngestInProgress
from .web import render_archive_page

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

app: FastAPI


@asynccontextmanager
async def lifespan(fastapi_app: FastAPI):
    exit_stack = AsyncExitStack()
    ai_http_client = await exit_stack.enter_async_context(
        httpx.AsyncClient(
            base_url=settings.active_api_url,
            timeout=httpx.Timeout(60.0, connect=10.0),
        )
    )
    service = ArchiveService.from_settings(settings, ai_http_client)
    fastapi_app.state.archive_service = service
    logger.info(
        "Archive ready with %s entries using %s (%s)",
        len(service.store),
        settings.ai_engine,
        settings.active_model,
    )

    try:
        yield
    finally:  # pragma: no cover - teardown path exercised at runtime
        await exit_stack.aclose()


def create_app() -> FastAPI:
    fastapi_app = FastAPI(
        title=settings.app_name,
        description="Personal media archive with AI-assisted metadata",
        version=__version__,
        lifespan=lifespan,
    )
    register_routes(fastapi_app)
    return fastapi_app


def get_archive_service(app: FastAPI) -> ArchiveService:
    service = getattr(app.state, "archive_service", None)
    if not isinstance(service, ArchiveService):
        raise RuntimeError("Archive service not initialised")
    return service


async def _read_json_object(request: Request) -> dict[str, Any]:
    try:
        payload = await request.json()
    except json.JSONDecodeError as exc:
        raise HTTPException(status_code=400, detail="Invalid JSON body") from exc
    if not isinstance(payload, dict):
        raise HTTPException(status_code=400, detail="Invalid payload")
    return payload


def register_routes(fastapi_app: FastAPI) -> None:
    def _require_entry(service: ArchiveService, entry_id: str) -> Entry:
        entry = service.get(entry_id)
        if entry is None:
            raise HTTPException(status_code=404, detail=f"Unknown entry {entry_id}")
        return entry

    @fastapi_app.get("/healthz")
    async def healthcheck() -> dict[str, str]:
        return {"status": "ok"}

    @fastapi_app.get("/", response_class=HTMLResponse)
    async def archive_page() -> HTMLResponse:
        return HTMLResponse(render_archive_page(settings))

    @fastapi_app.get("/api/options")
    async def options() -> dict[str, Any]:
        service = get_archive_service(fastapi_app)
        return {
            "genres": list(GENRE_OPTIONS),
            "countries": list(COUNTRY_OPTIONS),
            "catalogGenres": service.store.genres(),
            "longPressMs": settings.long_press_ms,
            "linkPlaceholder": LINK_PLACEHOLDER,
        }

    @fastapi_app.get("/api/entries")
    async def list_entries(q: str = "", genre: str = "") -> JSONResponse:
        service = get_archive_service(fastapi_app)
        view = service.view(q, genre)
        payload = view.to_payload()
        payload["ingesting"] = service.ingesting
        return JSONResponse(payload)

    @fastapi_app.get("/api/entries/{entry_id}")
    async def get_entry(entry_id: str) -> JSONResponse:
        service = get_archive_service(fastapi_app)
        return JSONResponse(_require_entry(service, entry_id).to_payload())

    @fastapi_app.post("/api/entries")
    async def create_entry(request: Request) -> JSONResponse:
        service = get_archive_service(fastapi_app)
        payload = await _read_json_object(request)
        try:
            draft = EntryDraft.model_validate(payload)
        except ValidationError as exc:
            raise HTTPException(
                status_code=400, detail=exc.errors(include_context=False)
            ) from exc
        if not draft.is_actionable():
            raise HTTPException(status_code=400, detail="Title is required")

        try:
            entry = await service.ingest(draft)
        except IngestInProgress as exc:
            raise HTTPException(status_code=409, detail=str(exc)) from exc
        if entry is None:
            raise HTTPException(status_code=400, detail="Title is required")
        return JSONResponse(entry.to_payload(), status_code=201)

    @fastapi_app.put("/api/entries/{entry_id}")
    async def update_entry(entry_id: str, request: Request) -> Response:
        service = get_archive_service(fastapi_app)
        payload = await _read_json_object(request)
        try:
            record = Entry.model_validate({**payload, "id": entry_id})
        except ValidationError as exc:
            raise HTTPException(
                status_code=400, detail=exc.errors(include_context=False)
            ) from exc
        service.update(entry_id, record)
        return Response(status_code=204)

    @fastapi_app.delete("/api/entries/{entry_id}")
    async def delete_entry(entry_id: str) -> Response:
        service = get_archive_service(fastapi_app)
        service.delete(entry_id)
        return Response(status_code=204)

    @fastapi_app.post("/api/entries/{entry_id}/details")
    async def open_details(entry_id: str) -> JSONResponse:
        service = get_archive_service(fastapi_app)
        ticket = service.open_details(entry_id)
        if ticket is None:
            raise HTTPException(status_code=404, detail=f"Unknown entry {entry_id}")
        return JSONResponse(ticket.to_payload())

    @fastapi_app.get("/api/details")
    async def details_state() -> dict[str, Any]:
        service = get_archive_service(fastapi_app)
        analysis = service.analysis
        return {
            "entryId": service.open_entry_id,
            "analysis": analysis.to_payload() if analysis else None,
        }

    @fastapi_app.delete("/api/details")
    async def close_details() -> Response:
        service = get_archive_service(fastapi_app)
        service.close_details()
        return Response(status_code=204)

    @fastapi_app.post("/api/entries/{entry_id}/analysis")
    async def analyze_entry(entry_id: str, request: Request) -> JSONResponse:
        service = get_archive_service(fastapi_app)
        payload = await _read_json_object(request)
        token = payload.get("token")
        if isinstance(token, bool) or not isinstance(token, int):
            raise HTTPException(status_code=400, detail="An integer token is required")
        _require_entry(service, entry_id)
        outcome = await service.request_analysis(entry_id, token)
        if outcome is None:
            raise HTTPException(status_code=404, detail=f"Unknown entry {entry_id}")
        return JSONResponse(outcome.to_payload())


app = create_app()
