"""Gemini and OpenRouter clients: request shape, parsing and fallbacks."""

from __future__ import annotations

import asyncio
import json
from datetime import datetime
from typing import Any, Callable

import httpx
import pytest

from app.config import Settings
from app.constants import FALLBACK_MOTIFS, FALLBACK_PROFILE, FALLBACK_RISK
from app.services.archive import build_generative_client
from app.services.gemini import GeminiClient
from app.services.generative import GenerativeClient, fallback_analysis, fallback_metadata
from app.services.openrouter import OpenRouterClient

Handler = Callable[[httpx.Request], httpx.Response]

DUNE_PAYLOAD = {
    "year": 2021,
    "director": "Denis Villeneuve",
    "genre": ["科幻"],
    "synopsis": "保罗·厄崔迪前往沙丘星球。",
    "styleKeywords": ["宏大", "沙漠", "史诗"],
    "systemNotes": "香料浓度超标。",
}

ANALYSIS_PAYLOAD = {
    "psychologicalProfile": "主角表现出高度警觉。",
    "visualMotifs": ["沙尘", "阴影", "光柱"],
    "riskAssessment": "高",
}


def _settings(**overrides: Any) -> Settings:
    base = Settings(_env_file=None, DISPLAY_LANGUAGE="Chinese")
    values = {"gemini_api_key": "gemini-key", "openrouter_api_key": "router-key"}
    values.update(overrides)
    return base.model_copy(update=values)


def _gemini_body(text: str) -> dict[str, Any]:
    return {"candidates": [{"content": {"parts": [{"text": text}]}}]}


def _router_body(text: str) -> dict[str, Any]:
    return {"choices": [{"message": {"role": "assistant", "content": text}}]}


def _run(
    client_cls: type[GenerativeClient],
    handler: Handler,
    operation: Callable[[GenerativeClient], Any],
    settings: Settings | None = None,
) -> Any:
    resolved = settings or _settings()
    base_url = (
        str(resolved.gemini_api_url)
        if client_cls is GeminiClient
        else str(resolved.openrouter_api_url)
    )

    async def runner() -> Any:
        async with httpx.AsyncClient(
            base_url=base_url, transport=httpx.MockTransport(handler)
        ) as http_client:
            client = client_cls(resolved, http_client)
            return await operation(client)

    return asyncio.run(runner())


def test_gemini_fetch_metadata_sends_schema_request() -> None:
    captured: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        captured.append(request)
        return httpx.Response(200, json=_gemini_body(json.dumps(DUNE_PAYLOAD)))

    result = _run(GeminiClient, handler, lambda client: client.fetch_metadata("Dune"))

    assert result.director == "Denis Villeneuve"
    assert result.style_keywords == ["宏大", "沙漠", "史诗"]
    assert result.year == 2021

    request = captured[0]
    assert request.url.path == "/v1beta/models/gemini-2.5-flash:generateContent"
    assert request.headers["x-goog-api-key"] == "gemini-key"
    body = json.loads(request.content)
    config = body["generationConfig"]
    assert config["responseMimeType"] == "application/json"
    assert set(config["responseSchema"]["properties"]) == {
        "year",
        "director",
        "genre",
        "synopsis",
        "styleKeywords",
        "systemNotes",
    }
    prompt = body["contents"][0]["parts"][0]["text"]
    assert '"Dune"' in prompt
    assert "Chinese" in prompt


def test_gemini_analyze_parses_result() -> None:
    captured: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        captured.append(request)
        return httpx.Response(200, json=_gemini_body(json.dumps(ANALYSIS_PAYLOAD)))

    result = _run(
        GeminiClient, handler, lambda client: client.analyze("Dune", "沙丘星球。")
    )

    assert result.psychological_profile == "主角表现出高度警觉。"
    assert result.visual_motifs == ["沙尘", "阴影", "光柱"]
    assert result.risk_assessment == "高"
    body = json.loads(captured[0].content)
    schema = body["generationConfig"]["responseSchema"]
    assert schema["required"] == ["psychologicalProfile", "visualMotifs", "riskAssessment"]
    assert "沙丘星球。" in body["contents"][0]["parts"][0]["text"]


def test_gemini_joins_split_text_parts() -> None:
    text = json.dumps(ANALYSIS_PAYLOAD)

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(
            200,
            json={
                "candidates": [
                    {"content": {"parts": [{"text": text[:10]}, {"text": text[10:]}]}}
                ]
            },
        )

    result = _run(GeminiClient, handler, lambda client: client.analyze("Dune", "..."))

    assert result.risk_assessment == "高"


def _raise_connect(request: httpx.Request) -> httpx.Response:
    raise httpx.ConnectError("network unreachable", request=request)


FAILURE_HANDLERS: dict[str, Handler] = {
    "http-error": lambda request: httpx.Response(500, text="upstream exploded"),
    "transport-error": _raise_connect,
    "no-candidates": lambda request: httpx.Response(
        200, json={"promptFeedback": {"blockReason": "SAFETY"}}
    ),
    "empty-text": lambda request: httpx.Response(200, json=_gemini_body("   ")),
    "prose": lambda request: httpx.Response(200, json=_gemini_body("I cannot help.")),
    "broken-json": lambda request: httpx.Response(200, json=_gemini_body("{year: 20")),
    "wrong-types": lambda request: httpx.Response(
        200, json=_gemini_body(json.dumps({"genre": "科幻", "year": "soon"}))
    ),
    "not-json-body": lambda request: httpx.Response(200, text="<html>oops</html>"),
}


@pytest.mark.parametrize("failure", sorted(FAILURE_HANDLERS))
def test_gemini_metadata_failures_return_fallback(failure: str) -> None:
    result = _run(
        GeminiClient,
        FAILURE_HANDLERS[failure],
        lambda client: client.fetch_metadata("Dune"),
    )

    assert result == fallback_metadata()
    assert result.year == datetime.now().year


@pytest.mark.parametrize("failure", sorted(FAILURE_HANDLERS))
def test_gemini_analysis_failures_return_fallback(failure: str) -> None:
    result = _run(
        GeminiClient,
        FAILURE_HANDLERS[failure],
        lambda client: client.analyze("Dune", "..."),
    )

    assert result == fallback_analysis()


def test_analysis_missing_required_field_is_all_or_nothing() -> None:
    partial = {key: value for key, value in ANALYSIS_PAYLOAD.items() if key != "riskAssessment"}

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json=_gemini_body(json.dumps(partial)))

    result = _run(GeminiClient, handler, lambda client: client.analyze("Dune", "..."))

    assert result.psychological_profile == FALLBACK_PROFILE
    assert result.visual_motifs == list(FALLBACK_MOTIFS)
    assert result.risk_assessment == FALLBACK_RISK


def test_missing_api_key_skips_network_and_falls_back() -> None:
    calls: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        return httpx.Response(200, json=_gemini_body(json.dumps(DUNE_PAYLOAD)))

    result = _run(
        GeminiClient,
        handler,
        lambda client: client.fetch_metadata("Dune"),
        settings=_settings(gemini_api_key=None),
    )

    assert result == fallback_metadata()
    assert calls == []


def test_partial_metadata_is_accepted() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json=_gemini_body(json.dumps({"director": "Jane Campion"})))

    result = _run(GeminiClient, handler, lambda client: client.fetch_metadata("The Piano"))

    assert result.director == "Jane Campion"
    assert result.genre is None
    assert result.year is None


def test_openrouter_fetch_metadata_parses_fenced_json() -> None:
    captured: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        captured.append(request)
        content = "Here you go:\n```json\n" + json.dumps(DUNE_PAYLOAD, ensure_ascii=False) + "\n```"
        return httpx.Response(200, json=_router_body(content))

    result = _run(OpenRouterClient, handler, lambda client: client.fetch_metadata("Dune"))

    assert result.genre == ["科幻"]
    request = captured[0]
    assert request.url.path == "/api/v1/chat/completions"
    assert request.headers["Authorization"] == "Bearer router-key"
    body = json.loads(request.content)
    assert body["model"] == "google/gemini-2.5-flash"
    assert body["messages"][0]["role"] == "system"
    assert "styleKeywords" in body["messages"][1]["content"]


def test_openrouter_analysis_prompt_lists_required_fields() -> None:
    captured: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        captured.append(request)
        return httpx.Response(200, json=_router_body(json.dumps(ANALYSIS_PAYLOAD)))

    result = _run(OpenRouterClient, handler, lambda client: client.analyze("Dune", "..."))

    assert result.visual_motifs == ["沙尘", "阴影", "光柱"]
    prompt = json.loads(captured[0].content)["messages"][1]["content"]
    assert "Required fields: psychologicalProfile, visualMotifs, riskAssessment" in prompt


@pytest.mark.parametrize(
    "body",
    [
        {"choices": []},
        {"choices": [{"message": {"content": None}}]},
        _router_body("no json at all"),
    ],
)
def test_openrouter_failures_return_fallback(body: dict[str, Any]) -> None:
    result = _run(
        OpenRouterClient,
        lambda request: httpx.Response(200, json=body),
        lambda client: client.analyze("Dune", "..."),
    )

    assert result == fallback_analysis()


def test_build_generative_client_selects_engine() -> None:
    async def runner() -> tuple[GenerativeClient, GenerativeClient]:
        async with httpx.AsyncClient() as http_client:
            gemini = build_generative_client(_settings(ai_engine="gemini"), http_client)
            router = build_generative_client(_settings(ai_engine="openrouter"), http_client)
            return gemini, router

    gemini, router = asyncio.run(runner())

    assert isinstance(gemini, GeminiClient)
    assert isinstance(router, OpenRouterClient)
