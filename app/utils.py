"""Utility helpers for the archive service."""

from __future__ import annotations

import json
import re
import unicodedata
from typing import Any


JSON_BLOCK_RE = re.compile(r"```(?:json)?\s*(\{.*?\})\s*```", re.DOTALL)
BARE_JSON_RE = re.compile(r"\{.*\}", re.DOTALL)


def extract_json_object(content: str) -> dict[str, Any]:
    """Extract and parse the first JSON object from the model response."""

    match = JSON_BLOCK_RE.search(content)
    if match:
        payload = match.group(1)
    else:
        match = BARE_JSON_RE.search(content)
        if not match:
            raise ValueError("No JSON object found in response")
        payload = match.group(0)

    try:
        parsed = json.loads(payload)
    except json.JSONDecodeError as exc:
        raise ValueError("Invalid JSON payload produced by the model") from exc
    if not isinstance(parsed, dict):
        raise ValueError("Model payload is not a JSON object")
    return parsed


def collation_key(value: str) -> tuple[str, str, str]:
    """Return a sort key approximating locale-aware string comparison.

    Accents and case are ignored at the first level, accents decide the
    second, and lowercase sorts ahead of uppercase at the third.
    """

    decomposed = unicodedata.normalize("NFKD", value)
    base = "".join(char for char in decomposed if not unicodedata.combining(char))
    return base.casefold(), value.casefold(), value.swapcase()


def title_initial(title: str) -> str:
    """Return the grouping key for a title (its upper-cased first character)."""

    stripped = title.strip()
    if not stripped:
        return "#"
    return stripped[0].upper()


def format_sequence_id(prefix: str, number: int, width: int) -> str:
    """Return a zero-padded sequence identifier such as ``M001``."""

    return f"{prefix}{number:0{width}d}"


def parse_sequence_number(prefix: str, identifier: str) -> int | None:
    """Return the numeric suffix of ``identifier`` when it uses ``prefix``."""

    if not identifier.startswith(prefix):
        return None
    suffix = identifier[len(prefix):]
    if not suffix.isdigit():
        return None
    return int(suffix)


def contains_folded(haystack: str | None, needle: str) -> bool:
    """Case-insensitive substring check."""

    if not needle:
        return True
    return needle.casefold() in (haystack or "").casefold()
