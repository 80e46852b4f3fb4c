"""Pydantic models describing archive entries and AI payloads."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .constants import (
    DEFAULT_GENRE,
    LINK_PLACEHOLDER,
    UNKNOWN,
)
from .utils import title_initial


def _clean_tags(value: object) -> object:
    if value is None:
        return value
    if isinstance(value, str):
        value = [value]
    if isinstance(value, (list, tuple)):
        return [str(tag).strip() for tag in value if str(tag).strip()]
    return value


class Entry(BaseModel):
    """A single cataloged media item."""

    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(min_length=1)
    title: str = Field(min_length=1)
    year: int | str = UNKNOWN
    director: str = UNKNOWN
    genre: list[str] = Field(default_factory=lambda: list(DEFAULT_GENRE))
    country: str | None = None
    synopsis: str = ""
    poster_url: str = Field(default="", alias="posterUrl")
    style_keywords: list[str] = Field(default_factory=list, alias="styleKeywords")
    system_notes: str = Field(default="", alias="systemNotes")
    link: str = LINK_PLACEHOLDER

    @field_validator("title", mode="before")
    @classmethod
    def _strip_title(cls, value: object) -> object:
        if isinstance(value, str):
            return value.strip()
        return value

    @field_validator("year", mode="before")
    @classmethod
    def _coerce_year(cls, value: object) -> object:
        """Accept numeric strings from edit forms; blanks become unknown."""

        if value is None:
            return UNKNOWN
        if isinstance(value, str):
            stripped = value.strip()
            if not stripped:
                return UNKNOWN
            if stripped.isdigit():
                return int(stripped)
            return stripped
        if isinstance(value, float) and value.is_integer():
            return int(value)
        return value

    @field_validator("genre", mode="before")
    @classmethod
    def _normalise_genre(cls, value: object) -> object:
        cleaned = _clean_tags(value)
        if not cleaned:
            return list(DEFAULT_GENRE)
        return cleaned

    @field_validator("style_keywords", mode="before")
    @classmethod
    def _normalise_keywords(cls, value: object) -> object:
        cleaned = _clean_tags(value)
        return cleaned if cleaned is not None else []

    @field_validator("link", mode="before")
    @classmethod
    def _normalise_link(cls, value: object) -> object:
        if value is None:
            return LINK_PLACEHOLDER
        if isinstance(value, str) and not value.strip():
            return LINK_PLACEHOLDER
        if isinstance(value, str):
            return value.strip()
        return value

    def has_link(self) -> bool:
        """Return whether the entry points at a real external location."""

        return self.link != LINK_PLACEHOLDER

    def badge(self) -> str:
        return self.genre[0]

    def title_initial(self) -> str:
        return title_initial(self.title)

    def to_payload(self) -> dict[str, object]:
        """Return the camelCase JSON representation used by the API."""

        return self.model_dump(by_alias=True)


class EntryDraft(BaseModel):
    """Manual input collected by the ingest form."""

    model_config = ConfigDict(populate_by_name=True)

    title: str = ""
    link: str | None = None
    country: str | None = None
    genre: list[str] = Field(default_factory=list)

    @field_validator("title", mode="before")
    @classmethod
    def _strip_title(cls, value: object) -> object:
        if value is None:
            return ""
        if isinstance(value, str):
            return value.strip()
        return value

    @field_validator("link", "country", mode="before")
    @classmethod
    def _strip_blank(cls, value: object) -> object:
        if isinstance(value, str):
            stripped = value.strip()
            return stripped or None
        return value

    @field_validator("genre", mode="before")
    @classmethod
    def _normalise_genre(cls, value: object) -> object:
        cleaned = _clean_tags(value)
        return cleaned if cleaned is not None else []

    def is_actionable(self) -> bool:
        return bool(self.title)


class MetadataSuggestion(BaseModel):
    """Structured metadata suggested by the model for a title."""

    model_config = ConfigDict(populate_by_name=True)

    year: int | None = None
    director: str | None = None
    genre: list[str] | None = None
    synopsis: str | None = None
    style_keywords: list[str] | None = Field(default=None, alias="styleKeywords")
    system_notes: str | None = Field(default=None, alias="systemNotes")


class AnalysisResult(BaseModel):
    """Profiling report generated on demand for a single entry."""

    model_config = ConfigDict(populate_by_name=True)

    psychological_profile: str = Field(alias="psychologicalProfile")
    visual_motifs: list[str] = Field(alias="visualMotifs")
    risk_assessment: str = Field(alias="riskAssessment")

    def to_payload(self) -> dict[str, object]:
        return self.model_dump(by_alias=True)


class CatalogGroup(BaseModel):
    """Entries sharing the same title initial."""

    key: str
    entries: list[Entry] = Field(default_factory=list)


class CatalogView(BaseModel):
    """Filtered, sorted and alphabetically grouped projection of the catalog."""

    query: str = ""
    genre: str = ""
    groups: list[CatalogGroup] = Field(default_factory=list)

    @property
    def total(self) -> int:
        return sum(len(group.entries) for group in self.groups)

    def keys(self) -> list[str]:
        return [group.key for group in self.groups]

    def entries(self) -> list[Entry]:
        return [entry for group in self.groups for entry in group.entries]

    def to_payload(self) -> dict[str, object]:
        return {
            "query": self.query,
            "genre": self.genre,
            "total": self.total,
            "groups": [
                {
                    "key": group.key,
                    "entries": [entry.to_payload() for entry in group.entries],
                }
                for group in self.groups
            ],
        }
