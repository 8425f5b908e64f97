from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, replace
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, field_validator


class MonolingualText(BaseModel):
    model_config = ConfigDict(frozen=True)

    language: str
    value: str


class SiteLink(BaseModel):
    """Link from an item to the page about it on one wiki site."""

    model_config = ConfigDict(frozen=True)

    site: str
    title: str
    badges: list[str] = Field(default_factory=list)
    url: str | None = None


def _empty_map(v: Any) -> Any:
    # Wikibase serializes empty maps as [] in some responses.
    if v is None or v == []:
        return {}
    return v


class _EntityBase(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    id: str
    labels: dict[str, MonolingualText] = Field(default_factory=dict)
    descriptions: dict[str, MonolingualText] = Field(default_factory=dict)
    aliases: dict[str, list[MonolingualText]] = Field(default_factory=dict)
    # Statements are kept as raw API JSON, keyed by property id.
    claims: dict[str, list[dict[str, Any]]] = Field(default_factory=dict)
    lastrevid: int | None = None
    modified: str | None = None

    @field_validator("labels", "descriptions", "aliases", "claims", mode="before")
    @classmethod
    def _maps(cls, v: Any) -> Any:
        return _empty_map(v)

    def label(self, language: str) -> str | None:
        text = self.labels.get(language)
        return text.value if text else None

    def description(self, language: str) -> str | None:
        text = self.descriptions.get(language)
        return text.value if text else None

    def __str__(self) -> str:
        return self.model_dump_json(indent=2, by_alias=True, exclude_none=True)


class ItemDocument(_EntityBase):
    type: Literal["item"] = "item"
    sitelinks: dict[str, SiteLink] = Field(default_factory=dict)

    @field_validator("sitelinks", mode="before")
    @classmethod
    def _sitelinks(cls, v: Any) -> Any:
        return _empty_map(v)

    def site_link_title(self, site_key: str) -> str | None:
        link = self.sitelinks.get(site_key)
        return link.title if link else None


class PropertyDocument(_EntityBase):
    type: Literal["property"] = "property"
    datatype: str | None = None


class LexemeDocument(_EntityBase):
    type: Literal["lexeme"] = "lexeme"
    lemmas: dict[str, MonolingualText] = Field(default_factory=dict)
    lexical_category: str | None = Field(default=None, alias="lexicalCategory")
    language: str | None = None

    @field_validator("lemmas", mode="before")
    @classmethod
    def _lemmas(cls, v: Any) -> Any:
        return _empty_map(v)


EntityDocument = Annotated[
    Union[ItemDocument, PropertyDocument, LexemeDocument],
    Field(discriminator="type"),
]

_DOCUMENT_ADAPTER: TypeAdapter[EntityDocument] = TypeAdapter(EntityDocument)

SUPPORTED_ENTITY_TYPES = frozenset({"item", "property", "lexeme"})


def parse_entity_document(data: dict[str, Any]) -> EntityDocument:
    """Validate one entity object as returned by ``wbgetentities``."""

    return _DOCUMENT_ADAPTER.validate_python(data)


class SearchMatch(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: str | None = None
    language: str | None = None
    text: str | None = None


class SearchResult(BaseModel):
    """One hit of ``wbsearchentities``."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    entity_id: str = Field(alias="id")
    title: str | None = None
    page_id: int | None = Field(default=None, alias="pageid")
    concept_uri: str | None = Field(default=None, alias="concepturi")
    url: str | None = None
    label: str | None = None
    description: str | None = None
    match: SearchMatch | None = None
    aliases: list[str] = Field(default_factory=list)


def _as_set(values: Iterable[str] | None) -> frozenset[str] | None:
    if values is None:
        return None
    if isinstance(values, str):
        return frozenset({values})
    return frozenset(values)


@dataclass(frozen=True, slots=True)
class DocumentFilter:
    """Restricts which parts of an entity document are fetched.

    For each category ``None`` means no restriction and an empty set means
    that nothing of that category is kept.
    """

    languages: frozenset[str] | None = None
    site_links: frozenset[str] | None = None
    properties: frozenset[str] | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "languages", _as_set(self.languages))
        object.__setattr__(self, "site_links", _as_set(self.site_links))
        object.__setattr__(self, "properties", _as_set(self.properties))

    def with_languages(self, languages: Iterable[str] | None) -> DocumentFilter:
        return replace(self, languages=_as_set(languages))

    def with_site_links(self, site_links: Iterable[str] | None) -> DocumentFilter:
        return replace(self, site_links=_as_set(site_links))

    def with_properties(self, properties: Iterable[str] | None) -> DocumentFilter:
        return replace(self, properties=_as_set(properties))

    def includes_language(self, language: str) -> bool:
        return self.languages is None or language in self.languages

    def includes_site_link(self, site_key: str) -> bool:
        return self.site_links is None or site_key in self.site_links

    def includes_property(self, property_id: str) -> bool:
        return self.properties is None or property_id in self.properties

    @property
    def is_unrestricted(self) -> bool:
        return self.languages is None and self.site_links is None and self.properties is None

    def apply(self, document: EntityDocument) -> EntityDocument:
        """Return a copy of ``document`` without the parts this filter excludes."""

        if self.is_unrestricted:
            return document

        def by_lang(values: dict) -> dict:
            return {k: v for k, v in values.items() if self.includes_language(k)}

        update: dict[str, Any] = {
            "labels": by_lang(document.labels),
            "descriptions": by_lang(document.descriptions),
            "aliases": by_lang(document.aliases),
            "claims": {k: v for k, v in document.claims.items() if self.includes_property(k)},
        }
        if isinstance(document, ItemDocument):
            update["sitelinks"] = {
                k: v for k, v in document.sitelinks.items() if self.includes_site_link(k)
            }
        if isinstance(document, LexemeDocument):
            update["lemmas"] = by_lang(document.lemmas)
        return document.model_copy(update=update)
