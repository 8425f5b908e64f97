from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator, Sequence
from typing import Any

from pydantic import ValidationError

from wikifetch.api import ApiConnection
from wikifetch.errors import UnexpectedResponseError
from wikifetch.models import (
    SUPPORTED_ENTITY_TYPES,
    DocumentFilter,
    EntityDocument,
    ItemDocument,
    SearchResult,
    parse_entity_document,
)
from wikifetch.settings import settings

logger = logging.getLogger(__name__)

# wbsearchentities refuses larger pages for anonymous clients
SEARCH_PAGE_SIZE = 50


def _chunks(values: Sequence[str], size: int) -> Iterator[Sequence[str]]:
    for i in range(0, len(values), size):
        yield values[i : i + size]


def _unique(values: Iterable[str]) -> list[str]:
    # a bare string is one id or title, not a sequence of characters
    if isinstance(values, str):
        values = [values]
    seen: set[str] = set()
    return [v for v in values if not (v in seen or seen.add(v))]


def _normalized_titles(data: dict[str, Any]) -> dict[str, str]:
    """Map normalized page titles back to the titles we asked for."""

    block = data.get("normalized") or {}
    entries = block.get("n", []) if isinstance(block, dict) else block
    if isinstance(entries, dict):
        entries = [entries]
    return {e["to"]: e["from"] for e in entries if isinstance(e, dict) and "to" in e and "from" in e}


def request_params(flt: DocumentFilter) -> dict[str, str]:
    """Translate a filter into ``wbgetentities`` parameters.

    The API cannot select single properties, so a non-empty property filter
    still fetches all claims; ``DocumentFilter.apply`` trims them afterwards.
    """

    props = ["info", "datatype"]
    if flt.languages is None or flt.languages:
        props += ["labels", "aliases", "descriptions"]
    if flt.properties is None or flt.properties:
        props.append("claims")
    if flt.site_links is None or flt.site_links:
        props.append("sitelinks")

    params = {"props": "|".join(props)}
    if flt.languages:
        params["languages"] = "|".join(sorted(flt.languages))
    if flt.site_links:
        params["sitefilter"] = "|".join(sorted(flt.site_links))
    return params


class WikibaseDataFetcher:
    """Reads entity documents and search results from a Wikibase API.

    The default filter is immutable; every fetch method also takes an
    explicit ``filter`` that applies to that call only.
    """

    def __init__(
        self,
        connection: ApiConnection,
        *,
        filter: DocumentFilter | None = None,
        max_list_size: int | None = None,
    ):
        self.connection = connection
        self._filter = filter or DocumentFilter()
        self.max_list_size = max_list_size or settings.max_list_size

    @classmethod
    def wikidata(cls) -> WikibaseDataFetcher:
        return cls(ApiConnection.wikidata())

    @property
    def filter(self) -> DocumentFilter:
        return self._filter

    def close(self) -> None:
        self.connection.close()

    # ------------------------------------------------------------------ #
    def get_entity_document(
        self, entity_id: str, filter: DocumentFilter | None = None
    ) -> EntityDocument | None:
        return self.get_entity_documents([entity_id], filter=filter).get(entity_id)

    def get_entity_documents(
        self, entity_ids: Iterable[str], filter: DocumentFilter | None = None
    ) -> dict[str, EntityDocument]:
        """Fetch documents by id, keyed by the requested id in request order.

        Missing entities are left out. Redirected ids are keyed by the id
        that was asked for.
        """

        flt = filter or self._filter
        ids = _unique(entity_ids)
        found: dict[str, EntityDocument] = {}
        for chunk in _chunks(ids, self.max_list_size):
            data = self.connection.send_action(
                "wbgetentities", {"ids": "|".join(chunk), **request_params(flt)}
            )
            for key, raw in self._entities(data):
                doc = self._parse(raw)
                if doc is None:
                    continue
                redirect = raw.get("redirects") or {}
                found[redirect.get("from", key)] = flt.apply(doc)
        return {i: found[i] for i in ids if i in found}

    def get_entity_document_by_title(
        self, site_key: str, title: str, filter: DocumentFilter | None = None
    ) -> EntityDocument | None:
        return self.get_entity_documents_by_title(site_key, [title], filter=filter).get(title)

    def get_entity_documents_by_title(
        self,
        site_key: str,
        titles: Iterable[str],
        filter: DocumentFilter | None = None,
    ) -> dict[str, EntityDocument]:
        """Fetch items by the titles of their pages on ``site_key``.

        The result is keyed by the requested titles, in request order.
        """

        flt = filter or self._filter
        # The site link for site_key is needed to match documents to titles.
        request_filter = flt
        if flt.site_links is not None:
            request_filter = flt.with_site_links(flt.site_links | {site_key})

        wanted = _unique(titles)
        found: dict[str, EntityDocument] = {}
        for chunk in _chunks(wanted, self.max_list_size):
            data = self.connection.send_action(
                "wbgetentities",
                {"sites": site_key, "titles": "|".join(chunk), **request_params(request_filter)},
            )
            normalized = _normalized_titles(data)
            for _key, raw in self._entities(data):
                doc = self._parse(raw)
                if not isinstance(doc, ItemDocument):
                    continue
                page_title = doc.site_link_title(site_key)
                if page_title is None:
                    logger.warning("Entity %s has no %s site link; skipped", doc.id, site_key)
                    continue
                found[normalized.get(page_title, page_title)] = flt.apply(doc)

        ordered = {t: found.pop(t) for t in wanted if t in found}
        ordered.update(found)
        return ordered

    def search_entities(
        self,
        term: str,
        language: str,
        *,
        entity_type: str = "item",
        limit: int | None = None,
        offset: int | None = None,
    ) -> list[SearchResult]:
        """Run ``wbsearchentities``; results keep the API's ranking order."""

        limit = limit if limit is not None else settings.search_limit
        if limit is not None and limit < 1:
            return []
        results: list[SearchResult] = []
        cont = offset
        while True:
            page_limit = None if limit is None else min(limit - len(results), SEARCH_PAGE_SIZE)
            data = self.connection.send_action(
                "wbsearchentities",
                {
                    "search": term,
                    "language": language,
                    "uselang": language,
                    "type": entity_type,
                    "limit": page_limit,
                    "continue": cont,
                },
            )
            try:
                results.extend(SearchResult.model_validate(x) for x in data.get("search") or [])
            except ValidationError as e:
                raise UnexpectedResponseError(f"Malformed search result for {term!r}: {e}") from e
            cont = data.get("search-continue")
            if limit is None or cont is None or len(results) >= limit:
                break
        return results if limit is None else results[:limit]

    # ------------------------------------------------------------------ #
    @staticmethod
    def _entities(data: dict[str, Any]) -> Iterator[tuple[str, dict[str, Any]]]:
        entities = data.get("entities")
        if entities is None:
            raise UnexpectedResponseError("wbgetentities response has no 'entities'")
        for key, raw in entities.items():
            if not isinstance(raw, dict) or "missing" in raw:
                logger.debug("Entity %s is missing", key)
                continue
            yield key, raw

    @staticmethod
    def _parse(raw: dict[str, Any]) -> EntityDocument | None:
        entity_type = raw.get("type")
        if entity_type not in SUPPORTED_ENTITY_TYPES:
            logger.warning("Skipping entity %s of unsupported type %r", raw.get("id"), entity_type)
            return None
        try:
            return parse_entity_document(raw)
        except ValidationError as e:
            raise UnexpectedResponseError(f"Malformed entity document {raw.get('id')}: {e}") from e
