from __future__ import annotations

import copy
from typing import Any

import httpx
import pytest
from tenacity import wait_none

from wikifetch.api import ApiConnection
from wikifetch.fetcher import WikibaseDataFetcher

API_URL = "https://wikibase.test/w/api.php"


def _text(language: str, value: str) -> dict[str, str]:
    return {"language": language, "value": value}


ENTITIES: dict[str, dict[str, Any]] = {
    "Q42": {
        "type": "item",
        "id": "Q42",
        "lastrevid": 2011224171,
        "modified": "2023-10-01T12:00:00Z",
        "labels": {"en": _text("en", "Douglas Adams"), "fr": _text("fr", "Douglas Adams")},
        "descriptions": {"en": _text("en", "English writer and humorist (1952-2001)")},
        "aliases": {"en": [_text("en", "Douglas Noel Adams")]},
        "claims": {
            "P31": [{"mainsnak": {"snaktype": "value", "property": "P31"}, "rank": "normal"}],
        },
        "sitelinks": {
            "enwiki": {"site": "enwiki", "title": "Douglas Adams", "badges": []},
        },
    },
    "Q8": {
        "type": "item",
        "id": "Q8",
        "labels": {"en": _text("en", "happiness"), "fr": _text("fr", "bonheur")},
        "descriptions": {"en": _text("en", "mental or emotional state of well-being")},
        "aliases": [],
        "claims": {
            "P31": [{"mainsnak": {"snaktype": "value", "property": "P31"}, "rank": "normal"}],
            "P279": [{"mainsnak": {"snaktype": "value", "property": "P279"}, "rank": "normal"}],
        },
        "sitelinks": {
            "enwiki": {"site": "enwiki", "title": "Happiness", "badges": []},
            "frwiki": {"site": "frwiki", "title": "Bonheur", "badges": []},
        },
    },
    "Q46248": {
        "type": "item",
        "id": "Q46248",
        "labels": {"en": _text("en", "Terry Pratchett")},
        "sitelinks": {"enwiki": {"site": "enwiki", "title": "Terry Pratchett", "badges": []}},
    },
    "Q210059": {
        "type": "item",
        "id": "Q210059",
        "labels": {"en": _text("en", "Neil Gaiman")},
        "sitelinks": {"enwiki": {"site": "enwiki", "title": "Neil Gaiman", "badges": []}},
    },
    "P31": {
        "type": "property",
        "id": "P31",
        "datatype": "wikibase-item",
        "labels": {"en": _text("en", "instance of")},
        "claims": {},
    },
}

SEARCH_HITS: list[dict[str, Any]] = [
    {
        "id": "Q42",
        "title": "Q42",
        "pageid": 138,
        "concepturi": "http://www.wikidata.org/entity/Q42",
        "url": "//www.wikidata.org/wiki/Q42",
        "label": "Douglas Adams",
        "description": "écrivain anglais de science-fiction",
        "match": {"type": "label", "language": "fr", "text": "Douglas Adams"},
    },
    {
        "id": "Q28421831",
        "title": "Q28421831",
        "pageid": 30237587,
        "concepturi": "http://www.wikidata.org/entity/Q28421831",
        "url": "//www.wikidata.org/wiki/Q28421831",
        "label": "Douglas Adams",
        "description": "homonymie",
    },
    {
        "id": "Q21390082",
        "title": "Q21390082",
        "pageid": 23400000,
        "concepturi": "http://www.wikidata.org/entity/Q21390082",
        "url": "//www.wikidata.org/wiki/Q21390082",
        "label": "Douglas Adams",
    },
]


class WikibaseStub:
    """In-memory stand-in for the ``wbgetentities``/``wbsearchentities`` API.

    Filters are not applied server side; the client must trim documents.
    """

    def __init__(self, entities: dict[str, dict] | None = None, hits: list[dict] | None = None):
        self.entities = copy.deepcopy(ENTITIES if entities is None else entities)
        self.hits = copy.deepcopy(SEARCH_HITS if hits is None else hits)
        self.requests: list[dict[str, str]] = []
        self.redirects: dict[str, str] = {}
        self.normalize: dict[str, str] = {}

    def __call__(self, request: httpx.Request) -> httpx.Response:
        params = dict(request.url.params)
        self.requests.append(params)
        action = params.get("action")
        if action == "wbgetentities":
            if "ids" in params:
                return httpx.Response(200, json=self._by_ids(params["ids"].split("|")))
            return httpx.Response(200, json=self._by_titles(params["sites"], params["titles"].split("|")))
        if action == "wbsearchentities":
            return httpx.Response(200, json=self._search(params))
        return httpx.Response(200, json={"error": {"code": "badvalue", "info": f"Unknown action {action}"}})

    def _by_ids(self, ids: list[str]) -> dict:
        out = {}
        for i in ids:
            target = self.redirects.get(i, i)
            if target in self.entities:
                entity = copy.deepcopy(self.entities[target])
                if target != i:
                    entity["redirects"] = {"from": i, "to": target}
                out[target] = entity
            else:
                out[i] = {"id": i, "missing": ""}
        return {"entities": out, "success": 1}

    def _by_titles(self, site: str, titles: list[str]) -> dict:
        out: dict[str, Any] = {}
        normalized = []
        missing = -1
        for requested in titles:
            title = self.normalize.get(requested, requested)
            if title != requested:
                normalized.append({"from": requested, "to": title})
            match = next(
                (
                    e
                    for e in self.entities.values()
                    if (e.get("sitelinks") or {}).get(site, {}).get("title") == title
                ),
                None,
            )
            if match is None:
                out[str(missing)] = {"site": site, "title": title, "missing": ""}
                missing -= 1
            else:
                out[match["id"]] = copy.deepcopy(match)
        data: dict[str, Any] = {"entities": out, "success": 1}
        if normalized:
            data["normalized"] = {"n": normalized}
        return data

    def _search(self, params: dict[str, str]) -> dict:
        start = int(params.get("continue", 0))
        limit = int(params.get("limit", 7))
        page = self.hits[start : start + limit]
        data: dict[str, Any] = {"searchinfo": {"search": params.get("search")}, "search": page, "success": 1}
        if start + limit < len(self.hits):
            data["search-continue"] = start + limit
        return data


def connection_for(handler) -> ApiConnection:
    client = httpx.Client(transport=httpx.MockTransport(handler))
    return ApiConnection(API_URL, client=client, maxlag=5)


@pytest.fixture
def stub_api() -> WikibaseStub:
    return WikibaseStub()


@pytest.fixture
def fetcher(stub_api: WikibaseStub) -> WikibaseDataFetcher:
    f = WikibaseDataFetcher(connection_for(stub_api))
    yield f
    f.close()


@pytest.fixture
def no_retry_wait(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(ApiConnection._get.retry, "wait", wait_none())
