"""Scripted report scenarios against a Wikibase fetcher.

Each scenario makes its own API calls and prints a short human readable
report. Raw data goes to the report sink when it writes files. Remote errors
propagate to the caller; report-file failures are logged by the sink and the
run continues.
"""

from __future__ import annotations

import logging
import sys
from collections.abc import Iterable, Sequence
from typing import Protocol, TextIO

from wikifetch.models import DocumentFilter, EntityDocument, ItemDocument, SearchResult
from wikifetch.output import ReportSink

logger = logging.getLogger(__name__)

LANGUAGE_NAMES = {
    "de": "German",
    "en": "English",
    "es": "Spanish",
    "fr": "French",
    "it": "Italian",
    "nl": "Dutch",
}

SITE_NAMES = {
    "dewiki": "German Wikipedia",
    "enwiki": "English Wikipedia",
    "frwiki": "French Wikipedia",
}

SEARCH_RESULTS_FILE = "search-results.txt"

BANNER = "*" * 68


class EntityFetcher(Protocol):
    def get_entity_document(
        self, entity_id: str, filter: DocumentFilter | None = None
    ) -> EntityDocument | None: ...

    def get_entity_documents(
        self, entity_ids: Iterable[str], filter: DocumentFilter | None = None
    ) -> dict[str, EntityDocument]: ...

    def get_entity_documents_by_title(
        self, site_key: str, titles: Iterable[str], filter: DocumentFilter | None = None
    ) -> dict[str, EntityDocument]: ...

    def search_entities(self, term: str, language: str) -> list[SearchResult]: ...


def language_name(code: str) -> str:
    return LANGUAGE_NAMES.get(code, code)


def site_name(site_key: str) -> str:
    return SITE_NAMES.get(site_key, site_key)


def entity_file_name(entity_id: str) -> str:
    return f"entity-{entity_id}.txt"


def entities_file_name(entity_ids: Iterable[str]) -> str:
    return "entities-" + "-".join(entity_ids) + ".txt"


def format_search_result(result: SearchResult) -> str:
    return (
        f"RESULT {result.title} DETAILS:"
        f"\nconcept_uri:{result.concept_uri}"
        f"\ndescription:{result.description}"
        f"\nentity_ID:{result.entity_id}"
        f"\nlabel:{result.label}"
        f"\npage_ID:{result.page_id}"
        f"\nQID:{result.title}"
        f"\nURL:{result.url}"
        "\n"
    )


class EntityReportWorkflow:
    def __init__(
        self,
        fetcher: EntityFetcher,
        sink: ReportSink | None = None,
        out: TextIO | None = None,
    ):
        self.fetcher = fetcher
        self.sink = sink or ReportSink()
        self.out = out or sys.stdout

    def _print(self, line: str = "") -> None:
        print(line, file=self.out)

    def _write_raw(self, file_name: str, documents: Sequence[EntityDocument], what: str) -> None:
        if self.sink.writes_files and self.sink.write_documents(file_name, documents):
            self._print(f"Raw data for {what} written to file {file_name}")

    # ------------------------------------------------------------------ #
    def print_documentation(self) -> None:
        self._print(BANNER)
        self._print("*** wikifetch: online Wikidata entity reports")
        self._print("*** ")
        self._print(
            "*** Fetches entity data from the Wikidata.org API by QID, "
            "page title or search term, and applies filters to reduce the volume of data returned."
        )
        self._print("*** It does not download any dump files.")
        self._print(BANNER)

    def fetch_single_by_id(self, entity_id: str = "Q42", language: str = "en") -> None:
        self._print("*** Fetching data for one entity:")
        doc = self.fetcher.get_entity_document(entity_id)

        match doc:
            case ItemDocument():
                label = doc.label(language)
                if label is None:
                    self._print(f"Entity {entity_id} has no {language_name(language)} name.")
                else:
                    self._print(f"The {language_name(language)} name for entity {entity_id} is: {label}")
                self._write_raw(entity_file_name(entity_id), [doc], f"entity {entity_id}")
            case _:
                self._print(f"Entity {entity_id} was not found!")

    def fetch_multiple_by_ids(self, entity_ids: Sequence[str] = ("Q42", "P31")) -> None:
        self._print("*** Fetching data for several entities:")
        docs = self.fetcher.get_entity_documents(entity_ids)
        for entity_id, doc in docs.items():
            self._print(f"Fetched entity {entity_id} of type {doc.type}.")
        for entity_id in entity_ids:
            if entity_id not in docs:
                self._print(f"Entity {entity_id} was not found!")
        if docs:
            self._write_raw(
                entities_file_name(docs), list(docs.values()), "entities " + ", ".join(docs)
            )

    def fetch_multiple_by_titles(
        self,
        site_key: str = "enwiki",
        titles: Sequence[str] = ("Terry Pratchett", "Neil Gaiman"),
    ) -> None:
        self._print("*** Fetching data for entities by page titles:")
        docs = self.fetcher.get_entity_documents_by_title(site_key, titles)
        for title, doc in docs.items():
            self._print(f'The QID for the entity with page title "{title}" is: {doc.id}')
            self._write_raw(entity_file_name(doc.id), [doc], f"entity {doc.id}")

    def search_by_term(self, term: str = "Douglas Adams", language: str = "fr") -> None:
        self._print(f"*** Doing search on Wikidata for: {term}")
        results = self.fetcher.search_entities(term, language)
        if not results:
            self._print(f'No entities found for "{term}".')
            return
        for result in results:
            self._print(f'Found entity with QID {result.entity_id} and label "{result.label}".')
        if self.sink.writes_files:
            blocks = "\n".join(format_search_result(r) for r in results)
            if self.sink.write_text(SEARCH_RESULTS_FILE, blocks):
                self._print(f"Search results written to file {SEARCH_RESULTS_FILE}")

    def fetch_with_filters(
        self, entity_id: str = "Q8", language: str = "fr", site_key: str = "enwiki"
    ) -> None:
        self._print("*** Fetching data using filters to reduce data volume:")
        # only one language, one site link and no statements at all
        flt = DocumentFilter(languages={language}, site_links={site_key}, properties=set())
        doc = self.fetcher.get_entity_document(entity_id, filter=flt)

        match doc:
            case ItemDocument():
                label = doc.label(language)
                page_title = doc.site_link_title(site_key)
                if label is None or page_title is None:
                    self._print(
                        f"Entity {entity_id} has no {language_name(language)} label "
                        f"or no {site_name(site_key)} page."
                    )
                else:
                    self._print(
                        f"The {language_name(language)} label for entity {entity_id} is {label}"
                        f"\nand its {site_name(site_key)} page has the title {page_title}."
                    )
                self._write_raw(entity_file_name(entity_id), [doc], f"entity {entity_id}")
            case _:
                self._print(f"Entity {entity_id} was not found!")

    def run(self) -> None:
        """Run every scenario in order. Remote errors abort the run."""

        self.print_documentation()
        self.fetch_single_by_id()
        self.fetch_multiple_by_ids()
        self.fetch_multiple_by_titles()
        self.search_by_term()
        self.fetch_with_filters()
        logger.info("All scenarios finished")
