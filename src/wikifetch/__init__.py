"""
wikifetch - fetch, filter and report Wikidata entities
"""

from .fetcher import WikibaseDataFetcher
from .models import DocumentFilter, ItemDocument, LexemeDocument, PropertyDocument, SearchResult
from .workflow import EntityReportWorkflow

__version__ = "0.1.0"

__all__ = [
    "WikibaseDataFetcher",
    "DocumentFilter",
    "ItemDocument",
    "PropertyDocument",
    "LexemeDocument",
    "SearchResult",
    "EntityReportWorkflow",
]
