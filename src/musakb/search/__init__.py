"""Retrieval: KNN per store, federation, formatting and the search tools."""

from musakb.search.formatting import format_results
from musakb.search.retrieval import (
    SearchResult,
    allowed_kinds,
    federated_search,
    knn_search,
    merge_results,
)
from musakb.search.service import SearchService

__all__ = [
    "SearchResult",
    "SearchService",
    "allowed_kinds",
    "knn_search",
    "federated_search",
    "merge_results",
    "format_results",
]
