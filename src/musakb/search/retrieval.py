"""K-nearest-neighbour search over one store, and merging across stores."""

from dataclasses import dataclass
from typing import Iterable, Sequence

import numpy as np

from musakb.models import ALL, COLLECTIONS
from musakb.storage.store import KnowledgeStore, rewrite_source


@dataclass(frozen=True)
class SearchResult:
    """One retrieved chunk, its display fields and its cosine distance."""

    content: str
    source: str
    kind: str
    section: str
    module: str
    distance: float


def allowed_kinds(kind: str) -> frozenset[str]:
    """Collections a filter admits; unknown filters admit nothing."""
    if kind == ALL:
        return frozenset(COLLECTIONS)
    if kind in COLLECTIONS:
        return frozenset((kind,))
    return frozenset()


def knn_search(
    store: KnowledgeStore,
    query_embedding: np.ndarray,
    kind: str = ALL,
    n_results: int = 5,
) -> list[SearchResult]:
    """Closest chunks of ``kind`` in one store, closest first.

    Filtering happens after the vector lookup, so the lookup over-fetches
    (3x for "all", 2x for a single collection) and candidates are joined
    one by one until ``n_results`` survive the filter. A store that does
    not exist yet contributes nothing.
    """
    allowed = allowed_kinds(kind)
    if not allowed or n_results <= 0 or not store.exists():
        return []

    fetch_limit = n_results * 3 if kind == ALL else n_results * 2
    provenance = store.provenance()

    results: list[SearchResult] = []
    with store.connection() as conn:
        for chunk_id, distance in store.vector_index.knn(conn, query_embedding, fetch_limit):
            row = store.get_chunk(conn, chunk_id)
            if row is None or row["kind"] not in allowed:
                continue

            results.append(
                SearchResult(
                    content=row["content"],
                    source=rewrite_source(row["source"] or "unknown", provenance),
                    kind=row["kind"],
                    section=row["section"] or "",
                    module=row["module"] or "",
                    distance=distance,
                )
            )
            if len(results) >= n_results:
                break

    return results


def merge_results(result_lists: Iterable[Sequence[SearchResult]], n_results: int) -> list[SearchResult]:
    """Concatenate per-store results and keep the ``n_results`` closest.

    The merge does not depend on the order the lists arrive in, except for
    exact distance ties.
    """
    merged = [result for results in result_lists for result in results]
    merged.sort(key=lambda r: r.distance)
    return merged[:n_results]


def federated_search(
    stores: Sequence[KnowledgeStore],
    query_embedding: np.ndarray,
    kind: str = ALL,
    n_results: int = 5,
    per_store: int | None = None,
) -> list[SearchResult]:
    """Search every store with the same filter and merge by distance."""
    per_store = max(per_store or n_results, n_results)
    return merge_results(
        (knn_search(store, query_embedding, kind, per_store) for store in stores),
        n_results,
    )
