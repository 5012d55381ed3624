"""Tests for KNN search, federation across stores and result formatting."""

import pytest

from musakb.search.formatting import format_results
from musakb.search.retrieval import (
    SearchResult,
    allowed_kinds,
    federated_search,
    knn_search,
    merge_results,
)
from musakb.storage import KnowledgeStore

from conftest import DIMENSION, FakeEmbedder, make_chunk, unit


def _fill(store, angles, kind="docs", prefix="musa-dsl/docs"):
    chunks = [make_chunk(f"chunk at {angle} degrees", kind=kind, source=f"{prefix}/{angle}.md") for angle in angles]
    vectors = {chunk.content: unit(angle) for chunk, angle in zip(chunks, angles)}
    store.upsert_chunks(chunks, FakeEmbedder(vectors))


def test_knn_search_returns_closest_first(store):
    _fill(store, [50, 10, 30])

    results = knn_search(store, unit(0), n_results=2)

    assert [r.content for r in results] == ["chunk at 10 degrees", "chunk at 30 degrees"]
    assert results[0].distance < results[1].distance


def test_knn_search_filters_by_kind(store):
    _fill(store, [10, 20], kind="docs")
    _fill(store, [30, 40], kind="api", prefix="musa-dsl/lib")

    results = knn_search(store, unit(0), kind="api", n_results=5)

    assert [r.kind for r in results] == ["api", "api"]
    assert [r.content for r in results] == ["chunk at 30 degrees", "chunk at 40 degrees"]


def test_knn_search_rewrites_sources(store):
    _fill(store, [10])
    store.set_metadata("github_owner", "javier-sy")
    store.set_metadata("repo:musa-dsl", "v0.27.0")

    result = knn_search(store, unit(0))[0]

    assert result.source == "https://github.com/javier-sy/musa-dsl/blob/v0.27.0/docs/10.md"


def test_unknown_kind_and_missing_store_return_nothing(store, tmp_path):
    _fill(store, [10])

    assert allowed_kinds("scores") == frozenset()
    assert knn_search(store, unit(0), kind="scores") == []
    assert knn_search(store, unit(0), n_results=0) == []
    assert knn_search(KnowledgeStore(tmp_path / "absent.db", DIMENSION), unit(0)) == []


def test_federated_search_interleaves_stores(tmp_path):
    store_a = KnowledgeStore(tmp_path / "a.db", DIMENSION)
    store_b = KnowledgeStore(tmp_path / "b.db", DIMENSION)
    store_a.initialize()
    store_b.initialize()
    _fill(store_a, [10, 30, 50])
    _fill(store_b, [20, 40, 60], kind="private_works", prefix="piece")

    results = federated_search([store_a, store_b], unit(0), n_results=5)

    assert [r.content for r in results] == [f"chunk at {angle} degrees" for angle in (10, 20, 30, 40, 50)]


def test_federated_search_is_order_independent(tmp_path):
    store_a = KnowledgeStore(tmp_path / "a.db", DIMENSION)
    store_b = KnowledgeStore(tmp_path / "b.db", DIMENSION)
    store_a.initialize()
    store_b.initialize()
    _fill(store_a, [10, 30])
    _fill(store_b, [20], kind="analysis", prefix="analysis")

    forward = federated_search([store_a, store_b], unit(0), n_results=3)
    backward = federated_search([store_b, store_a], unit(0), n_results=3)

    assert [r.content for r in forward] == [r.content for r in backward]


def test_federated_search_skips_missing_store(store, tmp_path):
    _fill(store, [10, 20])
    missing = KnowledgeStore(tmp_path / "private.db", DIMENSION)

    results = federated_search([store, missing], unit(0), n_results=5)

    assert len(results) == 2
    assert not missing.exists()


def _result(distance, content="x"):
    return SearchResult(content=content, source="s", kind="docs", section="", module="", distance=distance)


def test_merge_results_truncates():
    merged = merge_results([[_result(0.3), _result(0.5)], [_result(0.1)]], 2)

    assert [r.distance for r in merged] == [0.1, 0.3]


def test_format_results():
    results = [
        SearchResult("Series are lazy.", "musa-dsl/docs/series.md", "docs", "Series", "", 0.1),
        SearchResult("def play; end", "musa-dsl/lib/player.rb", "api", "", "Musa::Player", 0.2),
    ]

    text = format_results(results, "series")

    assert text == (
        "### Result 1\n**Source**: musa-dsl/docs/series.md > Series\n\nSeries are lazy."
        "\n\n---\n\n"
        "### Result 2\n**Source**: musa-dsl/lib/player.rb (Musa::Player)\n\ndef play; end"
    )


def test_format_results_truncates_long_content():
    text = format_results([_result(0.1, content="y" * 2500)], "q")

    assert text.endswith("y" * 10 + "\n... (truncated)")
    assert "y" * 2001 not in text


def test_format_no_results():
    assert format_results([], "canon") == "No results found for: 'canon'"


@pytest.mark.parametrize("kind", ["all", "docs", "private_works", "analysis", "best_practice"])
def test_allowed_kinds_known_filters(kind):
    assert allowed_kinds(kind)
