"""Tests for the search service and its user-facing error messages."""

import pytest

from musakb.exceptions import (
    EmbeddingNotConfiguredError,
    EmbeddingRejectedError,
    EmbeddingUnavailableError,
)
from musakb.search import SearchService
from musakb.search.service import (
    NOT_CONFIGURED_MESSAGE,
    REJECTED_MESSAGE,
    SETUP_HINT,
    UNAVAILABLE_MESSAGE,
)

from conftest import FakeEmbedder, make_chunk, unit


class RaisingEmbedder(FakeEmbedder):
    def __init__(self, error):
        super().__init__()
        self.error = error

    def embed(self, texts):
        raise self.error


@pytest.fixture
def populated(store, private_store):
    public = [
        make_chunk("Series docs", kind="docs", source="musa-dsl/docs/series.md"),
        make_chunk("Series api", kind="api", source="musa-dsl/lib/musa-dsl/series.rb", module="Musa::Series"),
        make_chunk("Canon demo", kind="demo_code", source="musadsl-demo/demo-01/musa/score.rb"),
    ]
    private = [
        make_chunk("My canon", kind="private_works", source="my-piece/score.rb"),
        make_chunk("Canon analysis", kind="analysis", source="analysis/my-piece", section="Form"),
    ]
    vectors = {
        "Series docs": unit(5),
        "Series api": unit(15),
        "Canon demo": unit(25),
        "My canon": unit(10),
        "Canon analysis": unit(20),
    }
    store.upsert_chunks(public, FakeEmbedder(vectors))
    private_store.upsert_chunks(private, FakeEmbedder(vectors))
    return store, private_store


@pytest.fixture
def query_embedder():
    return FakeEmbedder({"canon": unit(0), "Series map": unit(0), "setup": unit(0)})


def test_missing_knowledge_base(settings, query_embedder):
    service = SearchService(settings, embedder=query_embedder)

    assert service.semantic_search("canon") == f"[Knowledge base not found. {SETUP_HINT}]"
    assert query_embedder.calls == []


def test_missing_api_key(settings, store):
    service = SearchService(settings)

    assert service.semantic_search("canon") == NOT_CONFIGURED_MESSAGE
    assert service.api_lookup("Series") == NOT_CONFIGURED_MESSAGE


def test_unexpanded_api_key_counts_as_missing(settings, store):
    service = SearchService(settings.with_overrides(voyage_api_key="${VOYAGE_API_KEY}"))

    assert service.code_pattern("canon") == NOT_CONFIGURED_MESSAGE


@pytest.mark.parametrize(
    "error, message",
    [
        (EmbeddingRejectedError("HTTP 401"), REJECTED_MESSAGE),
        (EmbeddingUnavailableError("HTTP 429"), UNAVAILABLE_MESSAGE),
        (EmbeddingNotConfiguredError("no key"), NOT_CONFIGURED_MESSAGE),
    ],
)
def test_provider_failures_become_messages(settings, store, error, message):
    service = SearchService(settings, embedder=RaisingEmbedder(error))

    assert service.semantic_search("canon") == message


def test_semantic_search_federates_private_store(settings, populated, query_embedder):
    service = SearchService(settings, embedder=query_embedder)

    text = service.semantic_search("canon", n_results=3)

    assert text.index("Series docs") < text.index("My canon") < text.index("Series api")
    assert "Canon analysis" not in text
    assert "**Source**: my-piece/score.rb" in text


def test_public_filter_skips_private_store(settings, populated, query_embedder):
    service = SearchService(settings, embedder=query_embedder)

    text = service.semantic_search("canon", kind="demo_code")

    assert "Canon demo" in text
    assert "My canon" not in text


def test_analysis_filter(settings, populated, query_embedder):
    service = SearchService(settings, embedder=query_embedder)

    text = service.semantic_search("canon", kind="analysis")

    assert text == "### Result 1\n**Source**: analysis/my-piece > Form\n\nCanon analysis"


def test_unknown_filter_finds_nothing(settings, populated, query_embedder):
    service = SearchService(settings, embedder=query_embedder)

    assert service.semantic_search("canon", kind="scores") == "No results found for: 'canon'"


def test_api_lookup(settings, populated, query_embedder):
    service = SearchService(settings, embedder=query_embedder)

    text = service.api_lookup("Series", "map")

    assert text == "### Result 1\n**Source**: musa-dsl/lib/musa-dsl/series.rb (Musa::Series)\n\nSeries api"
    assert query_embedder.calls == [["Series map"]]


def test_similar_works_merges_demos_and_private_works(settings, populated, query_embedder):
    service = SearchService(settings, embedder=query_embedder)

    text = service.similar_works("canon")

    assert text.startswith("## Demo Descriptions\n")
    assert "My canon" in text
    assert "## Demo Code\n" in text
    assert "Canon demo" in text


def test_dependency_chain_and_code_pattern(settings, populated, query_embedder):
    service = SearchService(settings, embedder=query_embedder)

    assert service.dependency_chain("setup").startswith("## Documentation\n")
    assert [call[0] for call in query_embedder.calls] == [
        "setup requirements for setup",
        "require include setup",
    ]
    pattern = service.code_pattern("canon")
    assert pattern.startswith("## Code Examples\n")
    assert "## Related Documentation\n" in pattern


def test_check_setup_reports_valid_provider(settings, populated, query_embedder):
    report = SearchService(settings, embedder=query_embedder).check_setup()

    assert "- **Embedding provider**: valid" in report
    assert "- **Knowledge base**: present" in report
    assert "  - docs: 1 chunks" in report
    assert "  - private_works: 1 chunks" in report


def test_check_setup_distinguishes_failures(settings, store):
    assert "NOT CONFIGURED" in SearchService(settings).check_setup()

    rejected = SearchService(settings, embedder=RaisingEmbedder(EmbeddingRejectedError("HTTP 401")))
    assert "SET BUT NOT WORKING" in rejected.check_setup()

    down = SearchService(settings, embedder=RaisingEmbedder(EmbeddingUnavailableError("timeout")))
    report = down.check_setup()
    assert "UNAVAILABLE" in report
    assert "- **Private works DB**: not present" in report
