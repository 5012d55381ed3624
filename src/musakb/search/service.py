"""Search entry points over the public and private knowledge stores.

Every public method returns a message string, never raises: results are
read by an agent that cannot catch structured errors, so failures are
rendered as actionable text instead.
"""

import functools
import logging
import sqlite3
from typing import Callable, Optional

import numpy as np

from musakb.config import Settings
from musakb.embedders import create_embedder
from musakb.exceptions import (
    EmbeddingError,
    EmbeddingNotConfiguredError,
    EmbeddingRejectedError,
    EmbeddingUnavailableError,
)
from musakb.models import ALL, ANALYSIS_COLLECTION, PRIVATE_COLLECTION
from musakb.protocols.embedder import QUERY, EmbeddingProvider
from musakb.search.formatting import format_results
from musakb.search.retrieval import federated_search, knn_search, merge_results
from musakb.storage import KnowledgeStore

logger = logging.getLogger(__name__)

SETUP_HINT = "The plugin is not fully configured. Please run /setup to complete the initial setup."

NOT_CONFIGURED_MESSAGE = (
    "[Voyage API key not configured: no VOYAGE_API_KEY environment variable found. "
    f"{SETUP_HINT}]"
)

REJECTED_MESSAGE = (
    "[The Voyage AI API key is not working (it may be expired, revoked, or mistyped). "
    "Please run /setup to diagnose the issue.]"
)

UNAVAILABLE_MESSAGE = (
    "[The Voyage AI service could not be reached or is rate limiting requests. "
    "Please try again in a moment.]"
)

# Collections that also live in the private store
PRIVATE_FILTERS = (ALL, PRIVATE_COLLECTION, ANALYSIS_COLLECTION, "best_practice")


def _user_facing(method: Callable[..., str]) -> Callable[..., str]:
    """Check preconditions, then turn provider and store failures into messages."""

    @functools.wraps(method)
    def wrapper(self: "SearchService", *args, **kwargs) -> str:
        error = self.check_preconditions()
        if error:
            return error
        try:
            return method(self, *args, **kwargs)
        except EmbeddingNotConfiguredError:
            return NOT_CONFIGURED_MESSAGE
        except EmbeddingRejectedError as e:
            logger.warning(f"Embedding provider rejected credentials: {e}")
            return REJECTED_MESSAGE
        except EmbeddingUnavailableError as e:
            logger.warning(f"Embedding provider unavailable: {e}")
            return UNAVAILABLE_MESSAGE
        except EmbeddingError as e:
            logger.error(f"Embedding failed: {e}")
            return f"[Embedding failed: {e}]"
        except sqlite3.Error as e:
            logger.error(f"Knowledge base read failed: {e}")
            return f"[Knowledge base could not be read: {e}. {SETUP_HINT}]"

    return wrapper


class SearchService:
    """Semantic search tools backed by ``knowledge.db`` and ``private.db``.

    ``private.db`` is optional; when it does not exist it simply adds no
    results.
    """

    def __init__(self, settings: Settings, embedder: Optional[EmbeddingProvider] = None):
        self.settings = settings
        self._embedder = embedder

    @property
    def knowledge_store(self) -> KnowledgeStore:
        return KnowledgeStore(self.settings.knowledge_db_path, self.settings.embedding_dimension)

    @property
    def private_store(self) -> KnowledgeStore:
        return KnowledgeStore(self.settings.private_db_path, self.settings.embedding_dimension)

    @property
    def embedder(self) -> EmbeddingProvider:
        if self._embedder is None:
            self._embedder = create_embedder(self.settings, input_type=QUERY)
        return self._embedder

    def check_preconditions(self) -> Optional[str]:
        """Return an error message, or None if search can run."""
        if not self.knowledge_store.exists():
            return f"[Knowledge base not found. {SETUP_HINT}]"
        if self._embedder is None and not self.settings.embedder_configured:
            return NOT_CONFIGURED_MESSAGE
        return None

    def _embed_query(self, text: str) -> np.ndarray:
        return self.embedder.embed([text])[0]

    @_user_facing
    def semantic_search(self, query: str, kind: str = ALL, n_results: int = 5) -> str:
        embedding = self._embed_query(query)
        stores = [self.knowledge_store]
        if kind in PRIVATE_FILTERS:
            stores.append(self.private_store)
        results = federated_search(stores, embedding, kind=kind, n_results=n_results)
        return format_results(results, query)

    @_user_facing
    def api_lookup(self, module_name: str, method: str = "") -> str:
        query = f"{module_name} {method}".strip()
        embedding = self._embed_query(query)
        results = knn_search(self.knowledge_store, embedding, kind="api", n_results=5)
        return format_results(results, query)

    @_user_facing
    def similar_works(self, description: str) -> str:
        embedding = self._embed_query(description)

        readmes = knn_search(self.knowledge_store, embedding, kind="demo_readme", n_results=3)
        code = knn_search(self.knowledge_store, embedding, kind="demo_code", n_results=3)
        private = knn_search(self.private_store, embedding, kind=PRIVATE_COLLECTION, n_results=3)
        readmes = merge_results([readmes, private], 3)

        return (
            f"## Demo Descriptions\n{format_results(readmes, description)}\n\n"
            f"## Demo Code\n{format_results(code, description)}"
        )

    @_user_facing
    def dependency_chain(self, concept: str) -> str:
        docs = knn_search(
            self.knowledge_store,
            self._embed_query(f"setup requirements for {concept}"),
            kind="docs",
            n_results=3,
        )
        code = knn_search(
            self.knowledge_store,
            self._embed_query(f"require include {concept}"),
            kind="demo_code",
            n_results=2,
        )
        return (
            f"## Documentation\n{format_results(docs, concept)}\n\n"
            f"## Code Examples\n{format_results(code, concept)}"
        )

    @_user_facing
    def code_pattern(self, technique: str) -> str:
        embedding = self._embed_query(technique)
        code = knn_search(self.knowledge_store, embedding, kind="demo_code", n_results=3)
        docs = knn_search(self.knowledge_store, embedding, kind="docs", n_results=2)
        return (
            f"## Code Examples\n{format_results(code, technique)}\n\n"
            f"## Related Documentation\n{format_results(docs, technique)}"
        )

    def check_setup(self) -> str:
        """Report provider and database status, distinguishing the failure modes."""
        status = ["## Plugin Setup Status", ""]

        if not self.settings.embedder_configured and self._embedder is None:
            status.append(
                "- **Voyage API key**: NOT CONFIGURED. No VOYAGE_API_KEY environment variable found. "
                "Obtain a key from https://dash.voyageai.com/ and add it to your shell profile."
            )
        else:
            try:
                self.embedder.embed(["test"])
                status.append("- **Embedding provider**: valid")
            except EmbeddingRejectedError as e:
                status.append(
                    "- **Voyage API key**: SET BUT NOT WORKING. The key is configured but the API "
                    f"rejected it. It may be expired, revoked, or mistyped. Error: {e}"
                )
            except EmbeddingError as e:
                status.append(f"- **Embedding provider**: UNAVAILABLE. {e}")

        for label, store, missing in (
            ("Knowledge base", self.knowledge_store, "NOT FOUND"),
            ("Private works DB", self.private_store, "not present (use add_work to index your works)"),
        ):
            if not store.exists():
                status.append(f"- **{label}**: {missing}")
                continue
            status.append(f"- **{label}**: present")
            try:
                for name, count in store.collection_stats().items():
                    status.append(f"  - {name}: {count} chunks")
            except sqlite3.Error as e:
                status.append(f"  - **DB error**: {e}")

        return "\n".join(status)
