"""Protocol definitions for extensible components."""

from musakb.protocols.chunker import ChunkingStrategy
from musakb.protocols.embedder import DOCUMENT, QUERY, EmbeddingProvider
from musakb.protocols.ingester import Ingester

__all__ = ["Ingester", "EmbeddingProvider", "ChunkingStrategy", "DOCUMENT", "QUERY"]
