"""SQLite storage for chunks, embeddings and provenance."""

from musakb.storage.jsonl import read_chunks_jsonl, read_manifest, write_chunks_jsonl
from musakb.storage.store import KnowledgeStore, rewrite_source
from musakb.storage.vector_index import VectorIndex

__all__ = [
    "KnowledgeStore",
    "VectorIndex",
    "rewrite_source",
    "write_chunks_jsonl",
    "read_chunks_jsonl",
    "read_manifest",
]
