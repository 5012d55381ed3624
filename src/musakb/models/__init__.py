"""Data models for musakb."""

from musakb.models.chunk import (
    ALL,
    ANALYSIS_COLLECTION,
    COLLECTIONS,
    MAX_CODE_CHUNK_CHARS,
    PRIVATE_COLLECTION,
    PUBLIC_COLLECTIONS,
    Chunk,
)
from musakb.models.source import DEMO_CODE, MARKDOWN, RUBY, SourceFile

__all__ = [
    "Chunk",
    "SourceFile",
    "MARKDOWN",
    "RUBY",
    "DEMO_CODE",
    "ALL",
    "COLLECTIONS",
    "PUBLIC_COLLECTIONS",
    "PRIVATE_COLLECTION",
    "ANALYSIS_COLLECTION",
    "MAX_CODE_CHUNK_CHARS",
]
