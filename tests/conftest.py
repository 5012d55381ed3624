"""Pytest configuration and shared fixtures."""

import hashlib
import math

import numpy as np
import pytest

from musakb.chunkers.base import build_chunk
from musakb.config import Settings
from musakb.storage import KnowledgeStore

DIMENSION = 8


def unit(angle_degrees: float, dimension: int = DIMENSION) -> np.ndarray:
    """Unit vector in the first plane; cosine distance to unit(0) grows with the angle."""
    vector = np.zeros(dimension, dtype=np.float32)
    vector[0] = math.cos(math.radians(angle_degrees))
    vector[1] = math.sin(math.radians(angle_degrees))
    return vector


class FakeEmbedder:
    """Deterministic embedder: fixed vectors for known texts, hashed noise otherwise."""

    def __init__(self, vectors=None, dimension: int = DIMENSION):
        self.vectors = dict(vectors or {})
        self._dimension = dimension
        self.calls: list[list[str]] = []

    @property
    def dimension(self) -> int:
        return self._dimension

    @property
    def model_name(self) -> str:
        return "fake"

    def embed(self, texts: list[str]) -> np.ndarray:
        self.calls.append(list(texts))
        return np.vstack([self._vector(text) for text in texts]).astype(np.float32)

    def _vector(self, text: str) -> np.ndarray:
        if text in self.vectors:
            return self.vectors[text]
        seed = int(hashlib.sha256(text.encode("utf-8")).hexdigest()[:8], 16)
        return np.random.default_rng(seed).standard_normal(self._dimension)


def make_chunk(content: str, kind: str = "docs", source: str = "musa-dsl/docs/guide.md", index: int = 0, **fields):
    return build_chunk(kind, source, index, content, **fields)


@pytest.fixture
def embedder():
    return FakeEmbedder()


@pytest.fixture
def settings(tmp_path):
    return Settings(
        knowledge_db_path=tmp_path / "knowledge.db",
        private_db_path=tmp_path / "private.db",
        chunks_dir=tmp_path / "chunks",
        voyage_api_key=None,
        embedding_dimension=DIMENSION,
    )


@pytest.fixture
def store(tmp_path):
    store = KnowledgeStore(tmp_path / "knowledge.db", dimension=DIMENSION)
    store.initialize()
    return store


@pytest.fixture
def private_store(tmp_path):
    store = KnowledgeStore(tmp_path / "private.db", dimension=DIMENSION)
    store.initialize()
    return store
