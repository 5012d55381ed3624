"""Protocol for embedding model providers."""

from typing import Protocol, runtime_checkable

import numpy as np

DOCUMENT = "document"
QUERY = "query"


@runtime_checkable
class EmbeddingProvider(Protocol):
    """Protocol for embedding model providers.

    Allows swapping between the Voyage AI API and a local
    sentence-transformers model. Each instance embeds either documents or
    queries (``input_type``), since retrieval models encode them differently.
    """

    @property
    def dimension(self) -> int:
        """Return the embedding dimension."""
        ...

    @property
    def model_name(self) -> str:
        """Return identifier for the model used."""
        ...

    def embed(self, texts: list[str]) -> np.ndarray:
        """Generate embeddings for a batch of texts.

        Returns: numpy array of shape (len(texts), embedding_dim), same order
        as ``texts``

        Raises:
            EmbeddingError: on any provider failure
        """
        ...
