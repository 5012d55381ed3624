"""SentenceTransformer-based embedding provider."""

import numpy as np
from sentence_transformers import SentenceTransformer

from musakb.exceptions import EmbeddingError
from musakb.protocols.embedder import DOCUMENT, QUERY


class SentenceTransformerEmbedder:
    """Embedding provider using sentence-transformers library.

    Runs fully offline. The default model produces 1024-dimensional vectors,
    the width of the knowledge base index, and ships a dedicated prompt for
    queries.
    """

    DEFAULT_MODEL = "mixedbread-ai/mxbai-embed-large-v1"

    def __init__(self, model_name: str | None = None, input_type: str = DOCUMENT):
        """Initialize the embedder.

        Args:
            model_name: Name of the sentence-transformers model to use.
            input_type: "document" for indexing, "query" for search.
        """
        self._model_name = model_name or self.DEFAULT_MODEL
        self.input_type = input_type
        self._model: SentenceTransformer | None = None

    @property
    def model(self) -> SentenceTransformer:
        """Lazy-load the model on first access."""
        if self._model is None:
            try:
                self._model = SentenceTransformer(self._model_name)
            except (OSError, ValueError) as e:
                raise EmbeddingError(f"Could not load model {self._model_name}: {e}") from e
        return self._model

    @property
    def dimension(self) -> int:
        """Return the embedding dimension."""
        return self.model.get_sentence_embedding_dimension()

    @property
    def model_name(self) -> str:
        """Return identifier for the model used."""
        return self._model_name

    def embed(self, texts: list[str]) -> np.ndarray:
        """Generate embeddings for a batch of texts.

        Args:
            texts: List of text strings to embed

        Returns:
            numpy array of shape (len(texts), embedding_dim)
        """
        if not texts:
            return np.array([])

        kwargs = {}
        if self.input_type == QUERY and "query" in (self.model.prompts or {}):
            kwargs["prompt_name"] = "query"

        try:
            embeddings = self.model.encode(
                texts,
                convert_to_numpy=True,
                normalize_embeddings=True,  # For cosine similarity
                **kwargs,
            )
        except (RuntimeError, ValueError) as e:
            raise EmbeddingError(f"Local embedding with {self._model_name} failed: {e}") from e
        return embeddings
