"""Embedding providers for vector generation."""

from musakb.config import Settings
from musakb.embedders.voyage import VoyageEmbedder
from musakb.protocols.embedder import DOCUMENT, EmbeddingProvider


def create_embedder(settings: Settings, input_type: str = DOCUMENT) -> EmbeddingProvider:
    """Build the embedding provider selected in ``settings``.

    Raises:
        EmbeddingNotConfiguredError: when the Voyage key is missing
    """
    if settings.embedder == "local":
        # Import here to avoid loading torch unless needed
        from musakb.embedders.sentence_transformer import SentenceTransformerEmbedder

        return SentenceTransformerEmbedder(settings.local_model, input_type=input_type)

    return VoyageEmbedder(
        settings.voyage_api_key,
        model=settings.voyage_model,
        input_type=input_type,
        output_dimension=settings.embedding_dimension,
    )


__all__ = ["create_embedder", "VoyageEmbedder"]
