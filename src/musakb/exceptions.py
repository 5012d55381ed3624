"""Exception types for musakb."""


class KnowledgeBaseError(Exception):
    """Base exception for all knowledge base errors."""


class AbsoluteSourceError(KnowledgeBaseError):
    """Raised when chunks would leak absolute filesystem paths into a store."""

    def __init__(self, sources: list[str]):
        self.sources = sources
        self.samples = sources[:3]
        super().__init__(
            f"{len(sources)} chunks have absolute source paths "
            "(private filesystem info would leak into the public database).\n"
            f"Samples: {', '.join(self.samples)}\n"
            "This is likely a Unicode normalization mismatch (NFC vs NFD) "
            "between the source root and the globbed file paths."
        )


class EmbeddingError(KnowledgeBaseError):
    """Raised when the embedding provider fails or misbehaves."""


class EmbeddingNotConfiguredError(EmbeddingError):
    """No credentials are available for the embedding provider."""


class EmbeddingRejectedError(EmbeddingError):
    """The provider is configured but refused the credentials."""


class EmbeddingUnavailableError(EmbeddingError):
    """Transient failure: network error, rate limit or server error."""
